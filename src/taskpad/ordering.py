"""Visible-list derivation and manual (drag and drop) ordering."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from .models import STATUS_COMPLETED, STATUS_PENDING, TaskView

FILTERS = ("all", STATUS_PENDING, STATUS_COMPLETED)
SORTS = ("manual", "createdAt", "deadline")

# Tasks without a rank go after every ranked task, including millisecond defaults.
MISSING_ORDER = math.inf


def _order_key(task: TaskView) -> float:
    return task.order if task.order is not None else MISSING_ORDER


def _created_key(task: TaskView) -> float:
    return task.created_at.timestamp() if task.created_at else 0.0


def _deadline_key(task: TaskView) -> tuple[bool, str]:
    return (not task.deadline, task.deadline or "")


def visible_tasks(
    tasks: Sequence[TaskView],
    status_filter: str = "all",
    sort: str = "manual",
) -> list[TaskView]:
    """Derive the displayed list from all tasks, a status filter and a sort mode.

    The manual rank is always applied first, so later sorts fall back to it
    for ties (Python's sort is stable).
    """
    if status_filter not in FILTERS:
        raise ValueError(f"Unknown filter {status_filter!r}")
    if sort not in SORTS:
        raise ValueError(f"Unknown sort {sort!r}")

    result = [t for t in tasks if status_filter == "all" or t.status == status_filter]
    result.sort(key=_order_key)

    if sort == "createdAt":
        result.sort(key=_created_key, reverse=True)
    elif sort == "deadline":
        result.sort(key=_deadline_key)
    return result


def move(items: Sequence[TaskView], source: int, destination: int) -> list[TaskView]:
    """Return a copy with the element at ``source`` moved to ``destination``."""
    if not 0 <= source < len(items):
        raise IndexError(f"source index {source} out of range")
    if not 0 <= destination < len(items):
        raise IndexError(f"destination index {destination} out of range")
    result = list(items)
    moved = result.pop(source)
    result.insert(destination, moved)
    return result


def rank_updates(ordered_ids: Sequence[str]) -> dict[str, int]:
    """Ranks 1..N in sequence order, as the service assigns them."""
    return {task_id: rank for rank, task_id in enumerate(ordered_ids, start=1)}


def drop_ranks(tasks: Sequence[TaskView]) -> dict[str, int]:
    """Ranks for a reordered list that may hold local-only tasks.

    Confirmed tasks get 1..K in sequence, matching what the service assigns
    when only their ids are sent. A local-only task takes the rank of the
    confirmed task before it (0 at the head); confirmed tasks are listed
    ahead of local ones, so the stable order sort keeps it in place.
    """
    ranks: dict[str, int] = {}
    rank = 0
    for task in tasks:
        if not task.is_local:
            rank += 1
        ranks[task.id] = rank
    return ranks


def counts(tasks: Sequence[TaskView]) -> tuple[int, int]:
    """Return (pending, completed) counts."""
    pending = sum(1 for t in tasks if t.status == STATUS_PENDING)
    completed = sum(1 for t in tasks if t.status == STATUS_COMPLETED)
    return pending, completed


@dataclass(frozen=True)
class DragResult:
    source_index: int
    destination_index: int | None = None


class DropKind(str, Enum):
    IGNORED = "ignored"  # not in manual mode
    UNCHANGED = "unchanged"
    NO_DESTINATION = "no_destination"
    REORDERED = "reordered"


@dataclass(frozen=True)
class DropOutcome:
    kind: DropKind
    tasks: list[TaskView] = field(default_factory=list)
    task_id: str | None = None

    @property
    def ordered_ids(self) -> list[str]:
        return [t.id for t in self.tasks]


def apply_drop(visible: Sequence[TaskView], sort: str, result: DragResult) -> DropOutcome:
    """Resolve a finished drag against the currently visible list."""
    if sort != "manual":
        return DropOutcome(DropKind.IGNORED)

    if result.destination_index is None:
        task_id = None
        if 0 <= result.source_index < len(visible):
            task_id = visible[result.source_index].id
        return DropOutcome(DropKind.NO_DESTINATION, task_id=task_id)

    if result.source_index == result.destination_index:
        return DropOutcome(DropKind.UNCHANGED)

    reordered = move(visible, result.source_index, result.destination_index)
    return DropOutcome(DropKind.REORDERED, tasks=reordered)
