"""Task list state as an immutable snapshot plus a pure reducer.

Every task carries a provenance flag: ``confirmed`` tasks came from the
service, ``local-only`` tasks exist only in the offline buffer. All updates go
through :func:`reduce`, which never mutates its input.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

from .models import Provenance, TaskView
from .ordering import FILTERS, SORTS, drop_ranks, visible_tasks
from .ordering import counts as task_counts


@dataclass(frozen=True)
class DragWarning:
    task_id: str
    expires_at: float


@dataclass(frozen=True)
class TaskListState:
    tasks: tuple[TaskView, ...] = ()
    filter: str = "all"
    sort: str = "manual"
    error: str = ""
    warning: str = ""
    drag_warning: DragWarning | None = None

    @property
    def visible(self) -> list[TaskView]:
        return visible_tasks(self.tasks, self.filter, self.sort)

    @property
    def counts(self) -> tuple[int, int]:
        return task_counts(self.tasks)

    def find(self, task_id: str) -> TaskView | None:
        return next((t for t in self.tasks if t.id == task_id), None)


# ---- actions ----

@dataclass(frozen=True)
class Loaded:
    """Fresh server list; ``local`` are the still-buffered offline tasks."""

    confirmed: tuple[TaskView, ...]
    local: tuple[TaskView, ...] = ()


@dataclass(frozen=True)
class LocalTaskAdded:
    task: TaskView


@dataclass(frozen=True)
class Reordered:
    ordered_ids: tuple[str, ...]


@dataclass(frozen=True)
class FilterChanged:
    value: str


@dataclass(frozen=True)
class SortChanged:
    value: str


@dataclass(frozen=True)
class ErrorRaised:
    message: str


@dataclass(frozen=True)
class WarningRaised:
    message: str


@dataclass(frozen=True)
class ErrorCleared:
    pass


@dataclass(frozen=True)
class DragWarningShown:
    task_id: str
    expires_at: float


@dataclass(frozen=True)
class DragWarningExpired:
    now: float


@dataclass(frozen=True)
class SignedOut:
    pass


Action = Union[
    Loaded,
    LocalTaskAdded,
    Reordered,
    FilterChanged,
    SortChanged,
    ErrorRaised,
    WarningRaised,
    ErrorCleared,
    DragWarningShown,
    DragWarningExpired,
    SignedOut,
]


def reduce(state: TaskListState, action: Action) -> TaskListState:
    """Return the state that follows ``action``."""
    if isinstance(action, Loaded):
        confirmed = tuple(replace(t, provenance=Provenance.CONFIRMED) for t in action.confirmed)
        local = tuple(replace(t, provenance=Provenance.LOCAL_ONLY) for t in action.local)
        return replace(state, tasks=confirmed + local)

    if isinstance(action, LocalTaskAdded):
        task = replace(action.task, provenance=Provenance.LOCAL_ONLY)
        return replace(state, tasks=state.tasks + (task,))

    if isinstance(action, Reordered):
        by_id = {t.id: t for t in state.tasks}
        ranks = drop_ranks([by_id[i] for i in action.ordered_ids if i in by_id])
        tasks = tuple(t.with_order(ranks[t.id]) if t.id in ranks else t for t in state.tasks)
        return replace(state, tasks=tasks, drag_warning=None)

    if isinstance(action, FilterChanged):
        if action.value not in FILTERS:
            raise ValueError(f"Unknown filter {action.value!r}")
        return replace(state, filter=action.value)

    if isinstance(action, SortChanged):
        if action.value not in SORTS:
            raise ValueError(f"Unknown sort {action.value!r}")
        return replace(state, sort=action.value)

    if isinstance(action, ErrorRaised):
        return replace(state, error=action.message)

    if isinstance(action, WarningRaised):
        return replace(state, warning=action.message)

    if isinstance(action, ErrorCleared):
        return replace(state, error="", warning="")

    if isinstance(action, DragWarningShown):
        return replace(state, drag_warning=DragWarning(action.task_id, action.expires_at))

    if isinstance(action, DragWarningExpired):
        if state.drag_warning is not None and action.now >= state.drag_warning.expires_at:
            return replace(state, drag_warning=None)
        return state

    if isinstance(action, SignedOut):
        return TaskListState()

    raise TypeError(f"Unknown action {action!r}")
