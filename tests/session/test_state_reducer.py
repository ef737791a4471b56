"""Tests for the task list reducer."""

import pytest

from taskpad.models import Provenance, TaskView
from taskpad.state import (
    DragWarningExpired,
    DragWarningShown,
    ErrorCleared,
    ErrorRaised,
    FilterChanged,
    Loaded,
    LocalTaskAdded,
    Reordered,
    SignedOut,
    SortChanged,
    TaskListState,
    WarningRaised,
    reduce,
)


def _task(task_id: str, **fields) -> TaskView:
    return TaskView(id=task_id, text=task_id, **fields)


def test_loaded_tags_provenance():
    state = reduce(
        TaskListState(),
        Loaded((_task("a"), _task("b")), local=(_task("local-1"),)),
    )
    assert [t.provenance for t in state.tasks] == [
        Provenance.CONFIRMED,
        Provenance.CONFIRMED,
        Provenance.LOCAL_ONLY,
    ]


def test_reduce_returns_new_state():
    before = TaskListState()
    after = reduce(before, LocalTaskAdded(_task("local-1")))
    assert before.tasks == ()
    assert after.tasks[0].is_local


def test_reordered_rewrites_named_ranks_only():
    state = TaskListState(tasks=(_task("a", order=7), _task("b", order=8), _task("c", order=50)))
    state = reduce(state, Reordered(("b", "a")))
    assert {t.id: t.order for t in state.tasks} == {"a": 2, "b": 1, "c": 50}
    assert [t.id for t in state.visible] == ["b", "a", "c"]


def test_filter_and_sort_changes():
    state = reduce(TaskListState(), FilterChanged("completed"))
    state = reduce(state, SortChanged("deadline"))
    assert (state.filter, state.sort) == ("completed", "deadline")

    with pytest.raises(ValueError):
        reduce(state, FilterChanged("archived"))
    with pytest.raises(ValueError):
        reduce(state, SortChanged("alphabetical"))


def test_error_and_warning_messages():
    state = reduce(TaskListState(), ErrorRaised("boom"))
    state = reduce(state, WarningRaised("careful"))
    assert (state.error, state.warning) == ("boom", "careful")

    state = reduce(state, Loaded(()))
    assert state.error == "boom"

    state = reduce(state, ErrorCleared())
    assert (state.error, state.warning) == ("", "")


def test_drag_warning_expires():
    state = reduce(TaskListState(), DragWarningShown("a", expires_at=110.0))

    state = reduce(state, DragWarningExpired(now=109.9))
    assert state.drag_warning is not None
    assert state.drag_warning.task_id == "a"

    state = reduce(state, DragWarningExpired(now=110.0))
    assert state.drag_warning is None


def test_signed_out_resets():
    state = TaskListState(tasks=(_task("a"),), filter="pending", error="x")
    assert reduce(state, SignedOut()) == TaskListState()


def test_unknown_action():
    with pytest.raises(TypeError):
        reduce(TaskListState(), object())
