"""Tests for visible-list derivation and drag-and-drop ordering."""

from datetime import datetime, timezone

import pytest

from taskpad.models import Provenance, TaskView
from taskpad.ordering import (
    DragResult,
    DropKind,
    apply_drop,
    counts,
    drop_ranks,
    move,
    rank_updates,
    visible_tasks,
)


def _task(task_id: str, **fields) -> TaskView:
    return TaskView(id=task_id, text=task_id, **fields)


def _ids(tasks) -> list[str]:
    return [t.id for t in tasks]


class TestVisibleTasks:
    """Tests for visible_tasks()."""

    def test_manual_sorts_by_order(self):
        tasks = [_task("a", order=3), _task("b", order=1), _task("c", order=2)]
        assert _ids(visible_tasks(tasks, "all", "manual")) == ["b", "c", "a"]

    def test_missing_order_sorts_last(self):
        tasks = [_task("none"), _task("ms", order=1736900000000), _task("one", order=1)]
        assert _ids(visible_tasks(tasks)) == ["one", "ms", "none"]

    def test_equal_order_keeps_insertion_sequence(self):
        tasks = [_task("first", order=5), _task("second", order=5), _task("third", order=1)]
        assert _ids(visible_tasks(tasks)) == ["third", "first", "second"]

    def test_filter_by_status(self):
        tasks = [
            _task("p1", order=1),
            _task("c1", order=2, status="completed"),
            _task("p2", order=3),
        ]
        assert _ids(visible_tasks(tasks, "pending")) == ["p1", "p2"]
        assert _ids(visible_tasks(tasks, "completed")) == ["c1"]
        assert _ids(visible_tasks(tasks, "all")) == ["p1", "c1", "p2"]

    def test_deadline_sort_puts_empty_last(self):
        tasks = [
            _task("feb", deadline="2026-02-01", order=1),
            _task("none", deadline="", order=2),
            _task("jan", deadline="2026-01-01", order=3),
        ]
        result = visible_tasks(tasks, "all", "deadline")
        assert [t.deadline for t in result] == ["2026-01-01", "2026-02-01", ""]

    def test_deadline_sort_keeps_rank_order_among_empty(self):
        tasks = [
            _task("late", deadline="", order=9),
            _task("dated", deadline="2026-03-01", order=5),
            _task("early", deadline="", order=1),
        ]
        assert _ids(visible_tasks(tasks, "all", "deadline")) == ["dated", "early", "late"]

    def test_created_sort_newest_first(self):
        tasks = [
            _task("old", created_at=datetime(2026, 1, 1, tzinfo=timezone.utc), order=1),
            _task("unsynced", provenance=Provenance.LOCAL_ONLY, order=2),
            _task("new", created_at=datetime(2026, 1, 3, tzinfo=timezone.utc), order=3),
        ]
        assert _ids(visible_tasks(tasks, "all", "createdAt")) == ["new", "old", "unsynced"]

    def test_input_not_mutated(self):
        tasks = [_task("a", order=2), _task("b", order=1)]
        visible_tasks(tasks)
        assert _ids(tasks) == ["a", "b"]

    def test_unknown_modes_rejected(self):
        with pytest.raises(ValueError):
            visible_tasks([], "done")
        with pytest.raises(ValueError):
            visible_tasks([], "all", "priority")


class TestMove:
    """Tests for move() and rank_updates()."""

    def test_move_forward_and_back(self):
        tasks = [_task("a"), _task("b"), _task("c"), _task("d")]
        assert _ids(move(tasks, 0, 2)) == ["b", "c", "a", "d"]
        assert _ids(move(tasks, 3, 0)) == ["d", "a", "b", "c"]
        assert _ids(tasks) == ["a", "b", "c", "d"]

    def test_move_out_of_range(self):
        tasks = [_task("a"), _task("b")]
        with pytest.raises(IndexError):
            move(tasks, 2, 0)
        with pytest.raises(IndexError):
            move(tasks, 0, 5)

    def test_rank_updates(self):
        assert rank_updates(["a", "b", "c"]) == {"a": 1, "b": 2, "c": 3}

    def test_counts(self):
        tasks = [_task("a"), _task("b", status="completed"), _task("c")]
        assert counts(tasks) == (2, 1)


class TestApplyDrop:
    """Tests for apply_drop()."""

    visible = [_task("a", order=1), _task("b", order=2), _task("c", order=3)]

    def test_ignored_outside_manual_mode(self):
        outcome = apply_drop(self.visible, "deadline", DragResult(0, 2))
        assert outcome.kind is DropKind.IGNORED
        assert outcome.tasks == []

    def test_missing_destination_reports_task(self):
        outcome = apply_drop(self.visible, "manual", DragResult(1, None))
        assert outcome.kind is DropKind.NO_DESTINATION
        assert outcome.task_id == "b"

    def test_same_index_is_unchanged(self):
        outcome = apply_drop(self.visible, "manual", DragResult(1, 1))
        assert outcome.kind is DropKind.UNCHANGED

    def test_reorder(self):
        outcome = apply_drop(self.visible, "manual", DragResult(2, 0))
        assert outcome.kind is DropKind.REORDERED
        assert outcome.ordered_ids == ["c", "a", "b"]


class TestDropRanks:
    """Tests for drop_ranks()."""

    def test_confirmed_only_matches_rank_updates(self):
        tasks = [TaskView(id=i, text=i) for i in ("c", "a", "b")]
        assert drop_ranks(tasks) == rank_updates(["c", "a", "b"])

    def test_local_tasks_share_preceding_rank(self):
        local = Provenance.LOCAL_ONLY
        tasks = [
            TaskView(id="local-1", text="x", provenance=local),
            TaskView(id="a", text="a"),
            TaskView(id="local-2", text="y", provenance=local),
            TaskView(id="b", text="b"),
        ]
        assert drop_ranks(tasks) == {"local-1": 0, "a": 1, "local-2": 1, "b": 2}
