"""Tests for the mutation functions (board/mutations.py)."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from flowstate_kanban.board.model import Priority, Stage
from flowstate_kanban.board.mutations import (
    Direction,
    TaskDraft,
    create_task,
    cycle_priority,
    delete_task,
    duplicate_task,
    edit_task,
    move_to_stage,
    new_task_id,
    parse_tags,
    reset_board,
    step,
)
from flowstate_kanban.board.seed import seed_tasks
from flowstate_kanban.board.views import group_by_stage

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def tasks():
    return seed_tasks()


def _by_id(tasks, task_id):
    return next(t for t in tasks if t.id == task_id)


class TestParseTags:
    def test_trims_and_dedupes(self) -> None:
        assert parse_tags("ui, ui, auth") == ["ui", "auth"]

    def test_drops_empty_parts(self) -> None:
        assert parse_tags(" , a,, b ,") == ["a", "b"]
        assert parse_tags("") == []
        assert parse_tags(None) == []

    def test_accepts_list(self) -> None:
        assert parse_tags([" x ", "y", "x"]) == ["x", "y"]


class TestCreateTask:
    def test_create_trims_and_appends(self, tasks) -> None:
        draft = TaskDraft(title=" Fix login ", tags="ui, ui, auth", assignee=" Jo ")
        result = create_task(tasks, draft, now=NOW)
        assert len(result) == 7
        assert result[:6] == tasks
        created = result[-1]
        assert created.title == "Fix login"
        assert created.tags == ["ui", "auth"]
        assert created.assignee == "Jo"
        assert created.stage is Stage.BACKLOG
        assert created.priority is Priority.MEDIUM
        assert created.created_at == NOW
        assert created.due_date is None
        assert created.id.startswith("task-")

    def test_input_not_modified(self, tasks) -> None:
        create_task(tasks, TaskDraft(title="New"))
        assert len(tasks) == 6

    def test_blank_title_rejected(self, tasks) -> None:
        assert create_task(tasks, TaskDraft(title="   ")) is tasks
        assert TaskDraft(title="").validate()

    def test_stage_priority_and_due_date(self, tasks) -> None:
        draft = TaskDraft(title="Ship", priority="high", stage="review", due_date="2024-06-01")
        created = create_task(tasks, draft)[-1]
        assert created.priority is Priority.HIGH
        assert created.stage is Stage.REVIEW
        assert created.due_date == date(2024, 6, 1)

    def test_bad_due_date_is_dropped(self, tasks) -> None:
        created = create_task(tasks, TaskDraft(title="Ship", due_date="someday"))[-1]
        assert created.due_date is None

    def test_naive_now_is_stored_as_utc(self, tasks) -> None:
        naive = datetime(2024, 5, 1, 12, 0, 0, 456789)
        result = create_task(tasks, TaskDraft(title="Ship"), now=naive)
        created = result[-1]
        assert created.created_at == datetime(2024, 5, 1, 12, 0, 0, 456000, tzinfo=timezone.utc)
        assert created.to_dict()["createdAt"] == "2024-05-01T12:00:00.456Z"
        assert [t.id for t in group_by_stage(result)[Stage.BACKLOG]][-1] == created.id

    def test_id_factory_collision_falls_back(self, tasks) -> None:
        created = create_task(tasks, TaskDraft(title="x"), id_factory=lambda existing: "T-101")[-1]
        assert created.id != "T-101"
        created = create_task(tasks, TaskDraft(title="x"), id_factory=lambda existing: "T-900")[-1]
        assert created.id == "T-900"

    def test_new_task_id_unique(self) -> None:
        ids: set[str] = set()
        for _ in range(100):
            ids.add(new_task_id(ids))
        assert len(ids) == 100


class TestStageChanges:
    def test_move_to_stage(self, tasks) -> None:
        result = move_to_stage(tasks, "T-101", Stage.DONE)
        assert _by_id(result, "T-101").stage is Stage.DONE
        assert _by_id(tasks, "T-101").stage is Stage.BACKLOG
        assert [t.id for t in result] == [t.id for t in tasks]

    def test_move_to_same_stage_is_noop(self, tasks) -> None:
        assert move_to_stage(tasks, "T-101", Stage.BACKLOG) is tasks

    def test_move_unknown_is_noop(self, tasks) -> None:
        assert move_to_stage(tasks, "nope", Stage.DONE) is tasks

    def test_step_forward_and_back(self, tasks) -> None:
        result = step(tasks, "T-103", Direction.FORWARD)
        assert _by_id(result, "T-103").stage is Stage.REVIEW
        result = step(result, "T-103", Direction.BACKWARD)
        result = step(result, "T-103", Direction.BACKWARD)
        assert _by_id(result, "T-103").stage is Stage.IN_PROGRESS

    def test_step_stops_at_edges(self, tasks) -> None:
        assert step(tasks, "T-101", Direction.BACKWARD) is tasks
        assert step(tasks, "T-105", Direction.FORWARD) is tasks
        assert step(tasks, "nope", Direction.FORWARD) is tasks


class TestOtherEdits:
    def test_cycle_priority_three_times_returns(self, tasks) -> None:
        result = cycle_priority(tasks, "T-105")
        assert _by_id(result, "T-105").priority is Priority.MEDIUM
        result = cycle_priority(cycle_priority(result, "T-105"), "T-105")
        assert _by_id(result, "T-105").priority is Priority.LOW
        assert cycle_priority(tasks, "nope") is tasks

    def test_duplicate(self, tasks) -> None:
        result = duplicate_task(tasks, "T-105", now=NOW)
        assert len(result) == 7
        original = _by_id(result, "T-105")
        copy = result[-1]
        assert copy.title == "Customer interview synthesis (Copy)"
        assert copy.id not in {t.id for t in tasks}
        assert copy.stage is original.stage
        assert copy.priority is original.priority
        assert copy.tags == original.tags
        assert copy.tags is not original.tags
        assert copy.created_at == NOW

    def test_duplicate_created_after_original(self, tasks) -> None:
        original = _by_id(tasks, "T-105")
        early = original.created_at - timedelta(days=1)
        copy = duplicate_task(tasks, "T-105", now=early)[-1]
        assert copy.created_at > original.created_at

    def test_duplicate_with_offset_now(self, tasks) -> None:
        now = datetime(2024, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        copy = duplicate_task(tasks, "T-101", now=now)[-1]
        assert copy.created_at == NOW
        assert copy.created_at.tzinfo is not None

    def test_duplicate_unknown_is_noop(self, tasks) -> None:
        assert duplicate_task(tasks, "nope") is tasks

    def test_delete(self, tasks) -> None:
        result = delete_task(tasks, "T-103")
        assert [t.id for t in result] == ["T-101", "T-102", "T-104", "T-105", "T-106"]
        assert delete_task(tasks, "nope") is tasks

    def test_edit_fields(self, tasks) -> None:
        result = edit_task(
            tasks,
            "T-103",
            {"title": "Event schema v2", "priority": "high", "tags": "analytics, data", "due_date": "2024-07-01"},
        )
        edited = _by_id(result, "T-103")
        assert edited.title == "Event schema v2"
        assert edited.priority is Priority.HIGH
        assert edited.tags == ["analytics", "data"]
        assert edited.due_date == date(2024, 7, 1)
        assert edited.created_at == _by_id(tasks, "T-103").created_at

    def test_edit_clears_due_date(self, tasks) -> None:
        result = edit_task(tasks, "T-101", {"due_date": None})
        assert _by_id(result, "T-101").due_date is None

    def test_edit_ignores_bad_values_and_locked_fields(self, tasks) -> None:
        changes = {"priority": "urgent", "due_date": "later", "id": "X", "stage": "done"}
        assert edit_task(tasks, "T-101", changes) is tasks

    def test_edit_without_change_is_noop(self, tasks) -> None:
        assert edit_task(tasks, "T-101", {"title": "Design onboarding flow"}) is tasks
        assert edit_task(tasks, "nope", {"title": "x"}) is tasks

    def test_reset_board(self) -> None:
        assert [t.id for t in reset_board()] == [t.id for t in seed_tasks()]
