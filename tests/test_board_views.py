"""Tests for the board projections (board/views.py)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from flowstate_kanban.board.filters import FilterCriteria
from flowstate_kanban.board.model import Priority, Stage, Task
from flowstate_kanban.board.seed import seed_tasks
from flowstate_kanban.board.views import (
    distinct_assignees,
    distinct_tags,
    group_by_stage,
    project_board,
    stage_stats,
)

BASE = datetime(2024, 4, 1, 9, 0, tzinfo=timezone.utc)


def _task(task_id: str, priority: Priority, minutes: int, stage: Stage = Stage.BACKLOG) -> Task:
    return Task(
        id=task_id,
        title=task_id,
        stage=stage,
        priority=priority,
        created_at=BASE + timedelta(minutes=minutes),
    )


class TestGroupByStage:
    def test_every_stage_present(self) -> None:
        columns = group_by_stage([])
        assert list(columns) == list(Stage.ordered())
        assert all(col == [] for col in columns.values())

    def test_priority_then_creation_order(self) -> None:
        tasks = [
            _task("low-old", Priority.LOW, 0),
            _task("med-new", Priority.MEDIUM, 30),
            _task("high-new", Priority.HIGH, 20),
            _task("med-old", Priority.MEDIUM, 10),
            _task("high-old", Priority.HIGH, 5),
        ]
        column = group_by_stage(tasks)[Stage.BACKLOG]
        assert [t.id for t in column] == ["high-old", "high-new", "med-old", "med-new", "low-old"]

    def test_ties_keep_input_order(self) -> None:
        tasks = [_task("b", Priority.HIGH, 0), _task("a", Priority.HIGH, 0)]
        assert [t.id for t in group_by_stage(tasks)[Stage.BACKLOG]] == ["b", "a"]

    def test_seed_board(self) -> None:
        columns = group_by_stage(seed_tasks())
        assert [t.id for t in columns[Stage.BACKLOG]] == ["T-101", "T-106"]
        assert [t.id for t in columns[Stage.DONE]] == ["T-105"]

    def test_input_not_reordered(self) -> None:
        tasks = seed_tasks()
        before = [t.id for t in tasks]
        group_by_stage(tasks)
        assert [t.id for t in tasks] == before


class TestFacets:
    def test_distinct_tags_sorted(self) -> None:
        tags = distinct_tags(seed_tasks())
        assert tags == sorted(tags)
        assert tags.count("frontend") == 1
        assert "a11y" in tags

    def test_distinct_assignees_skip_unassigned(self) -> None:
        tasks = [*seed_tasks(), _task("anon", Priority.LOW, 0)]
        assert distinct_assignees(tasks) == ["Jasper", "Liam", "Naomi", "Priya", "Rohan"]


class TestStageStats:
    def test_seed_board_stats(self) -> None:
        stats = {s.stage: s for s in stage_stats(seed_tasks())}
        assert stats[Stage.BACKLOG].count == 2
        assert stats[Stage.BACKLOG].percentage == 33
        assert stats[Stage.IN_PROGRESS].percentage == 17
        assert stats[Stage.DONE].count == 1
        assert stats[Stage.DONE].display_value == 1
        assert stats[Stage.BACKLOG].display_value == 33

    def test_half_rounds_up(self) -> None:
        tasks = [_task(f"t{i}", Priority.LOW, i) for i in range(7)]
        tasks.append(_task("d0", Priority.LOW, 0, Stage.DONE))
        stats = {s.stage: s for s in stage_stats(tasks)}
        # 1 of 8 is 12.5 percent
        assert stats[Stage.DONE].percentage == 13

    def test_empty_board(self) -> None:
        stats = stage_stats([])
        assert [s.stage for s in stats] == list(Stage.ordered())
        assert all(s.count == 0 and s.percentage == 0 for s in stats)


class TestProjectBoard:
    def test_filtered_columns_full_facets(self) -> None:
        view = project_board(seed_tasks(), FilterCriteria(priority="high"))
        assert view.visible == 2
        assert view.total == 6
        assert [t.id for t in view.columns[Stage.BACKLOG]] == ["T-101"]
        assert view.columns[Stage.DONE] == []
        assert "Rohan" in view.assignees
        assert sum(s.count for s in view.stats) == 6

    def test_to_dict(self) -> None:
        data = project_board(seed_tasks()).to_dict()
        assert set(data["columns"]) == {s.value for s in Stage}
        assert data["visible"] == data["total"] == 6
        assert data["stats"][0] == {
            "stage": "backlog",
            "title": "Backlog",
            "description": "Ideas, requests, and future work",
            "count": 2,
            "percentage": 33,
            "display_value": 33,
        }
