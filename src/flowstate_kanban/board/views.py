"""Pure projections of a task set into the views a renderer reads.

Columns are computed from the filtered set; facets (tags, assignees) and
per-stage statistics are computed from the full board so the filter
selectors never lose their options.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from .filters import FilterCriteria, filter_tasks
from .model import Stage, Task


def group_by_stage(tasks: Iterable[Task]) -> dict[Stage, list[Task]]:
    """Bucket *tasks* by stage, each bucket sorted by priority then creation time.

    Every stage key is present.  ``list.sort`` is stable, so tasks tied on
    both keys keep their input order.
    """
    columns: dict[Stage, list[Task]] = {stage: [] for stage in Stage.ordered()}
    for t in tasks:
        columns[t.stage].append(t)
    for col_tasks in columns.values():
        col_tasks.sort(key=lambda t: (t.priority.sort_key, t.created_at))
    return columns


def distinct_tags(tasks: Iterable[Task]) -> list[str]:
    return sorted({tag for t in tasks for tag in t.tags})


def distinct_assignees(tasks: Iterable[Task]) -> list[str]:
    return sorted({t.assignee for t in tasks if t.is_assigned})


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class StageStat:
    stage: Stage
    count: int
    percentage: int

    @property
    def display_value(self) -> int:
        """Figure a renderer shows: the raw count for done, else the share of the board."""
        return self.count if self.stage is Stage.DONE else self.percentage

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage.value,
            "title": self.stage.column_title,
            "description": self.stage.column_blurb,
            "count": self.count,
            "percentage": self.percentage,
            "display_value": self.display_value,
        }


def stage_stats(tasks: Sequence[Task]) -> list[StageStat]:
    """Per-stage counts and percentages, in board order.

    With an empty board the percentage equals the count (zero).
    """
    total = len(tasks)
    counts = {stage: 0 for stage in Stage.ordered()}
    for t in tasks:
        counts[t.stage] += 1
    stats: list[StageStat] = []
    for stage in Stage.ordered():
        count = counts[stage]
        percentage = _round_half_up(count / total * 100) if total else count
        stats.append(StageStat(stage=stage, count=count, percentage=percentage))
    return stats


@dataclass
class BoardView:
    criteria: FilterCriteria
    columns: dict[Stage, list[Task]]
    stats: list[StageStat]
    tags: list[str]
    assignees: list[str]
    visible: int
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "columns": {
                stage.value: [t.to_dict() for t in col] for stage, col in self.columns.items()
            },
            "stats": [s.to_dict() for s in self.stats],
            "tags": list(self.tags),
            "assignees": list(self.assignees),
            "visible": self.visible,
            "total": self.total,
        }


def project_board(tasks: Sequence[Task], criteria: FilterCriteria | None = None) -> BoardView:
    """Run the full derivation: filter, group, facets, stats."""
    criteria = criteria or FilterCriteria()
    filtered = filter_tasks(tasks, criteria)
    return BoardView(
        criteria=criteria,
        columns=group_by_stage(filtered),
        stats=stage_stats(tasks),
        tags=distinct_tags(tasks),
        assignees=distinct_assignees(tasks),
        visible=len(filtered),
        total=len(tasks),
    )
