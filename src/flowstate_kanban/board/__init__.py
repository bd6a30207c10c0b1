"""Board state engine for the Flowstate Kanban board.

This package holds the task model, the repository owning the live task set,
the pure filter and view projections, and the mutation functions.  Rendering
and input handling live outside it.
"""

from .filters import FilterCriteria, filter_tasks
from .model import Priority, Stage, Task, TaskSet
from .mutations import Direction, TaskDraft
from .views import BoardView, StageStat, project_board

__all__ = [
    "BoardView",
    "Direction",
    "FilterCriteria",
    "Priority",
    "Stage",
    "StageStat",
    "Task",
    "TaskDraft",
    "TaskSet",
    "filter_tasks",
    "project_board",
]
