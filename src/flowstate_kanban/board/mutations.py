"""Mutation functions over a task set.

Every function takes the current task set and returns a new list; the input
list and the tasks in it are never modified.  Operations naming an unknown
task id, and operations that would change nothing, return the input list
object itself so callers can detect a no-op with ``is``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Collection, Optional, Sequence

from ..constants import COPY_SUFFIX
from .model import Priority, Stage, Task, TaskSet, parse_due_date, to_utc, utc_now
from .seed import seed_tasks

IdFactory = Callable[[Collection[str]], str]

_EDITABLE_FIELDS = ("title", "description", "priority", "assignee", "tags", "due_date")


class Direction(str, Enum):
    BACKWARD = "backward"
    FORWARD = "forward"

    @property
    def delta(self) -> int:
        return 1 if self is Direction.FORWARD else -1


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def new_task_id(existing: Collection[str]) -> str:
    """Short task ID ``task-<8hex>`` not present in *existing*."""
    while True:
        candidate = f"task-{uuid.uuid4().hex[:8]}"
        if candidate not in existing:
            return candidate


def _allocate_id(tasks: Sequence[Task], id_factory: Optional[IdFactory]) -> str:
    existing = {t.id for t in tasks}
    if id_factory is not None:
        candidate = id_factory(existing)
        if candidate and candidate not in existing:
            return candidate
    return new_task_id(existing)


def parse_tags(raw: Any) -> list[str]:
    """Split a comma-separated tag string; trim, drop empties, keep first occurrences.

    A list is accepted too and cleaned the same way.
    """
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else [str(p) for p in raw]
    tags: list[str] = []
    for part in parts:
        tag = part.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _index_of(tasks: Sequence[Task], task_id: str) -> Optional[int]:
    for idx, t in enumerate(tasks):
        if t.id == task_id:
            return idx
    return None


def _with_task(tasks: TaskSet, idx: int, task: Task) -> TaskSet:
    out = list(tasks)
    out[idx] = task
    return out


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

@dataclass
class TaskDraft:
    """Raw input for a new task, as a form would submit it."""

    title: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    assignee: str = ""
    stage: Stage = Stage.BACKLOG
    tags: str = ""
    due_date: str = ""

    def __post_init__(self) -> None:
        self.priority = Priority(self.priority)
        self.stage = Stage(self.stage)

    def validate(self) -> list[str]:
        """Return error strings; a blank title is the only rejected input."""
        if not (self.title or "").strip():
            return ["'title' is required and must be non-empty"]
        return []


def create_task(
    tasks: TaskSet,
    draft: TaskDraft,
    *,
    now: Optional[datetime] = None,
    id_factory: Optional[IdFactory] = None,
) -> TaskSet:
    """Append a task built from *draft*; returns *tasks* unchanged if the draft is invalid.

    An unparseable due date is treated as absent.
    """
    if draft.validate():
        return tasks
    try:
        due_date = parse_due_date(draft.due_date)
    except ValueError:
        due_date = None
    task = Task(
        id=_allocate_id(tasks, id_factory),
        title=draft.title.strip(),
        description=(draft.description or "").strip(),
        stage=draft.stage,
        priority=draft.priority,
        assignee=(draft.assignee or "").strip(),
        tags=parse_tags(draft.tags),
        created_at=to_utc(now) if now is not None else utc_now(),
        due_date=due_date,
    )
    return [*tasks, task]


# ---------------------------------------------------------------------------
# Stage changes
# ---------------------------------------------------------------------------

def move_to_stage(tasks: TaskSet, task_id: str, stage: Stage) -> TaskSet:
    """Put a task directly into *stage* (the drag-and-drop drop target)."""
    idx = _index_of(tasks, task_id)
    if idx is None:
        return tasks
    target = Stage(stage)
    task = tasks[idx]
    if task.stage is target:
        return tasks
    return _with_task(tasks, idx, task.evolve(stage=target))


def step(tasks: TaskSet, task_id: str, direction: Direction) -> TaskSet:
    """Move a task one stage along the board; no wrap-around at either end."""
    idx = _index_of(tasks, task_id)
    if idx is None:
        return tasks
    task = tasks[idx]
    target = task.stage.shifted(Direction(direction).delta)
    if target is None:
        return tasks
    return _with_task(tasks, idx, task.evolve(stage=target))


# ---------------------------------------------------------------------------
# Other edits
# ---------------------------------------------------------------------------

def cycle_priority(tasks: TaskSet, task_id: str) -> TaskSet:
    idx = _index_of(tasks, task_id)
    if idx is None:
        return tasks
    task = tasks[idx]
    return _with_task(tasks, idx, task.evolve(priority=task.priority.next()))


def duplicate_task(
    tasks: TaskSet,
    task_id: str,
    *,
    now: Optional[datetime] = None,
    id_factory: Optional[IdFactory] = None,
) -> TaskSet:
    """Append a copy of a task with a new id, a copy-marked title and a later ``created_at``."""
    idx = _index_of(tasks, task_id)
    if idx is None:
        return tasks
    original = tasks[idx]
    created_at = to_utc(now) if now is not None else utc_now()
    if created_at <= original.created_at:
        created_at = original.created_at + timedelta(milliseconds=1)
    copy = original.evolve(
        id=_allocate_id(tasks, id_factory),
        title=f"{original.title}{COPY_SUFFIX}",
        created_at=created_at,
    )
    return [*tasks, copy]


def delete_task(tasks: TaskSet, task_id: str) -> TaskSet:
    idx = _index_of(tasks, task_id)
    if idx is None:
        return tasks
    return [t for i, t in enumerate(tasks) if i != idx]


def edit_task(tasks: TaskSet, task_id: str, changes: dict[str, Any]) -> TaskSet:
    """Apply a partial edit to the editable fields of a task.

    Unknown keys and unparseable priority or due date values are ignored.
    ``id``, ``stage`` and ``created_at`` cannot be edited here.
    """
    idx = _index_of(tasks, task_id)
    if idx is None:
        return tasks
    task = tasks[idx]
    updates: dict[str, Any] = {}
    for key in _EDITABLE_FIELDS:
        if key not in changes:
            continue
        if changes[key] is None and key != "due_date":
            continue
        value = changes[key]
        if key == "priority":
            try:
                value = Priority(value)
            except ValueError:
                continue
        elif key == "tags":
            value = parse_tags(value)
        elif key == "due_date":
            try:
                value = parse_due_date(value)
            except ValueError:
                continue
        else:
            value = str(value)
        if getattr(task, key) != value:
            updates[key] = value
    if not updates:
        return tasks
    return _with_task(tasks, idx, task.evolve(**updates))


def reset_board() -> TaskSet:
    return seed_tasks()
