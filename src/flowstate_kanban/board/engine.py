"""Board engine: the entry point outer surfaces use to read and change the board.

It wraps :class:`BoardRepository` with the mutation functions: each call
runs one mutation against the live task set, commits the result when it
changed, and records the action in the activity log.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

from loguru import logger

from ..config import (
    get_activity_config,
    get_storage_config,
    load_board_config,
    state_dir_for,
)
from ..constants import ACTIVITY_FILE
from ..io_utils import _append_event, _read_jsonl_tail
from . import mutations
from .filters import FilterCriteria
from .model import Stage, Task, TaskSet
from .mutations import Direction, TaskDraft
from .repository import BoardRepository
from .storage import FileStorageBackend, MemoryStorageBackend, StorageBackend
from .views import BoardView, project_board


class ActivityLog:
    """Append-only JSONL trail of board mutations.

    Best effort: a failed write is logged and otherwise ignored so it never
    blocks a mutation that has already been committed.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def record(self, event_type: str, task: Optional[Task] = None, **details: Any) -> None:
        payload: dict[str, Any] = {"type": event_type}
        if task is not None:
            payload["task_id"] = task.id
            payload["stage"] = task.stage.value
        if details:
            payload["details"] = details
        try:
            _append_event(self._path, payload)
        except OSError:
            logger.exception("Failed to append board event {}", event_type)

    def recent(self, limit: int = 100) -> list[dict[str, Any]]:
        try:
            return _read_jsonl_tail(self._path, limit)
        except OSError:
            logger.exception("Failed to read board events from {}", self._path)
            return []


class BoardEngine:
    """Manage the live board.

    Parameters
    ----------
    repository:
        Owner of the live task set and its persistence.
    activity:
        Optional activity log receiving one event per committed mutation.
    """

    def __init__(self, repository: BoardRepository, activity: Optional[ActivityLog] = None) -> None:
        self.repository = repository
        self.activity = activity

    @classmethod
    def open(cls, project_dir: Path) -> "BoardEngine":
        """Build an engine from ``<project_dir>/.flowstate/config.yaml`` (all optional)."""
        config, err = load_board_config(project_dir)
        if err:
            logger.warning("Ignoring invalid board config: {}", err)
        state_dir = state_dir_for(project_dir)
        storage_cfg = get_storage_config(config)
        storage: StorageBackend
        if storage_cfg["backend"] == "memory":
            storage = MemoryStorageBackend()
        else:
            storage = FileStorageBackend(state_dir, key=storage_cfg["key"])
        activity = None
        if get_activity_config(config)["enabled"]:
            activity = ActivityLog(state_dir / ACTIVITY_FILE)
        engine = cls(BoardRepository(storage), activity)
        engine.load()
        return engine

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self.repository.tasks

    def load(self) -> TaskSet:
        return self.repository.initialize()

    def get_task(self, task_id: str) -> Optional[Task]:
        for t in self.repository.current():
            if t.id == task_id:
                return t
        return None

    def view(self, criteria: Optional[FilterCriteria] = None) -> BoardView:
        return project_board(self.repository.current(), criteria)

    def recent_events(self, limit: int = 100) -> list[dict[str, Any]]:
        if self.activity is None:
            return []
        return self.activity.recent(limit)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _apply(
        self,
        event_type: str,
        task_id: Optional[str],
        mutate: Callable[[TaskSet], TaskSet],
        **details: Any,
    ) -> bool:
        """Run *mutate* on the live set and commit if it produced a new set."""
        before = self.repository.current()
        after = mutate(before)
        if after is before:
            logger.debug("{} on {} changed nothing", event_type, task_id)
            return False
        self.repository.commit(after)
        subject = None
        if task_id is not None:
            subject = next((t for t in after if t.id == task_id), None)
            if subject is None:
                subject = next((t for t in before if t.id == task_id), None)
        logger.info("{} {}", event_type, task_id or "")
        if self.activity is not None:
            self.activity.record(event_type, subject, **details)
        return True

    def create_task(self, draft: TaskDraft) -> Optional[Task]:
        """Create a task from *draft*; returns None when the draft is rejected."""
        errors = draft.validate()
        if errors:
            logger.debug("Rejected task draft: {}", "; ".join(errors))
            return None
        after = mutations.create_task(self.repository.current(), draft)
        task = after[-1]
        self.repository.commit(after)
        logger.info("Created task {}: {}", task.id, task.title)
        if self.activity is not None:
            self.activity.record("task.created", task, priority=task.priority.value)
        return task

    def move_task(self, task_id: str, stage: Stage) -> Optional[Task]:
        target = Stage(stage)
        self._apply(
            "task.moved",
            task_id,
            lambda tasks: mutations.move_to_stage(tasks, task_id, target),
            target=target.value,
        )
        return self.get_task(task_id)

    def step_task(self, task_id: str, direction: Direction) -> Optional[Task]:
        direction = Direction(direction)
        self._apply(
            "task.stepped",
            task_id,
            lambda tasks: mutations.step(tasks, task_id, direction),
            direction=direction.value,
        )
        return self.get_task(task_id)

    def cycle_priority(self, task_id: str) -> Optional[Task]:
        self._apply(
            "task.priority_cycled",
            task_id,
            lambda tasks: mutations.cycle_priority(tasks, task_id),
        )
        return self.get_task(task_id)

    def edit_task(self, task_id: str, changes: dict[str, Any]) -> Optional[Task]:
        self._apply(
            "task.updated",
            task_id,
            lambda tasks: mutations.edit_task(tasks, task_id, changes),
            fields=sorted(changes.keys()),
        )
        return self.get_task(task_id)

    def duplicate_task(self, task_id: str) -> Optional[Task]:
        """Duplicate a task; returns the copy, or None for an unknown id."""
        before = self.repository.current()
        after = mutations.duplicate_task(before, task_id)
        if after is before:
            logger.debug("task.duplicated on {} changed nothing", task_id)
            return None
        copy = after[-1]
        self.repository.commit(after)
        logger.info("Duplicated task {} as {}", task_id, copy.id)
        if self.activity is not None:
            self.activity.record("task.duplicated", copy, source_id=task_id)
        return copy

    def delete_task(self, task_id: str) -> bool:
        return self._apply(
            "task.deleted",
            task_id,
            lambda tasks: mutations.delete_task(tasks, task_id),
        )

    def reset_board(self) -> TaskSet:
        """Discard every edit and restore the seed board; the stored snapshot is cleared."""
        tasks = self.repository.reset()
        if self.activity is not None:
            self.activity.record("board.reset", None, tasks=len(tasks))
        return tasks
