"""Board repository: the single owner of the live task set.

The repository loads the initial snapshot (falling back to seed data),
persists every committed task set, and performs the factory reset.  It is
the only component that touches a :class:`StorageBackend`.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from loguru import logger

from .model import Task, TaskSet
from .seed import seed_tasks
from .storage import StorageBackend


def encode_snapshot(tasks: Iterable[Task]) -> str:
    """Serialize *tasks* as an ordered JSON array of task records."""
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, indent=2)


def snapshot_errors(data: Any) -> list[str]:
    """Return why *data* is not an acceptable snapshot (empty = acceptable).

    The snapshot is judged as a whole: one bad record rejects all of it.
    """
    if not isinstance(data, list):
        return [f"expected an array, got {type(data).__name__}"]
    if not data:
        return ["snapshot is empty"]
    errors: list[str] = []
    seen: set[str] = set()
    for idx, record in enumerate(data):
        for err in Task.validate_dict(record):
            errors.append(f"task[{idx}]: {err}")
        task_id = record.get("id") if isinstance(record, dict) else None
        if isinstance(task_id, str):
            if task_id in seen:
                errors.append(f"task[{idx}]: duplicate id '{task_id}'")
            seen.add(task_id)
    return errors


def decode_snapshot(raw: Optional[str]) -> Optional[TaskSet]:
    """Parse a stored snapshot, returning ``None`` when it is unusable."""
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        logger.warning("Discarding unparseable board snapshot: {}", exc)
        return None
    errors = snapshot_errors(data)
    if errors:
        logger.warning("Discarding malformed board snapshot: {}", "; ".join(errors[:5]))
        return None
    return [Task.from_dict(record) for record in data]


class BoardRepository:
    """Owns the live task set and bridges it to a storage backend.

    Parameters
    ----------
    storage:
        Backend holding the persisted snapshot.
    """

    def __init__(self, storage: StorageBackend) -> None:
        self._storage = storage
        self._tasks: TaskSet = []
        self._initialized = False

    @property
    def storage(self) -> StorageBackend:
        return self._storage

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Read-only view of the live task set."""
        if not self._initialized:
            self.initialize()
        return tuple(self._tasks)

    def current(self) -> TaskSet:
        """Live task set as a list, for feeding into the mutation functions."""
        if not self._initialized:
            self.initialize()
        return self._tasks

    def initialize(self) -> TaskSet:
        """Load the stored snapshot, or the seed set if there is none usable.

        Never raises: every parse or shape failure degrades to seed data.
        """
        try:
            raw = self._storage.load()
        except Exception:
            logger.exception("Board storage load failed; using seed data")
            raw = None
        try:
            loaded = decode_snapshot(raw)
        except Exception:
            logger.exception("Board snapshot could not be decoded; using seed data")
            loaded = None
        if loaded is None:
            if raw is None:
                logger.debug("No stored board snapshot; using seed data")
            self._tasks = seed_tasks()
        else:
            logger.debug("Loaded board snapshot with {} tasks", len(loaded))
            self._tasks = loaded
        self._initialized = True
        return self._tasks

    def commit(self, tasks: TaskSet) -> None:
        """Make *tasks* the live set and persist it, replacing any prior snapshot."""
        self._tasks = tasks
        self._initialized = True
        self._storage.save(encode_snapshot(tasks))

    def reset(self) -> TaskSet:
        """Factory reset: live set becomes the seed set, stored snapshot is cleared."""
        self._tasks = seed_tasks()
        self._initialized = True
        self._storage.clear()
        logger.info("Board reset to seed data ({} tasks)", len(self._tasks))
        return self._tasks
