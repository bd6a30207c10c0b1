"""Key/value storage backends for board snapshots.

The board treats persistence as an opaque string store: ``load()`` returns
the last saved snapshot or ``None``, ``save()`` replaces it, and
``clear()`` forgets it.  Nothing outside the repository talks to a backend.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from loguru import logger

from ..constants import STORAGE_KEY
from ..io_utils import FileLock, _atomic_write_text


class StorageBackend(ABC):
    @abstractmethod
    def load(self) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def save(self, payload: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError


class FileStorageBackend(StorageBackend):
    """One JSON file per key inside the state directory.

    Writes go through write-tmp-then-rename under an exclusive file lock,
    so a reader never sees a half-written snapshot.
    """

    def __init__(self, state_dir: Path, key: str = STORAGE_KEY) -> None:
        self._path = state_dir / f"{key}.json"
        self._lock = FileLock(state_dir / f"{key}.lock")
        self._thread_lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[str]:
        with self._thread_lock:
            with self._lock:
                if not self._path.exists():
                    return None
                try:
                    return self._path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as exc:
                    logger.warning("Unreadable board snapshot {}: {}", self._path, exc)
                    return None

    def save(self, payload: str) -> None:
        with self._thread_lock:
            with self._lock:
                _atomic_write_text(self._path, payload)

    def clear(self) -> None:
        with self._thread_lock:
            with self._lock:
                self._path.unlink(missing_ok=True)


class MemoryStorageBackend(StorageBackend):
    """In-process store; contents vanish with the process."""

    def __init__(self, initial: Optional[str] = None) -> None:
        self.value: Optional[str] = initial
        self.saves = 0

    def load(self) -> Optional[str]:
        return self.value

    def save(self, payload: str) -> None:
        self.value = payload
        self.saves += 1

    def clear(self) -> None:
        self.value = None
