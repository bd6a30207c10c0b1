from __future__ import annotations

import json
import os
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any, Optional

import yaml

from .constants import WINDOWS_LOCK_BYTES

try:
    import fcntl
except ImportError:  # Windows
    fcntl = None  # type: ignore[assignment]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _lock_handle(handle: IO[str], nbytes: int) -> None:
    if fcntl is not None:
        fcntl.flock(handle, fcntl.LOCK_EX)
    elif os.name == "nt":
        import msvcrt
        handle.seek(0)
        handle.truncate(nbytes)
        handle.flush()
        msvcrt.locking(handle.fileno(), msvcrt.LK_LOCK, nbytes)


def _unlock_handle(handle: IO[str], nbytes: int) -> None:
    if fcntl is not None:
        fcntl.flock(handle, fcntl.LOCK_UN)
    elif os.name == "nt":
        import msvcrt
        handle.seek(0)
        msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, nbytes)


class FileLock:
    """Exclusive lock on a sidecar file, held for the duration of a ``with`` block.

    Guards one board snapshot against concurrent writers in other processes.
    Re-entering the same instance is not supported.
    """

    def __init__(self, lock_path: Path, nbytes: int = WINDOWS_LOCK_BYTES) -> None:
        self.lock_path = lock_path
        self.nbytes = nbytes
        self._handle: Optional[IO[str]] = None

    @property
    def locked(self) -> bool:
        return self._handle is not None

    def __enter__(self) -> "FileLock":
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        handle = open(self.lock_path, "a+", encoding="utf-8")
        try:
            _lock_handle(handle, self.nbytes)
        except OSError:
            handle.close()
            raise
        self._handle = handle
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            _unlock_handle(handle, self.nbytes)
        finally:
            handle.close()


def _atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as handle:
        handle.write(text)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)


def _parse_mapping(path: Path, text: str) -> Any:
    if path.suffix in {".yaml", ".yml"}:
        return yaml.safe_load(text)
    return json.loads(text) if text.strip() else None


def _load_data_with_error(
    path: Path,
    default: dict[str, Any],
) -> tuple[dict[str, Any], str | None]:
    """Read a JSON or YAML mapping, returning ``(data, error_message)``.

    A missing or empty file yields *default* with no error.  Unreadable
    files, syntax errors and non-mapping documents yield *default* plus a
    message naming the file, so callers can log it and carry on.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default, None
    except (OSError, UnicodeDecodeError) as exc:
        return default, f"{path.name}: {exc.__class__.__name__}: {exc}"
    try:
        data = _parse_mapping(path, text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        return default, f"{path.name}: {exc.__class__.__name__}: {exc}"
    if data is None:
        return default, None
    if not isinstance(data, dict):
        return default, f"{path.name}: expected object, got {type(data).__name__}"
    return data, None


def _append_event(events_path: Path, event: dict[str, Any]) -> None:
    events_path.parent.mkdir(parents=True, exist_ok=True)
    payload = dict(event)
    payload.setdefault("ts", _now_iso())
    line = json.dumps(payload) + "\n"
    with open(events_path, "a", encoding="utf-8") as handle:
        handle.write(line)
        handle.flush()
        os.fsync(handle.fileno())


def _read_jsonl_tail(path: Path, limit: int) -> list[dict[str, Any]]:
    """Return the last *limit* JSON objects of a JSONL file, skipping bad lines."""
    if limit <= 0 or not path.exists():
        return []
    with open(path, "r", encoding="utf-8") as handle:
        selected = list(deque(handle, maxlen=limit))
    events: list[dict[str, Any]] = []
    for line in selected:
        try:
            parsed = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            events.append(parsed)
    return events
