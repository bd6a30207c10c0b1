"""Load optional board configuration from `.flowstate/config.yaml`."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .constants import (
    CONFIG_FILE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_STORAGE_BACKEND,
    STATE_DIR_NAME,
    STORAGE_KEY,
)
from .io_utils import _load_data_with_error

VALID_STORAGE_BACKENDS = {"file", "memory"}
VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


def state_dir_for(project_dir: Path) -> Path:
    return project_dir.resolve() / STATE_DIR_NAME


def load_board_config(project_dir: Path) -> tuple[dict[str, Any], str | None]:
    """Load the optional board config file.

    Args:
        project_dir: Directory holding the `.flowstate/` state directory.

    Returns:
        A tuple of `(config, error_message)`. If the file is missing, returns `({}, None)`.
    """
    path = state_dir_for(project_dir) / CONFIG_FILE
    if not path.exists():
        return {}, None
    data, err = _load_data_with_error(path, {})
    if err:
        return {}, err
    return data, None


def _get_nested(config: dict[str, Any], *keys: str) -> Any:
    cur: Any = config
    for key in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def get_storage_config(config: dict[str, Any]) -> dict[str, Any]:
    """Extract the storage block, filling in defaults.

    Unknown backends fall back to `file`; an empty key falls back to the
    default storage key.
    """
    raw = _get_nested(config, "storage")
    raw = raw if isinstance(raw, dict) else {}
    backend = raw.get("backend")
    if not isinstance(backend, str) or backend not in VALID_STORAGE_BACKENDS:
        backend = DEFAULT_STORAGE_BACKEND
    key = raw.get("key")
    if not isinstance(key, str) or not key.strip():
        key = STORAGE_KEY
    return {"backend": backend, "key": key.strip()}


def get_logging_config(config: dict[str, Any]) -> dict[str, Any]:
    raw = _get_nested(config, "logging", "level")
    level = str(raw).upper() if isinstance(raw, str) else DEFAULT_LOG_LEVEL
    if level not in VALID_LOG_LEVELS:
        level = DEFAULT_LOG_LEVEL
    return {"level": level}


def get_activity_config(config: dict[str, Any]) -> dict[str, Any]:
    raw = _get_nested(config, "activity", "enabled")
    return {"enabled": raw if isinstance(raw, bool) else True}
