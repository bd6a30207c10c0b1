"""Tests for board configuration loading."""

from __future__ import annotations

from pathlib import Path

from flowstate_kanban.config import (
    get_activity_config,
    get_logging_config,
    get_storage_config,
    load_board_config,
    state_dir_for,
)
from flowstate_kanban.constants import STORAGE_KEY
from flowstate_kanban.io_utils import _load_data_with_error


def _write_config(project_dir: Path, text: str) -> None:
    state_dir = state_dir_for(project_dir)
    state_dir.mkdir(parents=True, exist_ok=True)
    (state_dir / "config.yaml").write_text(text, encoding="utf-8")


def test_missing_config_is_empty(tmp_path: Path) -> None:
    assert load_board_config(tmp_path) == ({}, None)


def test_empty_config_is_empty(tmp_path: Path) -> None:
    _write_config(tmp_path, "")
    assert load_board_config(tmp_path) == ({}, None)


def test_invalid_yaml_reports_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "storage: [oops\n")
    config, err = load_board_config(tmp_path)
    assert config == {}
    assert err is not None and err.startswith("config.yaml:")


def test_non_mapping_reports_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "- a\n- b\n")
    config, err = load_board_config(tmp_path)
    assert config == {}
    assert err is not None and "expected object" in err


def test_full_config(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        "storage:\n  backend: memory\n  key: team-board\n"
        "logging:\n  level: debug\n"
        "activity:\n  enabled: false\n",
    )
    config, err = load_board_config(tmp_path)
    assert err is None
    assert get_storage_config(config) == {"backend": "memory", "key": "team-board"}
    assert get_logging_config(config) == {"level": "DEBUG"}
    assert get_activity_config(config) == {"enabled": False}


def test_defaults_for_bad_values() -> None:
    config = {
        "storage": {"backend": "s3", "key": "  "},
        "logging": {"level": "verbose"},
        "activity": {"enabled": "yes"},
    }
    assert get_storage_config(config) == {"backend": "file", "key": STORAGE_KEY}
    assert get_logging_config(config) == {"level": "INFO"}
    assert get_activity_config(config) == {"enabled": True}


def test_defaults_for_empty_config() -> None:
    assert get_storage_config({}) == {"backend": "file", "key": STORAGE_KEY}
    assert get_storage_config({"storage": "file"})["backend"] == "file"
    assert get_activity_config({}) == {"enabled": True}


def test_json_state_file_errors(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    assert _load_data_with_error(path, {"a": 1}) == ({"a": 1}, None)
    path.write_text("", encoding="utf-8")
    assert _load_data_with_error(path, {}) == ({}, None)
    path.write_text("{broken", encoding="utf-8")
    data, err = _load_data_with_error(path, {})
    assert data == {}
    assert err is not None and "JSONDecodeError" in err
