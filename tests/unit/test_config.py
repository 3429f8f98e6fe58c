"""Tests for data directory and config file resolution."""

from pathlib import Path

import pytest

from simpletask import config
from simpletask.config import (
    ConfigKey,
    read_config_file,
    resolve_data_directory,
    resolve_workspace_file,
    write_config_file,
)


@pytest.fixture(autouse=True)
def _isolated(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Never look at the real home directory."""
    monkeypatch.delenv(config.ENV_DATA_DIR, raising=False)
    monkeypatch.setattr(
        config, "DATA_DIRECTORIES", [tmp_path / "first", tmp_path / "second"]
    )


def test_read_config_file_parses_known_keys(tmp_path: Path) -> None:
    path = tmp_path / "config"
    path.write_text("# comment\n\ndir = /data/tasks\nCOLOR=blue\ngarbage\n")
    assert read_config_file(path) == {ConfigKey.DIR: "/data/tasks"}


def test_read_missing_config_file(tmp_path: Path) -> None:
    assert read_config_file(tmp_path / "nope") == {}


def test_write_then_read_config_file(tmp_path: Path) -> None:
    path = tmp_path / "sub" / "config"
    write_config_file({ConfigKey.DIR: "/srv/simpletask"}, path)
    assert path.read_text() == "DIR=/srv/simpletask\n"
    assert read_config_file(path) == {ConfigKey.DIR: "/srv/simpletask"}


def test_env_var_wins(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    cfg = tmp_path / "config"
    cfg.write_text("DIR=/from/config\n")
    monkeypatch.setenv(config.ENV_DATA_DIR, str(tmp_path / "env"))
    assert resolve_data_directory(cfg) == tmp_path / "env"


def test_config_file_beats_candidates(tmp_path: Path) -> None:
    cfg = tmp_path / "config"
    cfg.write_text(f"DIR={tmp_path / 'configured'}\n")
    (tmp_path / "first").mkdir()
    assert resolve_data_directory(cfg) == tmp_path / "configured"


def test_first_existing_candidate_is_used(tmp_path: Path) -> None:
    (tmp_path / "second").mkdir()
    assert resolve_data_directory(tmp_path / "no-config") == tmp_path / "second"


def test_falls_back_to_first_candidate(tmp_path: Path) -> None:
    assert resolve_data_directory(tmp_path / "no-config") == tmp_path / "first"


def test_resolve_workspace_file(tmp_path: Path) -> None:
    assert resolve_workspace_file(tmp_path) == tmp_path / "workspace.json"
