"""Configuration for simpletask: where the workspace file lives."""

import os
from enum import StrEnum
from pathlib import Path

from loguru import logger

# Overrides every other way of choosing the data directory.
ENV_DATA_DIR = "SIMPLETASK_DATA_DIR"

# Directory with data. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/simpletask").expanduser(),
    Path("~/.simpletask").expanduser(),
]

# Optional KEY=value settings file.
CONFIG_FILE: Path = Path("~/.config/simpletask/config").expanduser()

WORKSPACE_FILENAME = "workspace.json"


class ConfigKey(StrEnum):
    """Keys understood in the config file."""

    DIR = "DIR"


def read_config_file(path: Path = CONFIG_FILE) -> dict[ConfigKey, str]:
    """Parse a KEY=value config file. A missing file yields no settings.

    Blank lines and lines starting with ``#`` are skipped; unknown keys and
    lines without ``=`` are ignored with a warning.
    """
    if not path.is_file():
        return {}

    settings: dict[ConfigKey, str] = {}
    for lineno, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            logger.warning("{}:{}: expected KEY=value, got {!r}", path, lineno, line)
            continue
        try:
            settings[ConfigKey(key.strip().upper())] = value.strip()
        except ValueError:
            logger.warning("{}:{}: unknown config key {!r}", path, lineno, key.strip())
    return settings


def write_config_file(settings: dict[ConfigKey, str], path: Path = CONFIG_FILE) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [f"{key.value}={value}\n" for key, value in sorted(settings.items())]
    path.write_text("".join(lines), encoding="utf-8")


def resolve_data_directory(config_file: Path = CONFIG_FILE) -> Path:
    """Pick the data directory.

    Order: the ``SIMPLETASK_DATA_DIR`` environment variable, the ``DIR`` key of
    the config file, the first existing entry of ``DATA_DIRECTORIES``, and
    finally the first entry of ``DATA_DIRECTORIES`` even if it does not exist.
    """
    env_dir = os.environ.get(ENV_DATA_DIR)
    if env_dir:
        return Path(env_dir).expanduser()

    configured = read_config_file(config_file).get(ConfigKey.DIR)
    if configured:
        return Path(configured).expanduser()

    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]


def resolve_workspace_file(data_dir: Path | None = None) -> Path:
    return (data_dir or resolve_data_directory()) / WORKSPACE_FILENAME
