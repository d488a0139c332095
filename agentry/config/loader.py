"""Configuration loader for agentry."""

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from agentry.config.schema import Config

DEFAULT_CONFIG_DIR = Path.home() / ".agentry"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"
PROJECT_CONFIG_FILE = Path(".agentry") / "config.json"


def _read_json(path: Path) -> dict[str, Any] | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring config file {path}: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: top level must be an object")
        return None
    return data


def load_config(config_path: Path | None = None, project_dir: Path | None = None) -> Config:
    """
    Load configuration from file and environment variables.

    The user file is read first; ``<project_dir>/.agentry/config.json``, when
    present, overrides it key by key, and a project file without
    ``working_directory`` points it at ``project_dir``. Environment variables
    prefixed ``AGENTRY_`` fill whatever neither file sets. A file that cannot
    be parsed, or a merged result that fails validation, is logged and the
    defaults are used instead.

    Args:
        config_path: Optional path to config file. Defaults to ~/.agentry/config.json.
        project_dir: Optional project root holding a project-level config.

    Returns:
        Loaded configuration.
    """
    path = config_path or DEFAULT_CONFIG_FILE
    data: dict[str, Any] = {}

    if path.exists() and (user := _read_json(path)) is not None:
        data.update(user)
        logger.debug(f"Config loaded from {path}")

    if project_dir is not None:
        project_file = Path(project_dir).expanduser() / PROJECT_CONFIG_FILE
        if project_file.exists() and (project := _read_json(project_file)) is not None:
            data.update(project)
            data.setdefault("working_directory", str(project_dir))
            logger.debug(f"Project config loaded from {project_file}")

    try:
        return Config(**data)
    except ValidationError as e:
        logger.warning(f"Invalid configuration ({e.error_count()} errors), using defaults: {e}")
        return Config()


def save_default_config(config_path: Path | None = None, overwrite: bool = False) -> Path:
    """
    Write the default configuration as JSON.

    An existing file is left alone unless ``overwrite`` is set.

    Returns:
        Path of the config file.
    """
    path = config_path or DEFAULT_CONFIG_FILE
    if path.exists() and not overwrite:
        logger.info(f"Config already exists at {path}; leaving it unchanged")
        return path

    path.parent.mkdir(parents=True, exist_ok=True)
    data = Config().model_dump(mode="json")
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    logger.info(f"Default config saved to {path}")
    return path
