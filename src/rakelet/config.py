"""
Configuration file parsing for default CLI settings.

Settings are read from up to three YAML files, lowest precedence first:
machine config, user config, then the nearest .rakelet-config.yml walking up
from the working directory. Command-line flags override all of them.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import platformdirs
import yaml

from rakelet.logging import LogLevel

__all__ = [
    "PROJECT_CONFIG_NAME",
    "Settings",
    "ConfigError",
    "get_user_config_path",
    "get_machine_config_path",
    "find_project_config",
    "parse_config_file",
    "load_settings",
]

PROJECT_CONFIG_NAME = ".rakelet-config.yml"


class ConfigError(Exception):
    """Raised when a configuration file is invalid."""

    pass


@dataclass(frozen=True)
class Settings:
    """Effective CLI settings."""

    log_level: str = "info"
    dry_run: bool = False
    trace: bool = False
    quiet: bool = False
    buildfile: Optional[str] = None

    def merged(self, overrides: dict[str, Any]) -> "Settings":
        """Return a copy with the given (already validated) keys replaced."""
        return replace(self, **overrides)


_FIELD_TYPES: dict[str, type] = {
    "log_level": str,
    "dry_run": bool,
    "trace": bool,
    "quiet": bool,
    "buildfile": str,
}


def get_machine_config_path() -> Path:
    """
    Get the path to the machine-level (system-wide) configuration file.

    Returns:
        Path to the machine config file (may not exist)
    """
    config_dir = Path(platformdirs.site_config_dir("rakelet"))
    return config_dir / "config.yml"


def get_user_config_path() -> Path:
    """
    Get the path to the user-level configuration file.

    Returns:
        Path to the user config file (may not exist)
    """
    config_dir: Path = Path(platformdirs.user_config_dir("rakelet"))
    return config_dir / "config.yml"


def find_project_config(start_dir: Path) -> Optional[Path]:
    """
    Walk up the directory tree from start_dir to find .rakelet-config.yml.

    Returns:
        Path to .rakelet-config.yml if found, None otherwise
    """
    try:
        current = start_dir.resolve()
    except (OSError, RuntimeError):
        # resolve() can raise OSError on invalid paths or RuntimeError on symlink loops
        return None

    while True:
        config_path = current / PROJECT_CONFIG_NAME
        try:
            if config_path.exists():
                return config_path
        except OSError:
            # Unreadable directory, keep walking up
            pass

        parent = current.parent
        if parent == current:
            return None
        current = parent


def parse_config_file(path: Path) -> dict[str, Any]:
    """
    Parse a rakelet configuration file.

    Only keys present in the file are returned, so results from several files
    can be layered. A missing or empty file yields an empty dict.

    Raises:
        ConfigError: If the file can't be read, isn't valid YAML, or holds
                     unknown keys or values of the wrong type

    Example config:
        ```yaml
        log_level: debug
        trace: false
        quiet: true
        buildfile: build/rakefile.py
        ```
    """
    if not path.exists():
        return {}

    try:
        with open(path, "r") as f:
            content = f.read()
    except (IOError, OSError) as e:
        raise ConfigError(f"Error reading config file '{path}': {e}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML in config file '{path}': {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Error in config file '{path}': top level must be a mapping")

    result: dict[str, Any] = {}
    for key, value in data.items():
        expected = _FIELD_TYPES.get(key)
        if expected is None:
            valid = ", ".join(f.name for f in fields(Settings))
            raise ConfigError(
                f"Error in config file '{path}': unknown key '{key}' (expected one of: {valid})"
            )
        if not isinstance(value, expected):
            raise ConfigError(
                f"Error in config file '{path}': Field '{key}' must be a {expected.__name__}"
            )
        result[key] = value

    if "log_level" in result:
        try:
            LogLevel.from_name(result["log_level"])
        except ValueError as e:
            raise ConfigError(f"Error in config file '{path}': {e}") from e

    return result


def load_settings(start_dir: Path) -> Settings:
    """
    Load settings from machine, user and project config files, in that order.

    Raises:
        ConfigError: If any config file is invalid
    """
    settings = Settings()
    paths = [get_machine_config_path(), get_user_config_path()]
    project_config = find_project_config(start_dir)
    if project_config is not None:
        paths.append(project_config)

    for path in paths:
        settings = settings.merged(parse_config_file(path))
    return settings
