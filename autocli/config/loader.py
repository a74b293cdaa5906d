"""Configuration loader for autocli."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from autocli.config.models import AgentConfig

# TOML tables that map one-to-one onto AgentConfig sub-models
_SECTIONS = ("tools", "plan", "paths", "logging")


def _read_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _apply_override(config_dict: dict[str, Any], key: str, value: Any) -> None:
    """Set ``value`` at a dotted ``key`` such as ``tools.shell_timeout``."""
    parts = key.split(".")
    current = config_dict
    for part in parts[:-1]:
        if part not in current or not isinstance(current[part], dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[dict[str, Any]] = None,
) -> AgentConfig:
    """Load configuration with optional overrides.

    TOML layout: ``[agent]`` holds top-level fields, ``[tools]``, ``[plan]``,
    ``[paths]`` and ``[logging]`` hold the sub-configurations.

    Args:
        config_path: Optional path to a TOML config file.
        overrides: Optional dictionary of overrides; keys may be dotted.

    Returns:
        AgentConfig instance.

    Raises:
        FileNotFoundError: If ``config_path`` is given but missing.
        ValueError: If the file or overrides fail validation.
    """
    config_dict: dict[str, Any] = {}

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        raw_config = _read_toml(config_path)

        for key, value in raw_config.get("agent", {}).items():
            config_dict[key] = value

        for section in _SECTIONS:
            if section in raw_config:
                config_dict[section] = dict(raw_config[section])

    for key, value in (overrides or {}).items():
        if "." in key:
            _apply_override(config_dict, key, value)
        else:
            config_dict[key] = value

    return AgentConfig(**config_dict)


def find_config_file() -> Optional[Path]:
    """Find the configuration file in standard locations.

    Searches in order:
    1. ./autocli.toml
    2. ~/.config/autocli/config.toml

    Returns:
        Path to the config file if found, None otherwise.
    """
    search_paths = [
        Path.cwd() / "autocli.toml",
        Path.home() / ".config" / "autocli" / "config.toml",
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None
