"""Configuration models and loading."""

from autocli.config.loader import find_config_file, load_config
from autocli.config.models import AgentConfig, LoggingConfig, PathsConfig, PlanConfig, ToolsConfig

__all__ = [
    "AgentConfig",
    "LoggingConfig",
    "PathsConfig",
    "PlanConfig",
    "ToolsConfig",
    "find_config_file",
    "load_config",
]
