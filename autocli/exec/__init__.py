"""Command execution for the Bash tool."""

from .runner import (
    BackgroundSpawn,
    ExecOptions,
    ExecOutput,
    ExecStatus,
    ProcessRunner,
    SpawnError,
    build_safe_environment,
    truncate_output,
)

__all__ = [
    "BackgroundSpawn",
    "ExecOptions",
    "ExecOutput",
    "ExecStatus",
    "ProcessRunner",
    "SpawnError",
    "build_safe_environment",
    "truncate_output",
]
