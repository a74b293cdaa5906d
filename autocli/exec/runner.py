"""Shell command execution with timeout, partial capture and detached spawns.

This module provides subprocess execution capabilities with:
- A foreground mode that captures stdout/stderr and enforces a timeout
- A background mode that starts a fully detached, unobserved process
- Secure environment variable filtering (removes sensitive data)
- Output truncation for large outputs
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TIMEOUT: float = 30.0
DEFAULT_KILL_GRACE: float = 2.0
MAX_OUTPUT_SIZE: int = 100_000  # 100KB

# Patterns in variable names that indicate sensitive data (case-insensitive).
# These will be excluded from the environment passed to child processes.
SENSITIVE_PATTERNS: List[str] = [
    "KEY",  # API_KEY, SSH_KEY, etc.
    "SECRET",  # AWS_SECRET, etc.
    "TOKEN",  # AUTH_TOKEN, etc.
    "PASSWORD",  # DB_PASSWORD, etc.
    "CREDENTIAL",  # GOOGLE_CREDENTIALS, etc.
    "PRIVATE",  # PRIVATE_KEY, etc.
]


# =============================================================================
# Options and Output
# =============================================================================


class ExecStatus(str, Enum):
    """Outcome of a foreground command."""

    SUCCESS = "Success"
    ERROR = "Error"
    TIMEOUT = "Timeout"


@dataclass
class ExecOptions:
    """Options for command execution.

    Attributes:
        cwd: Working directory for command execution.
        timeout: Maximum foreground execution time in seconds.
        kill_grace: Seconds between SIGTERM and SIGKILL on timeout.
        env: Additional environment variables to set.
        max_output: Characters kept per captured stream.
    """

    cwd: Path = field(default_factory=Path.cwd)
    timeout: float = DEFAULT_TIMEOUT
    kill_grace: float = DEFAULT_KILL_GRACE
    env: Dict[str, str] = field(default_factory=dict)
    max_output: int = MAX_OUTPUT_SIZE

    def __post_init__(self):
        """Ensure cwd is a Path object."""
        if isinstance(self.cwd, str):
            self.cwd = Path(self.cwd)


@dataclass
class ExecOutput:
    """Output from a foreground command.

    Attributes:
        status: Success, Error (non-zero exit or spawn failure) or Timeout.
        stdout: Standard output captured (partial on timeout).
        stderr: Standard error captured (partial on timeout).
        exit_code: Process exit code (None when killed or never started).
        duration: Execution duration in seconds.
        message: Human-readable summary for non-success outcomes.
    """

    status: ExecStatus
    stdout: str
    stderr: str
    exit_code: Optional[int]
    duration: float
    message: str = ""

    @property
    def timed_out(self) -> bool:
        return self.status == ExecStatus.TIMEOUT


@dataclass(frozen=True)
class BackgroundSpawn:
    """Fire-and-forget record of a detached process.

    Only the pid is kept; there is no handle to wait on or kill.
    """

    pid: int
    command: str


class SpawnError(RuntimeError):
    """Raised when a background process cannot be started."""


# =============================================================================
# Environment Building
# =============================================================================


def build_safe_environment(overrides: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Build a safe environment for command execution.

    - Inherits the parent environment minus sensitive variables
    - Forces non-interactive mode for common tools
    - Applies any custom overrides

    Args:
        overrides: Custom environment variables to set (override filtering).

    Returns:
        Dictionary of safe environment variables.
    """
    env: Dict[str, str] = {}

    for key, value in os.environ.items():
        key_upper = key.upper()
        if not any(pattern in key_upper for pattern in SENSITIVE_PATTERNS):
            env[key] = value

    # Prevent commands from hanging waiting for user input
    env["CI"] = "true"
    env["DEBIAN_FRONTEND"] = "noninteractive"
    env["NPM_CONFIG_YES"] = "true"
    env["NO_COLOR"] = "1"
    env["TERM"] = "dumb"

    if overrides:
        env.update(overrides)

    return env


# =============================================================================
# Output Truncation
# =============================================================================


def truncate_output(data: Optional[bytes | str], limit: int = MAX_OUTPUT_SIZE) -> str:
    """Decode and truncate captured output.

    Args:
        data: Raw bytes (or already-decoded text) from a subprocess.
        limit: Maximum number of characters to keep.

    Returns:
        Decoded string, truncated with a notice if necessary.
    """
    if data is None:
        return ""
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data

    if len(text) > limit:
        return f"{text[:limit]}...\n[Output truncated, {len(text)} chars total]"

    return text


# =============================================================================
# Runner
# =============================================================================


def _shell() -> str:
    return os.environ.get("SHELL") or "/bin/sh"


class ProcessRunner:
    """Runs shell commands for the Bash tool.

    Stateless apart from its options: nothing about a spawned process is
    remembered once a method returns.
    """

    def __init__(self, options: Optional[ExecOptions] = None):
        self.options = options or ExecOptions()

    def run(self, command: str, timeout: Optional[float] = None) -> ExecOutput:
        """Run ``command`` in the foreground and wait for it.

        The child gets its own process group so that a timeout terminates
        the whole pipeline, not just the shell. Output captured before the
        kill is returned with a ``Timeout`` status.
        """
        opts = self.options
        timeout = opts.timeout if timeout is None else timeout
        start_time = time.monotonic()

        try:
            process = subprocess.Popen(
                [_shell(), "-c", command],
                cwd=str(opts.cwd),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=build_safe_environment(opts.env),
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            logger.error("Failed to start command %r: %s", command, e)
            return ExecOutput(
                status=ExecStatus.ERROR,
                stdout="",
                stderr="",
                exit_code=None,
                duration=time.monotonic() - start_time,
                message=f"Error starting command: {e}",
            )

        try:
            stdout_bytes, stderr_bytes = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            stdout_bytes, stderr_bytes = self._terminate(process)
            duration = time.monotonic() - start_time
            logger.warning("Command timed out after %.1fs: %s", timeout, command)
            return ExecOutput(
                status=ExecStatus.TIMEOUT,
                stdout=truncate_output(stdout_bytes, opts.max_output),
                stderr=truncate_output(stderr_bytes, opts.max_output),
                exit_code=None,
                duration=duration,
                message=f"Command timed out after {timeout:g} seconds and was terminated.",
            )

        duration = time.monotonic() - start_time
        stdout = truncate_output(stdout_bytes, opts.max_output)
        stderr = truncate_output(stderr_bytes, opts.max_output)

        if process.returncode != 0:
            return ExecOutput(
                status=ExecStatus.ERROR,
                stdout=stdout,
                stderr=stderr,
                exit_code=process.returncode,
                duration=duration,
                message=f"Command exited with code {process.returncode}.",
            )

        return ExecOutput(
            status=ExecStatus.SUCCESS,
            stdout=stdout,
            stderr=stderr,
            exit_code=0,
            duration=duration,
        )

    def _terminate(self, process: subprocess.Popen) -> tuple[Optional[bytes], Optional[bytes]]:
        """SIGTERM the process group, escalate to SIGKILL, drain the pipes.

        Every wait is bounded by ``kill_grace``. A descendant that left the
        process group can keep the pipes open after the kill; in that case
        the pipes are closed and whatever was read so far is returned.
        """
        grace = self.options.kill_grace
        self._signal_group(process, signal.SIGTERM)
        try:
            return process.communicate(timeout=grace)
        except subprocess.TimeoutExpired:
            self._signal_group(process, signal.SIGKILL)
        try:
            return process.communicate(timeout=grace)
        except subprocess.TimeoutExpired as e:
            stdout, stderr = e.output, e.stderr

        logger.warning("Pipes still open after SIGKILL (pid %d); abandoning them", process.pid)
        for stream in (process.stdout, process.stderr):
            if stream is not None:
                stream.close()
        try:
            process.wait(timeout=grace)
        except subprocess.TimeoutExpired:
            logger.error("Shell (pid %d) did not exit after SIGKILL", process.pid)
        return stdout, stderr

    @staticmethod
    def _signal_group(process: subprocess.Popen, sig: int) -> None:
        try:
            os.killpg(process.pid, sig)
        except ProcessLookupError:
            pass  # already gone
        except PermissionError:
            process.send_signal(sig)

    def spawn(self, command: str) -> BackgroundSpawn:
        """Start ``command`` fully detached and return immediately.

        The process runs in a new session with its streams pointed at
        /dev/null. It may outlive this program; cleanup is up to the user.

        Raises:
            SpawnError: If the process could not be started.
        """
        try:
            process = subprocess.Popen(
                [_shell(), "-c", command],
                cwd=str(self.options.cwd),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                env=build_safe_environment(self.options.env),
                start_new_session=True,
                close_fds=True,
            )
        except (OSError, ValueError) as e:
            raise SpawnError(f"Failed to start background command: {e}") from e

        logger.info("Spawned background command (pid %d): %s", process.pid, command)
        return BackgroundSpawn(pid=process.pid, command=command)
