"""Bash tool for autocli."""

from __future__ import annotations

import logging
from typing import Any, Dict

from autocli.exec.runner import ExecOptions, ExecStatus, ProcessRunner, SpawnError

from .base import BaseTool, ToolContext, ToolResult

logger = logging.getLogger(__name__)


def runner_for(context: ToolContext) -> ProcessRunner:
    """The context's runner, or one built from the context's limits."""
    if context.runner is not None:
        return context.runner
    return ProcessRunner(
        ExecOptions(
            cwd=context.project_root,
            timeout=context.config.shell_timeout,
            kill_grace=context.config.kill_grace,
            max_output=context.config.max_output_chars,
        )
    )


_FLAG_STRINGS = {"true": True, "false": False}


def parse_flag(value: Any) -> bool:
    """Accept a JSON boolean or the strings "true"/"false"; raise ValueError otherwise."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _FLAG_STRINGS:
        return _FLAG_STRINGS[value.strip().lower()]
    raise ValueError(f"background must be true or false, got {value!r}.")


class ShellTool(BaseTool):
    """Tool to run shell commands in the project directory.

    Foreground commands are bounded by a timeout. Background commands are
    fire-and-forget: only the PID is reported and nothing tracks the process.
    """

    name = "Bash"
    description = "Execute a shell command"

    def execute(self, parameters: Dict[str, Any], context: ToolContext) -> ToolResult:
        command = parameters.get("command")
        if not isinstance(command, str) or not command.strip():
            return self.error('"command" parameter is required.')

        try:
            background = parse_flag(parameters.get("background"))
        except ValueError as e:
            return self.error(str(e))

        runner = runner_for(context)

        if background:
            try:
                spawned = runner.spawn(command)
            except SpawnError as e:
                return self.error(str(e))
            return ToolResult.ok(
                {
                    "stdout": (
                        f"Command '{command}' initiated in background with PID: "
                        f"{spawned.pid}. Its output is not captured."
                    ),
                    "stderr": "",
                    "pid": spawned.pid,
                }
            )

        timeout = parameters.get("timeout")
        if timeout is not None:
            try:
                timeout = float(timeout)
            except (TypeError, ValueError):
                return self.error(f"timeout must be a number of seconds, got {timeout!r}.")
            if timeout <= 0:
                return self.error("timeout must be positive.")

        result = runner.run(command, timeout=timeout)
        logger.debug(
            "Command finished: status=%s exit_code=%s duration=%.2fs",
            result.status.value,
            result.exit_code,
            result.duration,
        )

        if result.status == ExecStatus.SUCCESS:
            return ToolResult.ok(
                {"stdout": result.stdout, "stderr": result.stderr, "exit_code": result.exit_code}
            )

        output: Dict[str, Any] = {"status": result.status.value, "message": result.message}
        if result.status == ExecStatus.ERROR:
            output["exit_code"] = result.exit_code
        output["stdout"] = result.stdout
        output["stderr"] = result.stderr
        return ToolResult.fail(output)
