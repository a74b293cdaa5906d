"""Base tool class and result types for autocli tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from autocli.config.models import ToolsConfig

if TYPE_CHECKING:
    from autocli.exec.runner import ProcessRunner
    from autocli.tools.registry import ToolRegistry


class ToolStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ToolResult:
    """Result of a tool execution.

    ``output`` is anything JSON-serializable: a string, a list of entries,
    or a mapping such as ``{"stdout": ..., "stderr": ...}``.
    """

    status: ToolStatus
    output: Any

    @classmethod
    def ok(cls, output: Any) -> "ToolResult":
        """Create a successful result."""
        return cls(status=ToolStatus.SUCCESS, output=output)

    @classmethod
    def fail(cls, output: Any) -> "ToolResult":
        """Create a failed result."""
        return cls(status=ToolStatus.ERROR, output=output)

    @property
    def success(self) -> bool:
        return self.status == ToolStatus.SUCCESS

    def to_response(self, tool_name: str, parameters: Dict[str, Any]) -> Dict[str, Any]:
        """Convert to the ``tool_responses`` entry sent back to the model."""
        return {
            "tool_name": tool_name,
            "parameters": parameters,
            "status": self.status.value,
            "output": self.output,
        }


@dataclass
class ToolContext:
    """Per-call execution context handed to every tool.

    Tools own no state across calls; everything they need arrives here.
    """

    project_root: Path
    config: ToolsConfig = field(default_factory=ToolsConfig)
    runner: Optional["ProcessRunner"] = None
    registry: Optional["ToolRegistry"] = None


class BaseTool(ABC):
    """Base class for all tools."""

    name: str
    description: str

    @abstractmethod
    def execute(self, parameters: Dict[str, Any], context: ToolContext) -> ToolResult:
        """Execute the tool with the given parameters.

        Args:
            parameters: Tool-specific parameters from the model
            context: Project root, limits and shared services

        Returns:
            ToolResult with status and output
        """

    def error(self, message: str) -> ToolResult:
        """Failed result prefixed with the tool name."""
        return ToolResult.fail(f"{self.name} error: {message}")
