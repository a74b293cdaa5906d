"""Tool registry for autocli - maps tool names to implementations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from autocli.config.models import ToolsConfig

from .base import BaseTool, ToolContext, ToolResult
from .batch import BatchTool
from .grep_files import GrepFilesTool
from .list_dir import ListDirTool
from .read_file import ReadFileTool
from .search_files import SearchFilesTool
from .shell import ShellTool
from .specs import TOOL_SPECS, validate_tool_arguments
from .tree import TreeTool
from .web_fetch import WebFetchTool
from .write_file import WriteFileTool

logger = logging.getLogger(__name__)


def default_tools() -> List[BaseTool]:
    """One instance of every built-in tool."""
    return [
        ShellTool(),
        BatchTool(),
        SearchFilesTool(),
        GrepFilesTool(),
        ListDirTool(),
        TreeTool(),
        ReadFileTool(),
        WriteFileTool(),
        WebFetchTool(),
    ]


class ToolRegistry:
    """Fixed mapping from tool name to implementation.

    Lookup is case-insensitive. The mapping is checked against
    ``TOOL_SPECS`` on construction so a schema without an implementation
    (or the reverse) fails at startup rather than mid-conversation.

    Args:
        project_root: Directory every filesystem tool is confined to
        config: Tool limits
        overrides: Replacement instances keyed by tool name, e.g. a
            WebFetchTool bound to a stub transport

    Raises:
        RuntimeError: If implementations and specs disagree
    """

    def __init__(
        self,
        project_root: Path,
        config: Optional[ToolsConfig] = None,
        overrides: Optional[Mapping[str, BaseTool]] = None,
    ):
        self.project_root = Path(project_root)
        self.config = config or ToolsConfig()

        tools: Dict[str, BaseTool] = {tool.name: tool for tool in default_tools()}
        for name, tool in (overrides or {}).items():
            if name not in tools:
                raise RuntimeError(f"Cannot override unknown tool: {name}")
            tools[name] = tool

        missing_impl = sorted(set(TOOL_SPECS) - set(tools))
        missing_spec = sorted(set(tools) - set(TOOL_SPECS))
        if missing_impl or missing_spec:
            raise RuntimeError(
                "Tool registry is inconsistent: "
                f"no implementation for {missing_impl}, no spec for {missing_spec}"
            )

        self._tools = tools
        self._by_lower = {name.lower(): name for name in tools}

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def canonical_name(self, name: str) -> Optional[str]:
        """Registered spelling of ``name``, or None if unknown."""
        return self._by_lower.get(name.lower()) if isinstance(name, str) else None

    def get(self, name: str) -> Optional[BaseTool]:
        canonical = self.canonical_name(name)
        return self._tools[canonical] if canonical else None

    def build_context(self) -> ToolContext:
        return ToolContext(project_root=self.project_root, config=self.config, registry=self)

    def execute(
        self,
        name: str,
        parameters: Dict[str, Any],
        context: Optional[ToolContext] = None,
    ) -> ToolResult:
        """Execute a tool by name. Never raises.

        Args:
            name: Tool name as sent by the model
            parameters: Tool arguments
            context: Execution context (defaults to :meth:`build_context`)

        Returns:
            ToolResult from the tool, or an error result
        """
        canonical = self.canonical_name(name)
        if canonical is None:
            return ToolResult.fail(f'Tool "{name}" not found.')

        problems = validate_tool_arguments(canonical, parameters)
        if problems:
            return ToolResult.fail(problems[0])

        context = context or self.build_context()
        if context.registry is None:
            context.registry = self

        try:
            return self._tools[canonical].execute(parameters, context)
        except Exception as e:
            logger.exception("Tool %s raised", canonical)
            return ToolResult.fail(f"{canonical} error: {e}")
