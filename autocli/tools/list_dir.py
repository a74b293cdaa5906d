"""LS tool for autocli."""

from __future__ import annotations

from typing import Any, Dict, List

from .base import BaseTool, ToolContext, ToolResult
from .guards import PathGuard, PathTraversalError


def _entry_type(entry) -> str:
    if entry.is_dir():
        return "directory"
    if entry.is_file():
        return "file"
    return "other"


class ListDirTool(BaseTool):
    """Tool to list one directory, non-recursively."""

    name = "LS"
    description = "List the contents of a directory"

    def execute(self, parameters: Dict[str, Any], context: ToolContext) -> ToolResult:
        """List directory contents.

        Returns:
            ToolResult with ``[{name, type}]`` sorted by name
        """
        dir_path = parameters.get("dirPath") or "."
        if not isinstance(dir_path, str):
            return self.error('"dirPath" parameter must be a string.')

        try:
            resolved_path = PathGuard(context.project_root).resolve(dir_path)
        except PathTraversalError as e:
            return self.error(str(e))

        if not resolved_path.exists():
            return self.error(f"Directory not found: {dir_path}")
        if not resolved_path.is_dir():
            return self.error(f"Path is not a directory: {dir_path}")

        try:
            entries: List[Dict[str, str]] = [
                {"name": entry.name, "type": _entry_type(entry)}
                for entry in resolved_path.iterdir()
            ]
        except PermissionError:
            return self.error(f"Permission denied: {dir_path}")
        except OSError as e:
            return self.error(f"Cannot list directory {dir_path}: {e}")

        entries.sort(key=lambda e: e["name"])
        return ToolResult.ok(entries)
