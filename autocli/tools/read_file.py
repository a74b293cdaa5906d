"""Read tool for autocli."""

from __future__ import annotations

from typing import Any, Dict

from .base import BaseTool, ToolContext, ToolResult
from .guards import PathGuard, PathTraversalError


class ReadFileTool(BaseTool):
    """Tool to read the full text of a file."""

    name = "Read"
    description = "Read the entire content of a file"

    def execute(self, parameters: Dict[str, Any], context: ToolContext) -> ToolResult:
        """Read file contents.

        Args:
            parameters: ``filePath`` relative to the project root
            context: Execution context

        Returns:
            ToolResult with the file text
        """
        file_path = parameters.get("filePath")
        if not isinstance(file_path, str) or not file_path:
            return self.error('"filePath" parameter is required.')

        try:
            resolved_path = PathGuard(context.project_root).resolve(file_path)
        except PathTraversalError as e:
            return self.error(str(e))

        if not resolved_path.exists():
            return self.error(f"File not found: {file_path}")
        if resolved_path.is_dir():
            return self.error(f"Path is a directory, not a file: {file_path}")

        try:
            content = resolved_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            # Non-UTF-8 files are returned byte-for-byte as latin-1
            content = resolved_path.read_bytes().decode("latin-1")
        except PermissionError:
            return self.error(f"Permission denied: {file_path}")
        except OSError as e:
            return self.error(f"Cannot read file {file_path}: {e}")

        return ToolResult.ok(content)
