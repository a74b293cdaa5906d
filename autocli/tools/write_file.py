"""Write tool for autocli."""

from __future__ import annotations

import logging
from typing import Any, Dict

from .base import BaseTool, ToolContext, ToolResult
from .guards import PathGuard, PathTraversalError

logger = logging.getLogger(__name__)


class WriteFileTool(BaseTool):
    """Tool to create or overwrite a file.

    Concurrent writes to the same path (for example two Write calls in one
    Batch) are not coordinated: whichever finishes last wins.
    """

    name = "Write"
    description = "Write content to a file, creating parent directories if needed"

    def execute(self, parameters: Dict[str, Any], context: ToolContext) -> ToolResult:
        file_path = parameters.get("filePath")
        content = parameters.get("content")

        if not isinstance(file_path, str) or not file_path:
            return self.error('"filePath" parameter is required.')
        if content is None:
            return self.error('"content" parameter is required.')
        if not isinstance(content, str):
            return self.error('"content" parameter must be a string.')

        try:
            resolved_path = PathGuard(context.project_root).resolve(file_path)
        except PathTraversalError as e:
            return self.error(str(e))

        if resolved_path.is_dir():
            return self.error(f"Path is a directory, not a file: {file_path}")

        try:
            resolved_path.parent.mkdir(parents=True, exist_ok=True)
            resolved_path.write_text(content, encoding="utf-8")
        except PermissionError:
            return self.error(f"Permission denied: {file_path}")
        except OSError as e:
            return self.error(f"Cannot write file {file_path}: {e}")

        logger.debug("Wrote %d chars to %s", len(content), resolved_path)
        return ToolResult.ok(f"File '{file_path}' written successfully.")
