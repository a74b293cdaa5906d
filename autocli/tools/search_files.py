"""Glob tool for autocli."""

from __future__ import annotations

import fnmatch
import os
from pathlib import PurePath
from typing import Any, Dict, List, Tuple

from .base import BaseTool, ToolContext, ToolResult
from .guards import PathGuard, PathTraversalError

DEFAULT_IGNORE_PATTERNS: Tuple[str, ...] = (
    "node_modules/**",
    ".git/**",
    "dist/**",
    "build/**",
    "coverage/**",
    ".vscode/**",
    ".idea/**",
)


def _is_ignored(relative: str, patterns: List[str]) -> bool:
    for pattern in patterns:
        if fnmatch.fnmatchcase(relative, pattern):
            return True
        # "dir/**" also covers the directory entry itself
        if pattern.endswith("/**") and relative == pattern[:-3]:
            return True
    return False


class SearchFilesTool(BaseTool):
    """Tool to find files and directories with a glob pattern."""

    name = "Glob"
    description = "Find files matching a glob pattern"

    def execute(self, parameters: Dict[str, Any], context: ToolContext) -> ToolResult:
        """Search for paths matching ``pattern``.

        Ignore patterns are matched against paths relative to the search
        directory; results are relative to the project root.
        """
        pattern = parameters.get("pattern")
        if not isinstance(pattern, str) or not pattern:
            return self.error('"pattern" parameter is required.')
        if os.path.isabs(pattern) or os.pardir in PurePath(pattern).parts:
            return self.error(f"pattern must stay inside the project directory: {pattern}")

        extra = parameters.get("ignore") or []
        if not isinstance(extra, list):
            return self.error('"ignore" parameter must be a list of patterns.')
        ignore = list(DEFAULT_IGNORE_PATTERNS) + [str(p) for p in extra]

        search_path = parameters.get("path") or "."
        guard = PathGuard(context.project_root)
        try:
            search_root = guard.resolve(search_path)
        except PathTraversalError as e:
            return self.error(str(e))

        if not search_root.is_dir():
            return self.error(f"Directory not found: {search_path}")

        matches: List[str] = []
        try:
            for match in search_root.glob(pattern):
                relative = match.relative_to(search_root).as_posix()
                if _is_ignored(relative, ignore):
                    continue
                matches.append(guard.relative(match))
        except ValueError as e:
            return self.error(f"Invalid pattern {pattern!r}: {e}")
        except OSError as e:
            return self.error(str(e))

        return ToolResult.ok(sorted(set(matches)))
