"""Grep tool for autocli."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .base import BaseTool, ToolContext, ToolResult
from .guards import PathGuard, PathTraversalError

# Flags accepted in the ``flags`` parameter; ``g`` is handled by the scanner
REGEX_FLAGS: Dict[str, int] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}


def compile_pattern(regex: str, flags: str) -> Tuple[re.Pattern, bool]:
    """Compile ``regex`` with letter ``flags``.

    Returns:
        The compiled pattern and whether every match per line is wanted.

    Raises:
        ValueError: On an unknown flag letter.
        re.error: On an invalid expression.
    """
    compiled_flags = 0
    find_all = False
    for letter in flags:
        if letter == "g":
            find_all = True
        elif letter in REGEX_FLAGS:
            compiled_flags |= REGEX_FLAGS[letter]
        else:
            raise ValueError(f"Unsupported regex flag '{letter}'. Use any of g, i, m, s.")
    return re.compile(regex, compiled_flags), find_all


def _groups(match: re.Match) -> List[Optional[str]]:
    return [match.group(0), *match.groups()]


def scan_lines(content: str, pattern: re.Pattern, find_all: bool) -> List[Dict[str, Any]]:
    """Match ``pattern`` against each line of ``content``."""
    results: List[Dict[str, Any]] = []
    for number, line in enumerate(content.split("\n"), start=1):
        if find_all:
            line_matches = [_groups(m) for m in pattern.finditer(line)]
        else:
            found = pattern.search(line)
            line_matches = [_groups(found)] if found else []
        if line_matches:
            results.append({"lineNumber": number, "line": line, "matches": line_matches})
    return results


class GrepFilesTool(BaseTool):
    """Tool for searching file contents line by line."""

    name = "Grep"
    description = "Search a file or files for a regular expression"

    def execute(self, parameters: Dict[str, Any], context: ToolContext) -> ToolResult:
        regex = parameters.get("regex")
        flags = parameters.get("flags") or ""
        file_path = parameters.get("filePath")
        paths = parameters.get("paths")

        if not isinstance(regex, str) or not regex:
            return self.error('"regex" parameter is required.')
        if not isinstance(flags, str):
            return self.error('"flags" parameter must be a string.')
        if paths is None and not file_path:
            return self.error('"filePath" or "paths" parameter is required.')
        if paths is not None and not isinstance(paths, list):
            return self.error('"paths" parameter must be a list of file paths.')

        try:
            pattern, find_all = compile_pattern(regex, flags)
        except ValueError as e:
            return self.error(str(e))
        except re.error as e:
            return self.error(f"Invalid regular expression: {e}")

        guard = PathGuard(context.project_root)

        if paths is None:
            try:
                content = self._read(guard, str(file_path))
            except (PathTraversalError, OSError) as e:
                return self.error(self._describe(str(file_path), e))
            return ToolResult.ok(scan_lines(content, pattern, find_all))

        per_file: List[Dict[str, Any]] = []
        for path in paths:
            path = str(path)
            try:
                content = self._read(guard, path)
            except (PathTraversalError, OSError) as e:
                per_file.append({"path": path, "error": self._describe(path, e)})
                continue
            per_file.append({"path": path, "matches": scan_lines(content, pattern, find_all)})
        return ToolResult.ok(per_file)

    @staticmethod
    def _read(guard: PathGuard, path: str) -> str:
        resolved: Path = guard.resolve(path)
        return resolved.read_text(encoding="utf-8", errors="replace")

    @staticmethod
    def _describe(path: str, error: Exception) -> str:
        if isinstance(error, FileNotFoundError):
            return f"File not found: {path}"
        if isinstance(error, IsADirectoryError):
            return f"Path is a directory, not a file: {path}"
        if isinstance(error, PermissionError):
            return f"Permission denied: {path}"
        return str(error)
