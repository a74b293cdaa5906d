"""Tree tool for autocli."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, FrozenSet, List

from .base import BaseTool, ToolContext, ToolResult
from .guards import PathGuard, PathTraversalError

DEFAULT_IGNORE_DIRS: FrozenSet[str] = frozenset(
    {"node_modules", ".git", ".vscode", ".idea", "dist", "build", "__pycache__"}
)

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


class TreeTool(BaseTool):
    """Tool to render a directory as an indented tree."""

    name = "Tree"
    description = "Show the directory structure as a tree"

    def execute(self, parameters: Dict[str, Any], context: ToolContext) -> ToolResult:
        """Render a tree.

        Args:
            parameters: ``dirPath`` (default "."), ``maxDepth`` (default from
                config), ``ignoreDirs`` (added to the default ignore set)
            context: Execution context

        Returns:
            ToolResult with the tree text
        """
        dir_path = parameters.get("dirPath") or "."
        limit = context.config.tree_depth_limit

        raw_depth = parameters.get("maxDepth")
        if raw_depth is None:
            max_depth = context.config.tree_max_depth
        else:
            try:
                max_depth = int(raw_depth)
            except (TypeError, ValueError):
                return self.error(f"maxDepth must be a number, got {raw_depth!r}.")
        if max_depth < 1 or max_depth > limit:
            return self.error(f"maxDepth must be between 1 and {limit}.")

        extra = parameters.get("ignoreDirs") or []
        if not isinstance(extra, list):
            return self.error('"ignoreDirs" parameter must be a list of names.')
        ignore_dirs = DEFAULT_IGNORE_DIRS | {str(name) for name in extra}

        try:
            start = PathGuard(context.project_root).resolve(dir_path)
        except PathTraversalError as e:
            return self.error(str(e))

        if not start.exists():
            return self.error(f"Directory not found: {dir_path}")
        if not start.is_dir():
            return self.error(f"Path is not a directory: {dir_path}")

        header = "." if dir_path in (".", "./") else dir_path.rstrip("/") + "/"
        lines = [header]
        lines.extend(_build_tree(start, "", 0, max_depth, ignore_dirs))
        return ToolResult.ok("\n".join(lines))


def _build_tree(
    directory: Path, indent: str, depth: int, max_depth: int, ignore_dirs: FrozenSet[str]
) -> List[str]:
    """Lines for the children of ``directory``, recursing until ``max_depth``."""
    if depth >= max_depth:
        return [f"{indent}{LAST_BRANCH}[Max depth reached]"]

    try:
        items = [
            item
            for item in directory.iterdir()
            if not (item.is_dir() and item.name in ignore_dirs)
        ]
    except OSError as e:
        return [f"{indent}{LAST_BRANCH}[Error reading directory {directory.name}: {e}]"]

    # Directories first, then files, each group lexical
    items.sort(key=lambda item: (not item.is_dir(), item.name))

    lines: List[str] = []
    for index, item in enumerate(items):
        is_last = index == len(items) - 1
        connector = LAST_BRANCH if is_last else BRANCH
        if item.is_dir():
            lines.append(f"{indent}{connector}{item.name}/")
            child_indent = indent + (SPACE if is_last else PIPE)
            lines.extend(_build_tree(item, child_indent, depth + 1, max_depth, ignore_dirs))
        else:
            lines.append(f"{indent}{connector}{item.name}")
    return lines
