"""Path guard confining filesystem tools to the project root."""

from __future__ import annotations

import os
from pathlib import Path, PurePath
from typing import Union

StrPath = Union[str, os.PathLike]


class PathTraversalError(ValueError):
    """Raised when a tool path escapes the project root."""

    def __init__(self, relative_path: StrPath, root: StrPath):
        self.relative_path = str(relative_path)
        self.root = str(root)
        super().__init__(
            f"Path traversal detected: '{self.relative_path}' resolves outside "
            f"project root '{self.root}'"
        )


def _is_within(path: str, root: str) -> bool:
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


def resolve(root: StrPath, relative_path: StrPath) -> Path:
    """Resolve ``relative_path`` against ``root`` and reject escapes.

    The check is lexical: the path is joined and normalized, then must keep
    ``root`` as a prefix. Absolute inputs and inputs with any ``..`` segment
    are refused outright, even when they would land back inside.

    Args:
        root: Project root directory
        relative_path: Path supplied by the model

    Returns:
        Absolute, normalized path inside ``root``

    Raises:
        PathTraversalError: If the path is absolute, has a ``..`` segment
            or normalizes to a location outside ``root``
    """
    raw = os.fspath(relative_path)
    root_abs = os.path.normpath(os.path.abspath(os.fspath(root)))

    if os.path.isabs(raw):
        raise PathTraversalError(raw, root_abs)
    parts = PurePath(raw).parts
    if os.pardir in parts:
        raise PathTraversalError(raw, root_abs)

    candidate = os.path.normpath(os.path.join(root_abs, raw))
    if not _is_within(candidate, root_abs):
        raise PathTraversalError(raw, root_abs)
    return Path(candidate)


class PathGuard:
    """Binds :func:`resolve` to one project root.

    Nothing is cached: every call re-validates against the root.
    """

    def __init__(self, root: StrPath):
        self.root = Path(os.path.normpath(os.path.abspath(os.fspath(root))))

    def resolve(self, relative_path: StrPath) -> Path:
        return resolve(self.root, relative_path)

    def relative(self, path: Path) -> str:
        """Render an in-root absolute path relative to the root."""
        rel = os.path.relpath(path, self.root)
        return "." if rel == os.curdir else Path(rel).as_posix()
