"""
Text truncation helpers for tool output and terminal previews.
"""

from __future__ import annotations

DEFAULT_SUFFIX = "\n... (content truncated)"


def truncate(text: str, max_chars: int, suffix: str = DEFAULT_SUFFIX) -> str:
    """Cut ``text`` down to ``max_chars`` characters plus a marker.

    Text at or under the ceiling is returned unchanged.
    """
    if max_chars < 0:
        raise ValueError("max_chars must be >= 0")
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + suffix


def preview(value: object, max_chars: int = 200) -> str:
    """Single-line preview used when logging parameters and results."""
    text = value if isinstance(value, str) else repr(value)
    text = text.replace("\n", "\\n")
    if len(text) > max_chars:
        return text[: max_chars - 3] + "..."
    return text
