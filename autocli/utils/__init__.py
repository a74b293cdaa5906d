"""Utility functions."""

from autocli.utils.truncate import DEFAULT_SUFFIX, preview, truncate

__all__ = [
    "DEFAULT_SUFFIX",
    "preview",
    "truncate",
]
