"""Prompt text."""

from .system import get_system_prompt

__all__ = ["get_system_prompt"]
