"""Terminal output."""

from .processor import OutputProcessor

__all__ = ["OutputProcessor"]
