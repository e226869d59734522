"""Storage for imported memories."""

from .manager import DatabaseManager

__all__ = ["DatabaseManager"]
