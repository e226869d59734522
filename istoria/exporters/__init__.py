"""Exporters that turn stored memories into files."""

from .notebooklm import EXPORT_INTERVALS, export_memories, export_to_notebooklm

__all__ = ["EXPORT_INTERVALS", "export_memories", "export_to_notebooklm"]
