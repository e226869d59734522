"""Data importers for the supported source formats."""

from .base import BaseImporter
from .daylio import DaylioImporter
from .obsidian import ObsidianImporter

__all__ = ["BaseImporter", "DaylioImporter", "ObsidianImporter"]
