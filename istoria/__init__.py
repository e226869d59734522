"""
Istoria: a personal memory archive.

Imports journals and mood trackers (Daylio, Obsidian) into one normalized
store and exports them as plain text for NotebookLM.
"""

__version__ = "0.1.0"
__author__ = "Istoria Project"

# Import main components
from .database import DatabaseManager
from .errors import ImportFormatError, IstoriaError, StorageError
from .exporters import export_memories, export_to_notebooklm
from .importers import BaseImporter, DaylioImporter, ObsidianImporter
from .models import Memory, MetadataKeys, NewMemory

__all__ = [
    "DatabaseManager",
    "ImportFormatError",
    "IstoriaError",
    "StorageError",
    "export_memories",
    "export_to_notebooklm",
    "BaseImporter",
    "DaylioImporter",
    "ObsidianImporter",
    "Memory",
    "MetadataKeys",
    "NewMemory"
]
