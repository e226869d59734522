"""
Base importer interface for Istoria.

This module defines the abstract interface that all data importers must implement.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models import NewMemory


class BaseImporter(ABC):
    """
    Abstract base class for all data importers.

    Each importer converts data from a specific source format (Daylio backups,
    Obsidian vaults, ...) into the standardized NewMemory format.
    """

    #: Value written to NewMemory.source by this importer
    source: str = ""

    @abstractmethod
    def get_all_memories(self) -> List[NewMemory]:
        """
        Read the whole source and convert it.

        Either the complete list is returned or an exception is raised;
        importers never return partial results.

        Returns:
            List of NewMemory objects representing all content
        """
        pass
