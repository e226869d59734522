"""
Obsidian vault importer for Istoria.

Every Markdown note in the vault becomes one NewMemory. The note's date is
taken from its filename when it starts with a date or an ISO-8601 timestamp,
and from the file's modification time otherwise.
"""

import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from dateutil import parser as date_parser

from ..config import config
from ..models import MetadataKeys, NewMemory
from .base import BaseImporter

OBSIDIAN_SOURCE = "obsidian"

# e.g. "2025-09-11T14:30:00", "20250911T143000", "2025-09-11T14:30:00.250+02:00"
ISO_DATETIME_REGEX = re.compile(
    r"^(\d{4}-?\d{2}-?\d{2}T\d{2}:?\d{2}:?\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?)"
)

# e.g. "2025-09-11.md" or "2025-09-11 Meeting Notes.md"
YYYY_MM_DD_REGEX = re.compile(r"^(\d{4}-\d{2}-\d{2})")


def _parse_prefix(regex: re.Pattern, stem: str) -> Optional[datetime]:
    match = regex.match(stem)
    if not match:
        return None

    try:
        parsed = date_parser.isoparse(match.group(1))
    except ValueError:
        logging.debug(f"Ignoring invalid date in filename: {stem}")
        return None

    if parsed.tzinfo is None:
        # Naive wall-clock time: attach the local system zone
        return parsed.astimezone()
    return parsed


def timestamp_from_iso_name(stem: str) -> Optional[datetime]:
    """
    Parse an ISO-8601 date-time at the start of a filename stem.

    An explicit zone is preserved; without one the local zone is assumed.
    """
    return _parse_prefix(ISO_DATETIME_REGEX, stem)


def timestamp_from_date_name(stem: str) -> Optional[datetime]:
    """Parse a YYYY-MM-DD prefix as local midnight."""
    return _parse_prefix(YYYY_MM_DD_REGEX, stem)


def timestamp_from_mtime(path: Path) -> datetime:
    """The file's last modification time in the local zone."""
    return datetime.fromtimestamp(path.stat().st_mtime).astimezone()


# Tried in order against the filename stem; the first hit wins
FILENAME_TIMESTAMP_STRATEGIES: List[Callable[[str], Optional[datetime]]] = [
    timestamp_from_iso_name,
    timestamp_from_date_name,
]


def note_timestamp(path: Path, stem: str) -> datetime:
    """Pick the memory date for a note, falling back to its mtime."""
    for strategy in FILENAME_TIMESTAMP_STRATEGIES:
        parsed = strategy(stem)
        if parsed is not None:
            logging.debug(f"Extracted date from filename {path.name}: {parsed.isoformat()}")
            return parsed

    parsed = timestamp_from_mtime(path)
    logging.debug(f"Using file mtime for {path.name}: {parsed.isoformat()}")
    return parsed


class ObsidianImporter(BaseImporter):
    """
    Importer for Obsidian vaults (or any directory of Markdown notes).

    Dotfiles, dot-directories and the reserved ``.obsidian`` directory are
    skipped at every depth.
    """

    source = OBSIDIAN_SOURCE

    def __init__(self, vault_path: str, extension: Optional[str] = None,
                 reserved_dir: Optional[str] = None):
        """
        Initialize the Obsidian importer.

        Args:
            vault_path: Root directory of the vault
            extension: Note file extension (defaults to config value)
            reserved_dir: Directory name never imported (defaults to config value)
        """
        self.vault_path = Path(vault_path)
        self.extension = extension or config.obsidian_extension
        self.reserved_dir = reserved_dir or config.obsidian_reserved_dir

        logging.info(f"Initialized Obsidian importer for: {self.vault_path}")

    def get_all_memories(self) -> List[NewMemory]:
        """
        Convert every note in the vault, in directory traversal order.

        Raises:
            FileNotFoundError: if the vault directory does not exist
            NotADirectoryError: if the vault path is not a directory
            UnicodeDecodeError: if a note is not valid UTF-8
        """
        if not self.vault_path.exists():
            raise FileNotFoundError(f"Obsidian vault not found: {self.vault_path}")
        if not self.vault_path.is_dir():
            raise NotADirectoryError(f"Obsidian vault is not a directory: {self.vault_path}")

        memories = [self._build_memory(path) for path in self.iter_note_paths()]

        logging.info(f"Obsidian import finished. Found {len(memories)} notes.")
        return memories

    def iter_note_paths(self) -> Iterator[Path]:
        """Yield the notes to import, walking the vault top-down."""
        for dirpath, dirnames, filenames in os.walk(self.vault_path, onerror=self._raise):
            # Pruning dirnames in place keeps os.walk out of skipped directories
            dirnames[:] = sorted(name for name in dirnames if not self._is_skipped(name))

            for filename in sorted(filenames):
                if self._is_skipped(filename) or not filename.endswith(self.extension):
                    continue
                yield Path(dirpath) / filename

    def _is_skipped(self, name: str) -> bool:
        return name.startswith(".") or name == self.reserved_dir

    @staticmethod
    def _raise(error: OSError) -> None:
        raise error

    def _build_memory(self, path: Path) -> NewMemory:
        relative_path = path.relative_to(self.vault_path).as_posix()
        title = path.name[:-len(self.extension)] if self.extension else path.name
        logging.debug(f"Processing note: {relative_path} (title: {title})")

        memory_created_at = note_timestamp(path, title)

        # Decoded by hand so line endings are kept exactly as written
        content = path.read_bytes().decode('utf-8')
        logging.debug(f"Read {len(content)} characters from {relative_path}")

        return NewMemory(
            source=OBSIDIAN_SOURCE,
            title=title,
            memory_created_at=memory_created_at,
            metadata={MetadataKeys.ORIGINAL_PATH: relative_path},
            content=content,
        )
