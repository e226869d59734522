"""
Daylio backup importer for Istoria.

A ``.daylio`` file is a ZIP archive holding a single ``backup.daylio`` entry,
which is a base64-encoded JSON document. Every mood check-in of a calendar day
is folded into one NewMemory, one line per check-in:

    <MoodName>: <note> (tag1, tag2, ...)
"""

import base64
import binascii
import json
import logging
import math
import zipfile
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from pydantic import ValidationError

from ..config import config
from ..errors import ImportFormatError
from ..models import DaylioBackup, DaylioEntry, DaylioMood, MetadataKeys, NewMemory
from .base import BaseImporter

DAYLIO_SOURCE = "daylio"
DAYLIO_TITLE_LABEL = "Daylio"

UNKNOWN_MOOD_NAME = "Unknown"

# Daylio's built-in moods, best to worst, keyed by predefined_name_id
PREDEFINED_MOOD_NAMES = {
    1: "Rad",
    2: "Good",
    3: "Meh",
    4: "Bad",
    5: "Awful",
}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def resolve_mood_name(mood_id: int, mood_lookup: Mapping[int, DaylioMood]) -> str:
    """
    Get the display name for a mood reference.

    A custom name wins over the predefined one. Unknown references resolve
    to UNKNOWN_MOOD_NAME instead of failing the import.
    """
    mood = mood_lookup.get(mood_id)
    if mood is None:
        logging.warning(f"Daylio: unknown mood id {mood_id}, using '{UNKNOWN_MOOD_NAME}'")
        return UNKNOWN_MOOD_NAME

    if mood.custom_name and mood.custom_name.strip():
        return mood.custom_name

    return PREDEFINED_MOOD_NAMES.get(mood.predefined_name_id, UNKNOWN_MOOD_NAME)


def format_entry(entry: DaylioEntry, mood_lookup: Mapping[int, DaylioMood],
                 tag_lookup: Mapping[int, str]) -> str:
    """Render one check-in as a single line of text."""
    mood_name = resolve_mood_name(entry.mood, mood_lookup)
    tag_names = [tag_lookup[tag_id] for tag_id in entry.tags if tag_id in tag_lookup]

    line = f"{mood_name}: {entry.note or ''}"
    if tag_names:
        line += f" ({', '.join(tag_names)})"

    return line.strip()


def day_key_for(entry: DaylioEntry) -> str:
    """Daylio months are 0-indexed; the key uses calendar months."""
    return f"{entry.year:04d}-{entry.month + 1:02d}-{entry.day:02d}"


def zone_for_offset(offset_ms: int) -> timezone:
    """
    Map Daylio's millisecond UTC offset to a fixed zone.

    The offset is rounded to whole minutes and then truncated to whole hours,
    so half-hour zones such as +05:30 come out as +05:00. This is a known
    approximation kept for compatibility with previously imported data.
    """
    offset_minutes = math.floor(offset_ms / 60000 + 0.5)
    return timezone(timedelta(hours=int(offset_minutes / 60)))


def entry_timestamp(entry: DaylioEntry) -> datetime:
    """The check-in's instant, expressed in the zone it was recorded in."""
    instant = _EPOCH + timedelta(milliseconds=entry.datetime)
    return instant.astimezone(zone_for_offset(entry.timeZoneOffset))


class DaylioImporter(BaseImporter):
    """
    Importer for Daylio ``.daylio`` backup archives.
    """

    source = DAYLIO_SOURCE

    def __init__(self, backup_path: str, archive_entry: Optional[str] = None):
        """
        Initialize the Daylio importer.

        Args:
            backup_path: Path to the .daylio archive
            archive_entry: Name of the payload inside the archive (defaults to config value)
        """
        self.backup_path = Path(backup_path)
        self.archive_entry = archive_entry or config.daylio_archive_entry

        logging.info(f"Initialized Daylio importer for: {self.backup_path}")

    def get_all_memories(self) -> List[NewMemory]:
        """
        Convert the backup into one memory per day, oldest first.

        Raises:
            ImportFormatError: if the archive or its payload is malformed
            FileNotFoundError: if the backup does not exist
        """
        backup = self.load_backup()

        logging.info(
            f"Parsed Daylio backup: {len(backup.customMoods)} moods, "
            f"{len(backup.tags)} tags, {len(backup.dayEntries)} entries"
        )

        mood_lookup = {mood.id: mood for mood in backup.customMoods}
        tag_lookup = {tag.id: tag.name for tag in backup.tags}

        entries_by_day: Dict[str, List[DaylioEntry]] = defaultdict(list)
        for entry in backup.dayEntries:
            entries_by_day[day_key_for(entry)].append(entry)

        logging.debug(f"Grouped Daylio entries into {len(entries_by_day)} days")

        memories = []
        for day_key, entries in entries_by_day.items():
            memory = self._build_day_memory(day_key, entries, mood_lookup, tag_lookup)
            if memory is not None:
                memories.append(memory)

        memories.sort(key=lambda memory: memory.memory_created_at)

        logging.info(f"Daylio import finished. Created {len(memories)} memories.")
        return memories

    def load_backup(self) -> DaylioBackup:
        """Extract, decode and validate the JSON payload of the archive."""
        json_content = self._extract_payload()

        try:
            data = json.loads(json_content)
        except json.JSONDecodeError as e:
            raise ImportFormatError(f"Invalid Daylio backup: payload is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("dayEntries"), list):
            raise ImportFormatError("Invalid Daylio backup: missing dayEntries array")

        try:
            return DaylioBackup.model_validate(data)
        except ValidationError as e:
            raise ImportFormatError(f"Invalid Daylio backup: {e}") from e

    def _extract_payload(self) -> str:
        logging.debug(f"Opening Daylio archive {self.backup_path}")

        try:
            with zipfile.ZipFile(self.backup_path, 'r') as archive:
                try:
                    raw = archive.read(self.archive_entry)
                except KeyError as e:
                    raise ImportFormatError(
                        f"Invalid Daylio backup: missing {self.archive_entry} file in archive"
                    ) from e
        except zipfile.BadZipFile as e:
            raise ImportFormatError(f"Invalid Daylio backup: not a ZIP archive: {e}") from e

        try:
            base64_content = raw.decode('ascii')
            logging.debug(f"Base64 decoding {len(base64_content)} characters")
            return base64.b64decode("".join(base64_content.split()), validate=True).decode('utf-8')
        except (UnicodeDecodeError, binascii.Error) as e:
            raise ImportFormatError(f"Invalid Daylio backup: payload is not base64-encoded JSON: {e}") from e

    def _build_day_memory(self, day_key: str, entries: List[DaylioEntry],
                          mood_lookup: Mapping[int, DaylioMood],
                          tag_lookup: Mapping[int, str]) -> Optional[NewMemory]:
        # sorted() is stable, so check-ins at the same minute keep backup order
        entries = sorted(entries, key=lambda entry: entry.hour * 60 + entry.minute)
        if not entries:
            return None

        content = "\n".join(format_entry(entry, mood_lookup, tag_lookup) for entry in entries)

        try:
            memory_created_at = entry_timestamp(entries[0])
        except (ValueError, OverflowError) as e:
            raise ImportFormatError(
                f"Invalid Daylio backup: entry {entries[0].id} on {day_key} has an unusable timestamp: {e}"
            ) from e

        logging.debug(f"Created memory for {day_key}: {len(entries)} entries")

        return NewMemory(
            source=DAYLIO_SOURCE,
            title=f"{DAYLIO_TITLE_LABEL}: {day_key}",
            memory_created_at=memory_created_at,
            metadata={
                MetadataKeys.ENTRY_COUNT: str(len(entries)),
                MetadataKeys.DAY_KEY: day_key,
            },
            content=content,
        )
