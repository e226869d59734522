"""
NotebookLM exporter for Istoria.

Memories are grouped by day and written as one plain text file per month
(``March2025.txt``) or per year (``2025.txt``). Each day is wrapped in a
``<date>`` marker so the source can be cited by date. Ids and sources are left
out to keep the files small.
"""

import logging
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Sequence

from ..models import Memory

if TYPE_CHECKING:
    from ..database import DatabaseManager

EXPORT_INTERVALS = ("month", "year")

MEMORY_SEPARATOR = "\n\n---\n\n"

# Fixed English names so file keys do not depend on the process locale
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def serialize_memory(memory: Memory) -> str:
    """Render one memory as a heading, its time of day and its content."""
    lines = [
        f"## {memory.title}",
        f"Time: {memory.memory_created_at.strftime('%H:%M')}",
    ]

    if memory.content:
        lines.append(memory.content)

    return "\n".join(lines)


def format_day(day_key: str, memories: Sequence[Memory]) -> str:
    """Render all memories of one day inside a date marker."""
    serialized = MEMORY_SEPARATOR.join(serialize_memory(memory) for memory in memories)
    return f"<date>{day_key}</date>\n{serialized}\n"


def get_day_key(memory: Memory) -> str:
    """The memory's calendar day in the zone it carries."""
    return memory.memory_created_at.strftime("%Y-%m-%d")


def get_file_key(day: date, interval: str) -> str:
    """
    File name (without extension) for a day.

    Returns "2025" for the year interval and "March2025" for the month interval.
    """
    if interval == "year":
        return f"{day.year:04d}"
    return f"{MONTH_NAMES[day.month - 1]}{day.year:04d}"


def group_by_file(memories: Iterable[Memory], interval: str) -> Dict[str, Dict[str, List[Memory]]]:
    """
    Group memories by day, then the days by export file.

    Memories keep their input order within a day.
    """
    memories_by_day: Dict[str, List[Memory]] = defaultdict(list)
    for memory in memories:
        memories_by_day[get_day_key(memory)].append(memory)
    logging.debug(f"Grouped memories into {len(memories_by_day)} days")

    days_by_file: Dict[str, Dict[str, List[Memory]]] = defaultdict(dict)
    for day_key, day_memories in memories_by_day.items():
        file_key = get_file_key(date.fromisoformat(day_key), interval)
        days_by_file[file_key][day_key] = day_memories
    logging.debug(f"Grouped days into {len(days_by_file)} files")

    return days_by_file


def export_memories(memories: Sequence[Memory], output_dir: str, interval: str = "month") -> List[Path]:
    """
    Write memories to NotebookLM text files.

    Args:
        memories: Memories ordered by memory_created_at
        output_dir: Existing directory to write into; files are overwritten
        interval: "month" or "year"

    Returns:
        Paths of the files written

    Raises:
        ValueError: if the interval is not supported
    """
    if interval not in EXPORT_INTERVALS:
        raise ValueError(f"Unsupported export interval: {interval!r} (expected one of {', '.join(EXPORT_INTERVALS)})")

    logging.info(f"Starting NotebookLM export with interval: {interval}")

    if not memories:
        logging.info("No memories to export")
        return []

    written = []
    for file_key, days in group_by_file(memories, interval).items():
        sorted_days = sorted(days.items())
        content = "\n".join(format_day(day_key, day_memories) for day_key, day_memories in sorted_days)

        file_path = Path(output_dir) / f"{file_key}.txt"
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(content)

        logging.info(f"Wrote {file_path} with {len(sorted_days)} days")
        written.append(file_path)

    logging.info(f"NotebookLM export complete: {len(written)} files")
    return written


def export_to_notebooklm(db: "DatabaseManager", output_dir: str, interval: str = "month") -> List[Path]:
    """
    Export every stored memory.

    Args:
        db: A connected DatabaseManager
        output_dir: Existing directory to write into
        interval: "month" or "year"
    """
    memories = db.get_all_memories()
    logging.info(f"Fetched {len(memories)} memories for export")
    return export_memories(memories, output_dir, interval)
