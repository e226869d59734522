import os
from datetime import datetime, timedelta, timezone

import pytest

from istoria.importers.obsidian import (
    ObsidianImporter,
    timestamp_from_date_name,
    timestamp_from_iso_name,
)

# 2021-01-01T00:00:00Z, far from every date used in filenames below
MTIME = 1609459200


def write_note(root, relative_path, content="Some text", mtime=MTIME):
    path = root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def vault(tmp_path):
    root = tmp_path / "vault"
    root.mkdir()
    return root


def import_by_title(root):
    return {memory.title: memory for memory in ObsidianImporter(str(root)).get_all_memories()}


def test_iso_filename_without_zone_is_local():
    parsed = timestamp_from_iso_name("2025-09-11T14:30:00")
    assert parsed == datetime(2025, 9, 11, 14, 30).astimezone()
    assert parsed.tzinfo is not None


def test_iso_filename_keeps_explicit_offset():
    parsed = timestamp_from_iso_name("2025-09-11T14:30:00.250+02:00 Standup")
    assert parsed.utcoffset() == timedelta(hours=2)
    assert (parsed.hour, parsed.minute, parsed.microsecond) == (14, 30, 250000)


def test_iso_filename_basic_format_utc():
    parsed = timestamp_from_iso_name("20250911T143000Z")
    assert parsed == datetime(2025, 9, 11, 14, 30, tzinfo=timezone.utc)


def test_iso_filename_negative_compact_offset():
    parsed = timestamp_from_iso_name("2025-09-11T14:30:00-0330")
    assert parsed.utcoffset() == -timedelta(hours=3, minutes=30)


def test_iso_filename_out_of_range_is_ignored():
    assert timestamp_from_iso_name("2025-13-11T14:30:00") is None


def test_date_filename_is_local_midnight():
    parsed = timestamp_from_date_name("2025-09-11 Meeting Notes")
    assert parsed == datetime(2025, 9, 11).astimezone()
    assert (parsed.hour, parsed.minute) == (0, 0)


def test_plain_filename_has_no_date():
    assert timestamp_from_iso_name("Shopping list") is None
    assert timestamp_from_date_name("Shopping list") is None


def test_filename_date_takes_precedence_over_mtime(vault):
    write_note(vault, "2025-09-11T14:30:00.md")

    memory = import_by_title(vault)["2025-09-11T14:30:00"]

    assert memory.memory_created_at == datetime(2025, 9, 11, 14, 30).astimezone()
    assert memory.memory_created_at.timestamp() != MTIME


def test_date_prefix_used_before_mtime(vault):
    write_note(vault, "daily/2025-09-11 Planning.md")

    memory = import_by_title(vault)["2025-09-11 Planning"]

    assert memory.memory_created_at == datetime(2025, 9, 11).astimezone()


def test_falls_back_to_mtime(vault):
    write_note(vault, "Ideas.md", mtime=MTIME + 90)

    memory = import_by_title(vault)["Ideas"]

    assert memory.memory_created_at.timestamp() == MTIME + 90
    assert memory.memory_created_at.tzinfo is not None


def test_invalid_date_prefix_falls_back_to_mtime(vault):
    write_note(vault, "2025-13-45 Odd.md")

    memory = import_by_title(vault)["2025-13-45 Odd"]

    assert memory.memory_created_at.timestamp() == MTIME


def test_record_fields(vault):
    write_note(vault, "projects/Garden.md", content="# Garden\r\nPlant tomatoes.\n")

    memories = ObsidianImporter(str(vault)).get_all_memories()

    assert len(memories) == 1
    memory = memories[0]
    assert memory.source == "obsidian"
    assert memory.title == "Garden"
    assert memory.metadata == {"originalPath": "projects/Garden.md"}
    assert memory.content == "# Garden\r\nPlant tomatoes.\n"


def test_reserved_and_hidden_paths_are_skipped(vault):
    write_note(vault, "Kept.md")
    write_note(vault, ".obsidian/config.md")
    write_note(vault, ".obsidian/2025-09-11T14:30:00.md")
    write_note(vault, "nested/.obsidian/workspace.md")
    write_note(vault, ".trash/Deleted.md")
    write_note(vault, ".hidden.md")
    write_note(vault, "attachments/image.png")
    write_note(vault, "nested/Also kept.md")

    memories = ObsidianImporter(str(vault)).get_all_memories()

    assert sorted(m.metadata["originalPath"] for m in memories) == ["Kept.md", "nested/Also kept.md"]


def test_custom_reserved_dir(vault):
    write_note(vault, "templates/Daily.md")
    write_note(vault, "Kept.md")

    memories = ObsidianImporter(str(vault), reserved_dir="templates").get_all_memories()

    assert [m.title for m in memories] == ["Kept"]


def test_empty_vault(vault):
    assert ObsidianImporter(str(vault)).get_all_memories() == []


def test_missing_vault(tmp_path):
    with pytest.raises(FileNotFoundError):
        ObsidianImporter(str(tmp_path / "nowhere")).get_all_memories()


def test_vault_must_be_a_directory(tmp_path):
    path = tmp_path / "note.md"
    path.write_text("not a vault")

    with pytest.raises(NotADirectoryError):
        ObsidianImporter(str(path)).get_all_memories()


def test_undecodable_note_fails_the_import(vault):
    write_note(vault, "Good.md")
    (vault / "Bad.md").write_bytes(b"\xff\xfe\xfa not utf-8")

    with pytest.raises(UnicodeDecodeError):
        ObsidianImporter(str(vault)).get_all_memories()
