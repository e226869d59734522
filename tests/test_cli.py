import base64
import json
import zipfile
from datetime import datetime, timezone

import pytest

from istoria.cli import main
from istoria.database import DatabaseManager


def write_daylio_backup(path):
    when = int(datetime(2025, 9, 11, 8, 0, tzinfo=timezone.utc).timestamp() * 1000)
    payload = {
        "customMoods": [{"id": 1, "custom_name": "", "predefined_name_id": 2}],
        "tags": [{"id": 5, "name": "coffee"}],
        "dayEntries": [{
            "id": 1, "year": 2025, "month": 8, "day": 11, "hour": 8, "minute": 0,
            "datetime": when, "timeZoneOffset": 0, "mood": 1, "note": "Early start", "tags": [5],
        }],
    }
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("backup.daylio", base64.b64encode(json.dumps(payload).encode()).decode())
    return path


@pytest.fixture
def sources(tmp_path):
    vault = tmp_path / "vault"
    (vault / ".obsidian").mkdir(parents=True)
    (vault / ".obsidian" / "app.md").write_text("settings")
    (vault / "2025-10-02 Trip.md").write_text("Packed the car.")
    backup = write_daylio_backup(tmp_path / "backup.daylio")
    return backup, vault


def test_import_and_export(tmp_path, sources):
    backup, vault = sources
    output_dir = tmp_path / "out"

    code = main([
        "-o", str(output_dir),
        "--daylio", str(backup),
        "--obsidian", str(vault),
        "--export", "month",
    ])

    assert code == 0

    with DatabaseManager(str(output_dir / "istoria.db")) as db:
        assert db.count_memories("daylio") == 1
        assert db.count_memories("obsidian") == 1

    export_dir = output_dir / "notebooklm"
    assert sorted(p.name for p in export_dir.iterdir()) == ["October2025.txt", "September2025.txt"]
    assert "Good: Early start (coffee)" in (export_dir / "September2025.txt").read_text(encoding="utf-8")
    assert "## 2025-10-02 Trip" in (export_dir / "October2025.txt").read_text(encoding="utf-8")


def test_explicit_database_path(tmp_path, sources):
    backup, _ = sources
    db_path = tmp_path / "custom.db"

    assert main(["-o", str(tmp_path / "out"), "--db", str(db_path), "--daylio", str(backup)]) == 0

    with DatabaseManager(str(db_path)) as db:
        assert db.count_memories() == 1


def test_failed_import_returns_error(tmp_path, capsys):
    broken = tmp_path / "broken.daylio"
    broken.write_text("not a zip")

    code = main(["-o", str(tmp_path / "out"), "--daylio", str(broken)])

    assert code == 1
    assert "Invalid Daylio backup" in capsys.readouterr().err


def test_missing_vault_returns_error(tmp_path, capsys):
    code = main(["-o", str(tmp_path / "out"), "--obsidian", str(tmp_path / "nowhere")])

    assert code == 1
    assert "not found" in capsys.readouterr().err


def test_nothing_to_do(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["-o", str(tmp_path / "out")])
    assert excinfo.value.code == 2


def test_export_of_empty_database_writes_nothing(tmp_path):
    output_dir = tmp_path / "out"

    assert main(["-o", str(output_dir), "--export", "year"]) == 0
    assert list((output_dir / "notebooklm").iterdir()) == []


def test_bare_export_uses_configured_interval(tmp_path, sources):
    backup, _ = sources
    output_dir = tmp_path / "out"
    config_path = tmp_path / "istoria.yaml"
    config_path.write_text("export:\n  interval: 'year'\n")

    code = main([
        "-o", str(output_dir),
        "--config", str(config_path),
        "--daylio", str(backup),
        "--export",
    ])

    assert code == 0
    assert [p.name for p in (output_dir / "notebooklm").iterdir()] == ["2025.txt"]


def test_bare_export_defaults_to_month(tmp_path, sources):
    backup, _ = sources
    output_dir = tmp_path / "out"

    assert main(["-o", str(output_dir), "--export", "--daylio", str(backup)]) == 0
    assert [p.name for p in (output_dir / "notebooklm").iterdir()] == ["September2025.txt"]


def test_unknown_export_interval(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["-o", str(tmp_path / "out"), "--export", "week"])
    assert excinfo.value.code == 2
