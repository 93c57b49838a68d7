"""Tests for the backup_db.py command line script.

The script is loaded from its file; DB_PATH and BACKUP_DIR point at tmp_path.
"""

import importlib.util
import json
from pathlib import Path

import pytest


SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "backup_db.py"


@pytest.fixture
def backup_db():
    spec = importlib.util.spec_from_file_location("backup_db", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "db.json"
    monkeypatch.setenv("DB_PATH", str(path))
    monkeypatch.setenv("BACKUP_DIR", str(tmp_path / "backups"))
    return path


class TestInspectionCommands:
    """Tests for the stats and export commands."""

    def test_stats(self, backup_db, db_path, capsys):
        db_path.write_text(json.dumps({
            "guildConfigs": {"g1": "c1", "g2": "c2"},
            "trackedQuakes": ["eq1"],
            "version": "2.0.0",
            "lastUpdated": "2026-10-18T01:00:00.000Z",
        }))

        assert backup_db.main(["stats"]) == 0

        output = capsys.readouterr().out
        assert "Guilds: 2" in output
        assert "Tracked quakes: 1" in output

    def test_export(self, backup_db, db_path, capsys):
        db_path.write_text(json.dumps({"guildConfigs": {"g1": "c1"}, "trackedQuakes": []}))

        assert backup_db.main(["export"]) == 0

        assert json.loads(capsys.readouterr().out)["guildConfigs"] == {"g1": "c1"}

    def test_missing_store_is_not_created(self, backup_db, db_path):
        assert backup_db.main(["stats"]) == 1
        assert backup_db.main(["export"]) == 1

        assert not db_path.exists()

    def test_corrupt_store_is_not_rewritten(self, backup_db, db_path):
        db_path.write_text("{truncated")

        assert backup_db.main(["export"]) == 1

        assert db_path.read_text() == "{truncated"


class TestBackupCommands:
    """Tests for the create and list commands."""

    def test_create_then_list(self, backup_db, db_path, capsys):
        db_path.write_text("{}")

        assert backup_db.main(["create", "manual"]) == 0
        assert backup_db.main(["list"]) == 0

        output = capsys.readouterr().out
        assert "Found 1 backups" in output
        assert "db_backup_manual_" in output
