"""Tests for Database connection, schema versioning and transactions."""

from __future__ import annotations

import sqlite3
import sys
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

from game.logic.exceptions import GameDataError
from shared.db.connection import SCHEMA_VERSION, Database

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def db(tmp_path: Path):
    database = Database(tmp_path / "scorecard.db")
    database.connect()
    yield database
    database.close()


def _count_rows(db: Database) -> int:
    return db.connection.execute("SELECT count(*) FROM active_game").fetchone()[0]


def _insert_row(conn: sqlite3.Connection) -> None:
    conn.execute("INSERT INTO active_game (slot, updated_at, data) VALUES ('active', '2025-01-01', '{}')")


class TestConnect:
    def test_creates_active_game_table(self, db: Database) -> None:
        assert _count_rows(db) == 0

    def test_sets_schema_version(self, db: Database) -> None:
        assert db.connection.execute("PRAGMA user_version").fetchone()[0] == SCHEMA_VERSION

    def test_uses_wal_journal(self, db: Database) -> None:
        assert db.connection.execute("PRAGMA journal_mode").fetchone()[0] == "wal"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        database = Database(tmp_path / "nested" / "dir" / "scorecard.db")
        database.connect()
        assert database.path.exists()
        database.close()

    def test_reconnect_keeps_rows(self, db: Database) -> None:
        with db.transaction() as conn:
            _insert_row(conn)
        db.close()
        db.connect()
        assert _count_rows(db) == 1

    def test_refuses_newer_schema(self, tmp_path: Path) -> None:
        path = tmp_path / "future.db"
        raw = sqlite3.connect(path)
        raw.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
        raw.close()

        database = Database(path)
        with pytest.raises(GameDataError, match="newer than supported"):
            database.connect()
        with pytest.raises(RuntimeError, match="not connected"):
            _ = database.connection


class TestLifecycle:
    def test_connection_raises_before_connect(self, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError, match="not connected"):
            _ = Database(tmp_path / "scorecard.db").connection

    def test_close_is_idempotent(self, db: Database) -> None:
        db.close()
        db.close()
        with pytest.raises(RuntimeError, match="not connected"):
            _ = db.connection


class TestTransaction:
    def test_commits_on_success(self, db: Database) -> None:
        with db.transaction() as conn:
            _insert_row(conn)
        assert _count_rows(db) == 1

    def test_rolls_back_on_error(self, db: Database) -> None:
        with pytest.raises(ValueError, match="boom"), db.transaction() as conn:
            _insert_row(conn)
            raise ValueError("boom")
        assert _count_rows(db) == 0


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions only")
class TestPermissions:
    def test_database_file_is_owner_only(self, db: Database) -> None:
        assert db.path.stat().st_mode & 0o777 == 0o600

    def test_chmod_failure_is_logged_not_raised(self, tmp_path: Path) -> None:
        database = Database(tmp_path / "scorecard.db")
        with patch("pathlib.Path.chmod", side_effect=OSError("permission denied")):
            database.connect()
        assert database.connection is not None
        database.close()
