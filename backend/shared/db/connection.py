"""SQLite connection for the scorecard: one table holding the active game.

The schema is versioned through PRAGMA user_version. A database written by
a newer schema is refused rather than silently read with the wrong layout.
"""

import os
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from game.logic.exceptions import GameDataError

logger = structlog.get_logger()

SCHEMA_VERSION = 1

_OWNER_ONLY = 0o600
_SIDECAR_SUFFIXES = ("", "-wal", "-shm")

_SCHEMA_V1 = """\
CREATE TABLE IF NOT EXISTS active_game (
    slot TEXT PRIMARY KEY,
    updated_at TEXT NOT NULL,
    data TEXT NOT NULL
);
"""


class Database:
    """Owns the sqlite3 connection shared by the SQLite repositories."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._conn: sqlite3.Connection | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database is not connected")
        return self._conn

    def connect(self) -> None:
        """Open the file (creating parent directories), migrate the schema and restrict permissions."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=5000")
        try:
            self._migrate(conn)
        except BaseException:
            conn.close()
            raise
        self._conn = conn
        self._restrict_permissions()
        logger.debug("database connected", path=str(self._path), schema_version=SCHEMA_VERSION)

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.debug("database closed", path=str(self._path))

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run statements atomically: commit on success, roll back on any error."""
        conn = self.connection
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        conn.commit()

    @staticmethod
    def _migrate(conn: sqlite3.Connection) -> None:
        version = conn.execute("PRAGMA user_version").fetchone()[0]
        if version > SCHEMA_VERSION:
            msg = f"Database schema version {version} is newer than supported version {SCHEMA_VERSION}"
            raise GameDataError(msg)
        if version < SCHEMA_VERSION:
            conn.executescript(_SCHEMA_V1)
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
            conn.commit()
            logger.info("database schema migrated", from_version=version, to_version=SCHEMA_VERSION)

    def _restrict_permissions(self) -> None:
        """chmod 0o600 the database and its WAL/SHM files on POSIX. Failures are logged, not raised."""
        if os.name != "posix":  # pragma: no cover
            return
        for suffix in _SIDECAR_SUFFIXES:
            target = self._path.with_name(self._path.name + suffix)
            if not target.exists():
                continue
            try:
                target.chmod(_OWNER_ONLY)
            except OSError:
                logger.warning("could not restrict file permissions", path=str(target))
