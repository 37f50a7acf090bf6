"""SQLite-backed game repository."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from game.logic.repository import GameRepository
from game.messaging.mapper import GameMapper

if TYPE_CHECKING:
    from game.logic.entities import Game
    from shared.db.connection import Database

logger = structlog.get_logger()

_ACTIVE_SLOT = "active"

_UPSERT_SQL = """\
INSERT INTO active_game (slot, updated_at, data) VALUES (?, ?, ?)
ON CONFLICT(slot) DO UPDATE SET updated_at = excluded.updated_at, data = excluded.data
"""


class SqliteGameRepository(GameRepository):
    """Keeps the active game as a single JSON row keyed by slot.

    The row holds the same document the file repository writes, so a game
    can move between backends by copying the data column.
    """

    def __init__(self, db: Database, mapper: GameMapper | None = None) -> None:
        self._db = db
        self._mapper = mapper or GameMapper()
        self._lock = asyncio.Lock()

    async def save(self, game: Game) -> None:
        document = self._mapper.to_json(game)
        updated_at = datetime.now(tz=UTC).isoformat()
        async with self._lock:
            with self._db.transaction() as conn:
                conn.execute(_UPSERT_SQL, (_ACTIVE_SLOT, updated_at, document))
        logger.debug("saved game", slot=_ACTIVE_SLOT, num_players=len(game.players))

    async def load(self) -> Game | None:
        async with self._lock:
            row = self._db.connection.execute("SELECT data FROM active_game WHERE slot = ?", (_ACTIVE_SLOT,)).fetchone()
        if row is None:
            return None
        return self._mapper.from_json(row[0])

    async def clear(self) -> None:
        async with self._lock:
            with self._db.transaction() as conn:
                deleted = conn.execute("DELETE FROM active_game WHERE slot = ?", (_ACTIVE_SLOT,)).rowcount
        logger.debug("cleared game", slot=_ACTIVE_SLOT, had_game=bool(deleted))
