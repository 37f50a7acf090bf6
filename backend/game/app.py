"""Composition root: build repositories and services from settings.

Callers construct Services once at startup and pass them to whatever needs
them; nothing here is cached at module level.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from game.logic.service import GameService
from game.messaging.mapper import GameMapper
from game.messaging.share import GameShareService
from shared.db import Database, SqliteGameRepository
from shared.settings import ScorecardSettings, StorageBackend
from shared.storage import FileGameRepository, InMemoryGameRepository

if TYPE_CHECKING:
    from game.logic.repository import GameRepository

logger = structlog.get_logger()


@dataclass
class Services:
    game_service: GameService
    share_service: GameShareService
    database: Database | None = None

    def close(self) -> None:
        if self.database is not None:
            self.database.close()
            self.database = None


def create_repository(
    settings: ScorecardSettings,
    mapper: GameMapper | None = None,
) -> tuple[GameRepository, Database | None]:
    """
    Build the repository for settings.storage_backend.

    For the sqlite backend the opened Database is returned alongside so the
    caller can close it; it is None for the other backends.
    """
    mapper = mapper or GameMapper()
    if settings.storage_backend == StorageBackend.MEMORY:
        return InMemoryGameRepository(), None
    if settings.storage_backend == StorageBackend.SQLITE:
        database = Database(settings.database_path)
        database.connect()
        return SqliteGameRepository(database, mapper), database
    return FileGameRepository(settings.storage_path, mapper), None


def create_services(settings: ScorecardSettings | None = None) -> Services:
    """Wire the configured storage backend into a GameService and a GameShareService."""
    if settings is None:
        settings = ScorecardSettings()

    mapper = GameMapper()
    repo, database = create_repository(settings, mapper)

    logger.info("services created", storage_backend=settings.storage_backend)
    return Services(
        game_service=GameService(repo),
        share_service=GameShareService(
            settings.share_origin,
            path=settings.share_path,
            param=settings.share_param,
            mapper=mapper,
        ),
        database=database,
    )
