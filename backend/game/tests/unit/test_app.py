"""Tests for service wiring from settings."""

from pathlib import Path

from game.app import create_repository, create_services
from game.tests.helpers.games import create_game
from shared.db import SqliteGameRepository
from shared.settings import ScorecardSettings, StorageBackend
from shared.storage import FileGameRepository, InMemoryGameRepository


class TestCreateRepository:
    def test_memory_has_no_database(self):
        repo, database = create_repository(ScorecardSettings(storage_backend=StorageBackend.MEMORY))
        assert isinstance(repo, InMemoryGameRepository)
        assert database is None

    def test_sqlite_returns_open_database(self, file_settings):
        settings = file_settings.model_copy(update={"storage_backend": StorageBackend.SQLITE})
        repo, database = create_repository(settings)
        try:
            assert isinstance(repo, SqliteGameRepository)
            assert database.path == Path(settings.database_path)
            assert database.connection is not None
        finally:
            database.close()


class TestCreateServices:
    def test_memory_backend(self):
        services = create_services(ScorecardSettings(storage_backend=StorageBackend.MEMORY))
        assert isinstance(services.game_service._repo, InMemoryGameRepository)
        assert services.database is None

    def test_file_backend(self, file_settings):
        services = create_services(file_settings)
        assert isinstance(services.game_service._repo, FileGameRepository)
        assert services.database is None

    async def test_sqlite_backend_persists(self, file_settings):
        settings = file_settings.model_copy(update={"storage_backend": StorageBackend.SQLITE})
        services = create_services(settings)
        try:
            assert isinstance(services.game_service._repo, SqliteGameRepository)
            game = await services.game_service.start_game(["Alice", "Bob"])
        finally:
            services.close()
        assert services.database is None

        reopened = create_services(settings)
        try:
            assert await reopened.game_service.load_game() == game
        finally:
            reopened.close()

    def test_share_service_uses_settings(self, file_settings):
        settings = file_settings.model_copy(
            update={"share_origin": "https://example.org", "share_path": "/open", "share_param": "g"},
        )
        services = create_services(settings)
        game = services.share_service.decode_url(
            services.share_service.create_share_url(create_game("Alice", "Bob")),
        )
        assert services.share_service.create_share_url(game).startswith("https://example.org/open?g=")

    def test_close_is_idempotent(self):
        services = create_services(ScorecardSettings(storage_backend=StorageBackend.MEMORY))
        services.close()
        services.close()
