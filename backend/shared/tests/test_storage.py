"""Tests for in-memory and JSON-file game repositories."""

import json
import os
import stat
from unittest.mock import patch

import pytest

from game.logic.exceptions import GameDataError
from game.logic.value_objects import entered
from game.tests.helpers.games import SKIP, create_game, with_scores
from shared.storage import FileGameRepository, InMemoryGameRepository


@pytest.fixture
def sample_game():
    game = create_game("Alice", "Bob")
    return with_scores(game, 0, {"Alice": 0, "Bob": SKIP}, locked=True)


class TestInMemoryGameRepository:
    async def test_empty_by_default(self):
        assert await InMemoryGameRepository().load() is None

    async def test_save_load_clear(self, sample_game):
        repo = InMemoryGameRepository()
        await repo.save(sample_game)
        assert await repo.load() == sample_game
        await repo.clear()
        assert await repo.load() is None

    async def test_seeded(self, sample_game):
        assert await InMemoryGameRepository(sample_game).load() == sample_game

    async def test_loaded_snapshot_cannot_be_rewritten(self, sample_game):
        repo = InMemoryGameRepository(sample_game)
        loaded = await repo.load()

        with pytest.raises(TypeError):
            loaded.rounds[0].scores["p-bob"] = entered(0)  # type: ignore[index]

        assert await repo.load() == sample_game


class TestFileGameRepository:
    async def test_missing_file_loads_none(self, tmp_path):
        assert await FileGameRepository(tmp_path / "game.json").load() is None

    async def test_save_and_load(self, tmp_path, sample_game):
        repo = FileGameRepository(tmp_path / "game.json")
        await repo.save(sample_game)
        assert await repo.load() == sample_game

    async def test_writes_camel_case_json(self, tmp_path, sample_game):
        path = tmp_path / "game.json"
        await FileGameRepository(path).save(sample_game)

        data = json.loads(path.read_text(encoding="utf-8"))

        assert data["isEnded"] is False
        assert data["rounds"][0]["isLocked"] is True

    async def test_creates_parent_directory(self, tmp_path, sample_game):
        path = tmp_path / "nested" / "dir" / "game.json"
        await FileGameRepository(path).save(sample_game)
        assert path.exists()

    async def test_overwrites_existing(self, tmp_path, sample_game):
        repo = FileGameRepository(tmp_path / "game.json")
        await repo.save(create_game("Carol", "Dan"))
        await repo.save(sample_game)
        assert await repo.load() == sample_game

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    async def test_owner_only_permissions(self, tmp_path, sample_game):
        path = tmp_path / "game.json"
        await FileGameRepository(path).save(sample_game)
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    async def test_no_temp_files_left(self, tmp_path, sample_game):
        await FileGameRepository(tmp_path / "game.json").save(sample_game)
        assert [p.name for p in tmp_path.iterdir()] == ["game.json"]

    async def test_failed_write_keeps_previous_file(self, tmp_path, sample_game):
        path = tmp_path / "game.json"
        repo = FileGameRepository(path)
        await repo.save(sample_game)

        with patch("shared.storage.os.fchmod", side_effect=OSError("disk full")), pytest.raises(OSError):
            await repo.save(create_game("Carol", "Dan"))

        assert await repo.load() == sample_game
        assert [p.name for p in tmp_path.iterdir()] == ["game.json"]

    async def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "game.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(GameDataError):
            await FileGameRepository(path).load()

    async def test_wrong_shape_raises(self, tmp_path):
        path = tmp_path / "game.json"
        path.write_text('{"players": [], "rounds": [], "isEnded": false}', encoding="utf-8")
        with pytest.raises(GameDataError, match="Expected 7 rounds"):
            await FileGameRepository(path).load()

    async def test_clear(self, tmp_path, sample_game):
        path = tmp_path / "game.json"
        repo = FileGameRepository(path)
        await repo.save(sample_game)
        await repo.clear()
        assert not path.exists()
        await repo.clear()
