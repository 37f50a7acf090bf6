"""In-memory and JSON-file implementations of GameRepository.

The file repository keeps the active game as a single JSON document. Writes
go through a temp file in the same directory followed by a rename, so a
reader never sees a truncated file. The file is written with owner-only
permissions (0o600).
"""

import asyncio
import contextlib
import os
import tempfile
from pathlib import Path

import structlog

from game.logic.entities import Game
from game.logic.exceptions import GameDataError
from game.logic.repository import GameRepository
from game.messaging.mapper import GameMapper

logger = structlog.get_logger()

_FILE_PERMISSIONS = 0o600  # owner read/write only


class InMemoryGameRepository(GameRepository):
    """Keeps the snapshot in process memory. Games are immutable, so no copy is needed."""

    def __init__(self, game: Game | None = None) -> None:
        self._game = game

    async def save(self, game: Game) -> None:
        self._game = game

    async def load(self) -> Game | None:
        return self._game

    async def clear(self) -> None:
        self._game = None


class FileGameRepository(GameRepository):
    """JSON-file game repository.

    Uses asyncio.Lock for write safety within a single process. Only one
    process should point at a given file.
    """

    def __init__(self, file_path: str | Path, mapper: GameMapper | None = None) -> None:
        self._file_path = Path(file_path)
        self._mapper = mapper or GameMapper()
        self._lock = asyncio.Lock()

    async def save(self, game: Game) -> None:
        content = self._mapper.to_json(game).encode("utf-8")
        async with self._lock:
            self._write_atomic(content)
        logger.debug("saved game", path=str(self._file_path))

    async def load(self) -> Game | None:
        """Read the stored game.

        Returns None when no file exists yet. Raises GameDataError when the
        file exists but cannot be read or parsed, so a later save does not
        silently overwrite data we could not understand.
        """
        async with self._lock:
            if not self._file_path.exists():
                return None
            try:
                content = self._file_path.read_bytes()
            except OSError as exc:
                msg = f"Failed to read game from {self._file_path}"
                raise GameDataError(msg) from exc
        return self._mapper.from_json(content)

    async def clear(self) -> None:
        async with self._lock:
            with contextlib.suppress(FileNotFoundError):
                self._file_path.unlink()
        logger.debug("cleared game", path=str(self._file_path))

    def _write_atomic(self, content: bytes) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self._file_path.parent,
            prefix=".game_",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fchmod(f.fileno(), _FILE_PERMISSIONS)
            Path(tmp_path).replace(self._file_path)
        except BaseException:
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
