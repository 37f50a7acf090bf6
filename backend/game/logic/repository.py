"""Abstract interface for persisting the single active game."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from game.logic.entities import Game


class GameRepository(ABC):
    """Storage slot for one active game.

    Implementations can use memory, a JSON file, SQLite, etc.
    load() raises GameDataError when the stored data cannot be read back.
    """

    @abstractmethod
    async def save(self, game: Game) -> None: ...

    @abstractmethod
    async def load(self) -> Game | None: ...

    @abstractmethod
    async def clear(self) -> None: ...
