import pytest

from game.logic.service import GameService
from shared.storage import InMemoryGameRepository


@pytest.fixture
def repo() -> InMemoryGameRepository:
    return InMemoryGameRepository()


@pytest.fixture
def service(repo: InMemoryGameRepository) -> GameService:
    return GameService(repo)
