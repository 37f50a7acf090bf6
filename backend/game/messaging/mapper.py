"""
Conversion between Game entities, GameDTO models and JSON text.

Used by the repositories for storage and by the share service for links.
Anything that cannot be turned back into a valid Game raises GameDataError.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from game.logic.entities import Game, Player, Round
from game.logic.exceptions import GameDataError, GameRuleError
from game.logic.value_objects import (
    EnteredScore,
    PlayerId,
    RoundScore,
    RoundType,
    SkippedScore,
    entered,
    pending,
    skipped,
)
from game.messaging.types import (
    EnteredScoreDTO,
    GameDTO,
    PendingScoreDTO,
    PlayerDTO,
    RoundDTO,
    RoundScoreDTO,
    SkippedScoreDTO,
)


class GameMapper:
    """Map a Game to and from its serialized form."""

    def to_dto(self, game: Game) -> GameDTO:
        return GameDTO(
            players=[self._player_to_dto(p) for p in game.players],
            rounds=[self._round_to_dto(r) for r in game.rounds],
            is_ended=game.is_ended,
        )

    def to_domain(self, dto: GameDTO) -> Game:
        """Rebuild a Game. Raises GameDataError for values the entities reject."""
        try:
            players = [self._player_to_domain(p) for p in dto.players]
            rounds = [self._round_to_domain(r) for r in dto.rounds]
        except (GameRuleError, PydanticValidationError) as e:
            raise GameDataError(f"Invalid game data: {e}") from e
        return Game.hydrate(players, rounds, dto.is_ended)

    def to_dict(self, game: Game) -> dict[str, Any]:
        return self.to_dto(game).model_dump(mode="json", by_alias=True)

    def from_dict(self, data: object) -> Game:
        try:
            dto = GameDTO.model_validate(data)
        except PydanticValidationError as e:
            raise GameDataError(f"Invalid game data: {e}") from e
        return self.to_domain(dto)

    def to_json(self, game: Game) -> str:
        return self.to_dto(game).model_dump_json(by_alias=True)

    def from_json(self, text: str | bytes) -> Game:
        try:
            dto = GameDTO.model_validate_json(text)
        except PydanticValidationError as e:
            raise GameDataError(f"Invalid game data: {e}") from e
        return self.to_domain(dto)

    # -- private helpers --

    def _player_to_dto(self, player: Player) -> PlayerDTO:
        return PlayerDTO(id=player.id.value, name=player.name, skip_from_round=player.skip_from_round)

    def _player_to_domain(self, dto: PlayerDTO) -> Player:
        return Player(id=PlayerId.create(dto.id), name=dto.name.strip(), skip_from_round=dto.skip_from_round)

    def _round_to_dto(self, round_: Round) -> RoundDTO:
        return RoundDTO(
            type=round_.type.name,
            scores={player_id: _score_to_dto(score) for player_id, score in round_.scores.items()},
            is_locked=round_.is_locked,
        )

    def _round_to_domain(self, dto: RoundDTO) -> Round:
        return Round(
            type=RoundType.from_name(dto.type),
            scores={player_id: _score_to_domain(score) for player_id, score in dto.scores.items()},
            is_locked=dto.is_locked,
        )


def _score_to_dto(score: RoundScore) -> RoundScoreDTO:
    if isinstance(score, EnteredScore):
        return EnteredScoreDTO(value=score.value.value)
    if isinstance(score, SkippedScore):
        return SkippedScoreDTO()
    return PendingScoreDTO()


def _score_to_domain(dto: RoundScoreDTO) -> RoundScore:
    if isinstance(dto, EnteredScoreDTO):
        return entered(dto.value)
    if isinstance(dto, SkippedScoreDTO):
        return skipped()
    return pending()

