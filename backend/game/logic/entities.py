"""
Game aggregates: players, rounds and the game itself.

All entities are frozen pydantic models. Every "mutation" returns a new
instance built with model_copy, so a Game snapshot can be shared freely
between readers.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_serializer,
    field_validator,
)

from game.logic.enums import GameErrorCode
from game.logic.exceptions import GameDataError, InvalidPlayerError, RoundLockedError, ValidationError
from game.logic.validators import validate_player_names
from game.logic.value_objects import (
    NUM_ROUNDS,
    PlayerId,
    RoundScore,
    RoundType,
    SkippedScore,
    pending,
    skipped,
)


class Player(BaseModel):
    """
    A seat at the table.

    skip_from_round anchors a "sit out from here on" cascade: the player is
    treated as skipped for that round and every later one.
    """

    model_config = ConfigDict(frozen=True)

    id: PlayerId
    name: str
    skip_from_round: int | None = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Player name cannot be empty")
        return v

    @classmethod
    def create(cls, name: str, player_id: PlayerId | None = None) -> Player:
        trimmed = name.strip()
        if not trimmed:
            raise InvalidPlayerError("Player name cannot be empty")
        return cls(id=player_id or PlayerId.generate(), name=trimmed)

    def skip_from(self, round_index: int) -> Player:
        return self.model_copy(update={"skip_from_round": round_index})

    def clear_skip(self) -> Player:
        return self.model_copy(update={"skip_from_round": None})

    def is_skipped_at(self, round_index: int) -> bool:
        return self.skip_from_round is not None and round_index >= self.skip_from_round


class Round(BaseModel):
    """
    Scores of one round, keyed by player id string.

    A missing key means the score is still pending. scores is a read-only
    view; set_score builds a new mapping.
    """

    model_config = ConfigDict(frozen=True)

    type: RoundType
    scores: Mapping[str, RoundScore] = Field(default_factory=dict, validate_default=True)
    is_locked: bool = False

    @field_validator("scores", mode="after")
    @classmethod
    def _freeze_scores(cls, v: Mapping[str, RoundScore]) -> Mapping[str, RoundScore]:
        return MappingProxyType(dict(v))

    @field_serializer("scores")
    def _serialize_scores(self, v: Mapping[str, RoundScore]) -> dict[str, RoundScore]:
        return dict(v)

    @classmethod
    def create(cls, round_type: RoundType) -> Round:
        return cls(type=round_type)

    def get_score(self, player_id: PlayerId) -> RoundScore:
        return self.scores.get(player_id.value, pending())

    def set_score(self, player_id: PlayerId, score: RoundScore) -> Round:
        """Return a copy with the player's score replaced. Raises RoundLockedError if locked."""
        if self.is_locked:
            raise RoundLockedError("Cannot modify scores on a locked round")
        scores = dict(self.scores)
        scores[player_id.value] = score
        return self.model_copy(update={"scores": MappingProxyType(scores)})

    def lock(self) -> Round:
        return self.model_copy(update={"is_locked": True})

    def unlock(self) -> Round:
        return self.model_copy(update={"is_locked": False})


class Game(BaseModel):
    """
    A game in progress: players in turn order and exactly one round per RoundType.
    """

    model_config = ConfigDict(frozen=True)

    players: tuple[Player, ...]
    rounds: tuple[Round, ...]
    is_ended: bool = False

    @classmethod
    def create(cls, player_names: Sequence[str]) -> Game:
        """Start a fresh game. Raises ValidationError when the names are not acceptable."""
        feedback = validate_player_names(player_names)
        if feedback.has_feedback:
            raise ValidationError(feedback, GameErrorCode.VALIDATION)
        players = tuple(Player.create(name) for name in player_names)
        rounds = tuple(Round.create(round_type) for round_type in RoundType.all())
        return cls(players=players, rounds=rounds)

    @classmethod
    def hydrate(cls, players: Sequence[Player], rounds: Sequence[Round], is_ended: bool) -> Game:  # noqa: FBT001
        """Rebuild a game from stored parts. Raises GameDataError for an impossible shape."""
        if len(rounds) != NUM_ROUNDS:
            raise GameDataError(f"Expected {NUM_ROUNDS} rounds, got {len(rounds)}")
        expected_types = RoundType.all()
        for index, round_ in enumerate(rounds):
            if round_.type != expected_types[index]:
                raise GameDataError(
                    f"Round {index} has type {round_.type.name.value}, expected {expected_types[index].name.value}",
                )
        seen_ids: set[str] = set()
        for player in players:
            if player.id.value in seen_ids:
                raise GameDataError(f"Duplicate player id {player.id.value}")
            seen_ids.add(player.id.value)
        try:
            return cls(players=tuple(players), rounds=tuple(rounds), is_ended=is_ended)
        except PydanticValidationError as e:
            raise GameDataError(f"Invalid game data: {e}") from e

    def find_player(self, player_id: PlayerId | str) -> Player | None:
        value = player_id if isinstance(player_id, str) else player_id.value
        return next((p for p in self.players if p.id.value == value), None)

    def score_at(self, player: Player, round_index: int) -> RoundScore:
        """Effective score of player in a round, with the skip cascade applied."""
        if player.is_skipped_at(round_index):
            return skipped()
        return self.rounds[round_index].get_score(player.id)

    def is_skipped_in(self, player: Player, round_index: int) -> bool:
        return isinstance(self.score_at(player, round_index), SkippedScore)

    def update_round(self, round_index: int, round_: Round) -> Game:
        if not (0 <= round_index < len(self.rounds)):
            raise ValueError(f"Invalid round index {round_index}, expected 0-{len(self.rounds) - 1}")
        rounds = list(self.rounds)
        rounds[round_index] = round_
        return self.model_copy(update={"rounds": tuple(rounds)})

    def update_player(self, player: Player) -> Game:
        """Return a copy with the player sharing player.id replaced."""
        players = list(self.players)
        for index, existing in enumerate(players):
            if existing.id == player.id:
                players[index] = player
                return self.model_copy(update={"players": tuple(players)})
        raise ValueError(f"Unknown player id {player.id.value}")

    def end(self) -> Game:
        return self.model_copy(update={"is_ended": True})

    def reopen(self) -> Game:
        return self.model_copy(update={"is_ended": False})
