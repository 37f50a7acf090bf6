"""
Immutable value objects: scores, player ids, round types and round score states.
"""

from __future__ import annotations

from typing import Annotated, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter, ValidationError, field_validator

from game.logic.enums import RoundScoreType, RoundTypeName
from game.logic.exceptions import InvalidPlayerError, InvalidScoreError

MIN_SCORE = 0
MAX_SCORE = 300
SCORE_STEP = 5
WINNING_SCORE = 0


def is_valid_score(value: int) -> bool:
    return MIN_SCORE <= value <= MAX_SCORE and value % SCORE_STEP == 0


class Score(BaseModel):
    """Points taken in one round: 0-300 in steps of 5. 0 marks the round winner."""

    model_config = ConfigDict(frozen=True)

    value: StrictInt

    @field_validator("value")
    @classmethod
    def _validate_value(cls, v: int) -> int:
        if not is_valid_score(v):
            raise ValueError(f"score must be {MIN_SCORE}-{MAX_SCORE} and divisible by {SCORE_STEP}, got {v}")
        return v

    @classmethod
    def create(cls, value: int) -> Score:
        """Build a score, raising InvalidScoreError for an illegal value."""
        try:
            return cls(value=value)
        except ValidationError as e:
            raise InvalidScoreError(value) from e

    @classmethod
    def zero(cls) -> Score:
        return cls(value=WINNING_SCORE)

    @property
    def is_win(self) -> bool:
        return self.value == WINNING_SCORE


class PlayerId(BaseModel):
    """Opaque player identifier, a uuid4 string unless supplied externally."""

    model_config = ConfigDict(frozen=True)

    value: str

    @field_validator("value")
    @classmethod
    def _validate_value(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("PlayerId cannot be empty")
        return v

    @classmethod
    def create(cls, value: str) -> PlayerId:
        try:
            return cls(value=value)
        except ValidationError as e:
            raise InvalidPlayerError("PlayerId cannot be empty") from e

    @classmethod
    def generate(cls) -> PlayerId:
        return cls(value=str(uuid4()))

    def __str__(self) -> str:
        return self.value


_DISPLAY_NAMES: dict[RoundTypeName, str] = {
    RoundTypeName.TWO_BOOKS: "2 Books",
    RoundTypeName.ONE_BOOK_ONE_RUN: "1 Book 1 Run",
    RoundTypeName.TWO_RUNS: "2 Runs",
    RoundTypeName.TWO_BOOKS_ONE_RUN: "2 Books 1 Run",
    RoundTypeName.TWO_RUNS_ONE_BOOK: "2 Runs 1 Book",
    RoundTypeName.THREE_BOOKS: "3 Books",
    RoundTypeName.THREE_RUNS_AND_OUT: "3 Runs and Out",
}

_ABBREVIATIONS: dict[RoundTypeName, str] = {
    RoundTypeName.TWO_BOOKS: "2B",
    RoundTypeName.ONE_BOOK_ONE_RUN: "1B1R",
    RoundTypeName.TWO_RUNS: "2R",
    RoundTypeName.TWO_BOOKS_ONE_RUN: "2B1R",
    RoundTypeName.TWO_RUNS_ONE_BOOK: "2R1B",
    RoundTypeName.THREE_BOOKS: "3B",
    RoundTypeName.THREE_RUNS_AND_OUT: "3R+",
}


class RoundType(BaseModel):
    """One of the seven round contracts. Enum declaration order is play order."""

    model_config = ConfigDict(frozen=True)

    name: RoundTypeName

    @classmethod
    def from_name(cls, name: RoundTypeName | str) -> RoundType:
        return cls(name=RoundTypeName(name))

    @classmethod
    def all(cls) -> tuple[RoundType, ...]:
        return tuple(cls(name=name) for name in RoundTypeName)

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self.name]

    @property
    def abbreviation(self) -> str:
        return _ABBREVIATIONS[self.name]


NUM_ROUNDS = len(RoundTypeName)


class PendingScore(BaseModel):
    """No score entered yet."""

    model_config = ConfigDict(frozen=True)

    type: Literal[RoundScoreType.PENDING] = RoundScoreType.PENDING


class EnteredScore(BaseModel):
    """A concrete score was recorded."""

    model_config = ConfigDict(frozen=True)

    type: Literal[RoundScoreType.ENTERED] = RoundScoreType.ENTERED
    value: Score


class SkippedScore(BaseModel):
    """Player sits this round out."""

    model_config = ConfigDict(frozen=True)

    type: Literal[RoundScoreType.SKIPPED] = RoundScoreType.SKIPPED


RoundScore = Annotated[PendingScore | EnteredScore | SkippedScore, Field(discriminator="type")]

round_score_adapter: TypeAdapter[RoundScore] = TypeAdapter(RoundScore)

_PENDING = PendingScore()
_SKIPPED = SkippedScore()


def pending() -> PendingScore:
    return _PENDING


def entered(score: Score | int) -> EnteredScore:
    if not isinstance(score, Score):
        score = Score.create(score)
    return EnteredScore(value=score)


def skipped() -> SkippedScore:
    return _SKIPPED
