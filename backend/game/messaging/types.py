"""
Serialized game shapes shared by storage and share links.

Keys use the camelCase names of the stored format (skipFromRound, isLocked,
isEnded); Python code reads the snake_case attributes.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr

from game.logic.enums import RoundScoreType, RoundTypeName

_DTO_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


class PendingScoreDTO(BaseModel):
    model_config = _DTO_CONFIG

    type: Literal[RoundScoreType.PENDING] = RoundScoreType.PENDING


class EnteredScoreDTO(BaseModel):
    model_config = _DTO_CONFIG

    type: Literal[RoundScoreType.ENTERED] = RoundScoreType.ENTERED
    value: StrictInt


class SkippedScoreDTO(BaseModel):
    model_config = _DTO_CONFIG

    type: Literal[RoundScoreType.SKIPPED] = RoundScoreType.SKIPPED


RoundScoreDTO = Annotated[PendingScoreDTO | EnteredScoreDTO | SkippedScoreDTO, Field(discriminator="type")]


class PlayerDTO(BaseModel):
    model_config = _DTO_CONFIG

    id: StrictStr
    name: StrictStr
    skip_from_round: StrictInt | None = Field(default=None, alias="skipFromRound")


class RoundDTO(BaseModel):
    model_config = _DTO_CONFIG

    type: RoundTypeName
    scores: dict[str, RoundScoreDTO] = Field(default_factory=dict)
    is_locked: StrictBool = Field(default=False, alias="isLocked")


class GameDTO(BaseModel):
    model_config = _DTO_CONFIG

    players: list[PlayerDTO]
    rounds: list[RoundDTO]
    is_ended: StrictBool = Field(alias="isEnded")
