"""
String enum definitions for scorecard concepts.
"""

from enum import StrEnum


class RoundTypeName(StrEnum):
    """The seven round contracts, in the order they are played."""

    TWO_BOOKS = "twoBooks"
    ONE_BOOK_ONE_RUN = "oneBookOneRun"
    TWO_RUNS = "twoRuns"
    TWO_BOOKS_ONE_RUN = "twoBooksOneRun"
    TWO_RUNS_ONE_BOOK = "twoRunsOneBook"
    THREE_BOOKS = "threeBooks"
    THREE_RUNS_AND_OUT = "threeRunsAndOut"


class RoundScoreType(StrEnum):
    """Discriminator for the per-player round score state."""

    PENDING = "pending"
    ENTERED = "entered"
    SKIPPED = "skipped"


class GameErrorCode(StrEnum):
    """Machine-readable reason attached to every ValidationError."""

    VALIDATION = "validation"
    NO_ACTIVE_GAME = "no_active_game"
    PLAYER_NOT_FOUND = "player_not_found"
    INVALID_ROUND_INDEX = "invalid_round_index"
    ROUND_LOCKED = "round_locked"
    ROUND_ALREADY_LOCKED = "round_already_locked"
    ROUND_NOT_LOCKED = "round_not_locked"
    INCOMPLETE_ROUND = "incomplete_round"
    PLAYER_SKIPPED = "player_skipped"
    PLAYER_NOT_SKIPPED = "player_not_skipped"
    CANNOT_UNSKIP_CASCADED = "cannot_unskip_cascaded"
    GAME_ENDED = "game_ended"
    GAME_ALREADY_ENDED = "game_already_ended"
    GAME_NOT_ENDED = "game_not_ended"
    INCOMPLETE_LOCKING = "incomplete_locking"


class ShareDecodeErrorKind(StrEnum):
    """Why a share payload could not be turned back into a game."""

    NOT_DECODABLE = "not_decodable"
    MALFORMED_JSON = "malformed_json"
    INVALID_STRUCTURE = "invalid_structure"
