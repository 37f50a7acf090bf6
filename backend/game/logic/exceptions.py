"""Typed exceptions raised by the scorecard core.

Expected, user-correctable rule violations are reported as ValidationError
carrying per-field Feedback, so callers can render messages without
string-matching. Entity-level invariant breaches raise GameRuleError
subclasses; the service pre-validates so these only surface on direct
misuse of the entities. Corrupt stored data and undecodable share links
have their own types.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from game.logic.enums import GameErrorCode

if TYPE_CHECKING:
    from game.logic.enums import ShareDecodeErrorKind
    from game.logic.feedback import Feedback


class AppError(Exception):
    """Base exception for every error the core raises deliberately."""


class ValidationError(AppError):
    """An operation was rejected because of bad input or an illegal transition.

    Attributes:
        feedback: Field name to ordered list of messages.
        code: What kind of rejection this is.

    """

    def __init__(self, feedback: Feedback, code: GameErrorCode = GameErrorCode.VALIDATION) -> None:
        self.feedback = feedback
        self.code = code
        super().__init__("Validation failed")


class GameRuleError(AppError):
    """An entity was asked to enter a state its invariants forbid."""


class InvalidScoreError(GameRuleError):
    """Score value outside 0-300 or not a multiple of 5."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid score: {value}. Must be 0-300 and divisible by 5.")


class InvalidPlayerError(GameRuleError):
    """Player name or id is blank."""


class RoundLockedError(GameRuleError):
    """Scores cannot be changed on a locked round."""


class GameDataError(AppError):
    """Persisted game data is unreadable or has the wrong shape."""


class ShareDecodeError(AppError):
    """A share payload could not be decoded.

    Attributes:
        kind: Which decoding stage failed.

    """

    def __init__(self, kind: ShareDecodeErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)
