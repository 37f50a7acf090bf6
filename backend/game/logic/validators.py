"""
Pure validators returning Feedback instead of raising.

Each check runs independently, so one call can report several problems for
the same field at once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from game.logic.feedback import Feedback
from game.logic.value_objects import MAX_SCORE, MIN_SCORE, SCORE_STEP, WINNING_SCORE, EnteredScore, SkippedScore

if TYPE_CHECKING:
    from collections.abc import Sequence

    from game.logic.entities import Player, Round

MIN_PLAYERS = 2
MAX_PLAYERS = 8


def validate_player_names(names: Sequence[str]) -> Feedback:
    """Check player count, blank names and case-insensitive duplicates."""
    errors: list[str] = []

    if len(names) < MIN_PLAYERS:
        errors.append(f"At least {MIN_PLAYERS} players required")

    if len(names) > MAX_PLAYERS:
        errors.append(f"Maximum {MAX_PLAYERS} players allowed")

    trimmed = [name.strip() for name in names]
    if any(not name for name in trimmed):
        errors.append("Player names cannot be empty")

    if len({name.lower() for name in trimmed}) != len(trimmed):
        errors.append("Player names must be unique")

    return Feedback.from_dict({"players": errors})


def validate_score(value: int) -> Feedback:
    errors: list[str] = []

    if value < MIN_SCORE:
        errors.append(f"Score must be at least {MIN_SCORE}")

    if value > MAX_SCORE:
        errors.append(f"Score must be at most {MAX_SCORE}")

    if value % SCORE_STEP != 0:
        errors.append(f"Score must be divisible by {SCORE_STEP}")

    return Feedback.from_dict({"score": errors})


def validate_round_completion(round_: Round, round_index: int, players: Sequence[Player]) -> Feedback:
    """
    Check whether a round is ready to lock.

    Active players are those not skipped for the round, either by an explicit
    skipped entry or by a skip cascade starting at or before round_index.
    Every active player needs an entered score and exactly one of them must
    have scored 0. A round with no active players is valid.
    """
    errors: list[str] = []

    missing: list[str] = []
    winners = 0
    for player in players:
        if player.is_skipped_at(round_index):
            continue
        score = round_.get_score(player.id)
        if isinstance(score, SkippedScore):
            continue
        if not isinstance(score, EnteredScore):
            missing.append(player.name)
        elif score.value.value == WINNING_SCORE:
            winners += 1

    if missing:
        errors.append(f"Missing scores for: {', '.join(missing)}")
    elif winners == 0 and _has_active_player(round_, round_index, players):
        errors.append("Exactly one player must have a score of 0 (the round winner)")

    if winners > 1:
        errors.append("Only one player can have a score of 0")

    return Feedback.from_dict({"round": errors})


def _has_active_player(round_: Round, round_index: int, players: Sequence[Player]) -> bool:
    return any(
        not player.is_skipped_at(round_index) and not isinstance(round_.get_score(player.id), SkippedScore)
        for player in players
    )
