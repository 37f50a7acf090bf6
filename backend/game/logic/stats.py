"""
Derived data computed from a Game snapshot.

All functions here are pure read-only projections; they are cheap enough to
recompute whenever the game changes. Scores are read through Game.score_at so
a player's skip cascade counts as skipped everywhere.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from game.logic.entities import Game
from game.logic.validators import validate_round_completion
from game.logic.value_objects import EnteredScore, PlayerId, SkippedScore


class RoundResult(BaseModel):
    """A player's entered score in one round."""

    model_config = ConfigDict(frozen=True)

    round_index: int
    round_name: str
    score: int
    is_win: bool


class PlayerStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    player_name: str
    total_score: int
    rounds_played: int
    rounds_skipped: int
    rounds_won: int
    win_rate: float
    average_score: float
    best_round: RoundResult | None
    worst_round: RoundResult | None
    round_results: tuple[RoundResult, ...]


class PlayerRanking(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    player_name: str
    rank: int
    total: int
    rounds_played: int
    has_skipped_rounds: bool


def calculate_player_totals(game: Game) -> dict[str, int]:
    """Return player id -> sum of entered scores. Skipped and pending rounds count 0."""
    totals: dict[str, int] = {}
    for player in game.players:
        total = 0
        for index in range(len(game.rounds)):
            score = game.score_at(player, index)
            if isinstance(score, EnteredScore):
                total += score.value.value
        totals[player.id.value] = total
    return totals


def calculate_rankings(game: Game) -> list[PlayerRanking]:
    """
    Rank players by rounds played (more first), then total (lower first).

    Equal (rounds_played, total) pairs share a rank and the next distinct
    pair takes its 1-based position, giving 1, 1, 3 style ranks. Ties keep
    seating order.
    """
    entries: list[tuple[int, int, bool, str, str]] = []
    for player in game.players:
        total = 0
        rounds_played = 0
        has_skipped_rounds = False
        for index in range(len(game.rounds)):
            score = game.score_at(player, index)
            if isinstance(score, EnteredScore):
                total += score.value.value
                rounds_played += 1
            elif isinstance(score, SkippedScore):
                has_skipped_rounds = True
        entries.append((rounds_played, total, has_skipped_rounds, player.id.value, player.name))

    ordered = sorted(entries, key=lambda e: (-e[0], e[1]))

    rankings: list[PlayerRanking] = []
    for position, (rounds_played, total, has_skipped_rounds, player_id, player_name) in enumerate(ordered, start=1):
        previous = rankings[-1] if rankings else None
        if previous is not None and (previous.rounds_played, previous.total) == (rounds_played, total):
            rank = previous.rank
        else:
            rank = position
        rankings.append(
            PlayerRanking(
                player_id=player_id,
                player_name=player_name,
                rank=rank,
                total=total,
                rounds_played=rounds_played,
                has_skipped_rounds=has_skipped_rounds,
            ),
        )
    return rankings


def calculate_player_stats(game: Game, player_id: PlayerId | str) -> PlayerStats | None:
    """
    Summarize one player's game. Returns None for an unknown player.

    The best round is the first win if there is one, otherwise the lowest
    non-winning score. The worst round is the highest non-winning score.
    Ties go to the earlier round.
    """
    player = game.find_player(player_id)
    if player is None:
        return None

    round_results: list[RoundResult] = []
    rounds_skipped = 0
    for index, round_ in enumerate(game.rounds):
        score = game.score_at(player, index)
        if isinstance(score, EnteredScore):
            round_results.append(
                RoundResult(
                    round_index=index,
                    round_name=round_.type.display_name,
                    score=score.value.value,
                    is_win=score.value.is_win,
                ),
            )
        elif isinstance(score, SkippedScore):
            rounds_skipped += 1

    total_score = sum(r.score for r in round_results)
    rounds_played = len(round_results)
    rounds_won = sum(1 for r in round_results if r.is_win)

    wins = [r for r in round_results if r.is_win]
    non_wins = [r for r in round_results if not r.is_win]

    best_round: RoundResult | None = None
    if wins:
        best_round = wins[0]
    elif non_wins:
        best_round = min(non_wins, key=lambda r: r.score)

    worst_round = max(non_wins, key=lambda r: r.score) if non_wins else None

    return PlayerStats(
        player_id=player.id.value,
        player_name=player.name,
        total_score=total_score,
        rounds_played=rounds_played,
        rounds_skipped=rounds_skipped,
        rounds_won=rounds_won,
        win_rate=rounds_won / rounds_played if rounds_played else 0.0,
        average_score=total_score / rounds_played if rounds_played else 0.0,
        best_round=best_round,
        worst_round=worst_round,
        round_results=tuple(round_results),
    )


def find_first_empty_round_index(game: Game) -> int:
    """Index of the first round where nobody has an entered score, or -1."""
    for index in range(len(game.rounds)):
        if not any(isinstance(game.score_at(player, index), EnteredScore) for player in game.players):
            return index
    return -1


def is_round_fully_skipped(game: Game, round_index: int) -> bool:
    return bool(game.players) and all(game.is_skipped_in(player, round_index) for player in game.players)


def find_first_invalid_round_index(game: Game) -> int:
    """Index of the first round that is neither fully skipped nor complete, or -1."""
    for index, round_ in enumerate(game.rounds):
        if is_round_fully_skipped(game, index):
            continue
        if validate_round_completion(round_, index, game.players).has_feedback:
            return index
    return -1
