"""Builders for Game snapshots used across scorecard tests."""

from collections.abc import Mapping

from game.logic.entities import Game, Player, Round
from game.logic.value_objects import PlayerId, RoundType, entered, skipped

SKIP = "skip"


def create_player(name: str, *, skip_from_round: int | None = None) -> Player:
    """Player with a readable deterministic id: 'p-<lowercased name>'."""
    return Player(id=PlayerId(value=f"p-{name.lower()}"), name=name, skip_from_round=skip_from_round)


def create_game(*names: str, is_ended: bool = False) -> Game:
    """Game with deterministic player ids and seven empty rounds."""
    players = tuple(create_player(name) for name in names)
    rounds = tuple(Round.create(round_type) for round_type in RoundType.all())
    return Game(players=players, rounds=rounds, is_ended=is_ended)


def pid(game: Game, name: str) -> str:
    """Id of the player with the given name."""
    return next(p.id.value for p in game.players if p.name == name)


def with_scores(game: Game, round_index: int, scores: Mapping[str, int | str], *, locked: bool = False) -> Game:
    """
    Return game with scores written into one round, keyed by player name.

    Use SKIP as the value to mark a player skipped.
    """
    round_ = game.rounds[round_index]
    for name, value in scores.items():
        player_id = PlayerId(value=pid(game, name))
        score = skipped() if value == SKIP else entered(int(value))
        round_ = round_.set_score(player_id, score)
    if locked:
        round_ = round_.lock()
    return game.update_round(round_index, round_)


def with_skip_from(game: Game, name: str, round_index: int) -> Game:
    player = next(p for p in game.players if p.name == name)
    return game.update_player(player.skip_from(round_index))
