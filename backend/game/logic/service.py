"""
Game service: the only path through which a game changes.

Every operation loads the current snapshot from the repository, validates
the request, builds a new immutable Game and persists it before returning
it. Expected rule violations raise ValidationError before anything is
saved, so a rejected operation never leaves a partial change behind.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from game.logic.entities import Game
from game.logic.enums import GameErrorCode
from game.logic.exceptions import ValidationError
from game.logic.feedback import Feedback
from game.logic.validators import validate_player_names, validate_round_completion, validate_score
from game.logic.value_objects import SkippedScore, entered, pending, skipped

if TYPE_CHECKING:
    from collections.abc import Sequence

    from game.logic.entities import Player, Round
    from game.logic.repository import GameRepository

logger = structlog.get_logger()


class GameService:
    """Coordinate validators, entity transitions and persistence for the active game."""

    def __init__(self, repo: GameRepository) -> None:
        self._repo = repo

    async def start_game(self, player_names: Sequence[str]) -> Game:
        """Validate names and persist a fresh game with seven empty rounds."""
        feedback = validate_player_names(player_names)
        if feedback.has_feedback:
            raise _rejection_from(feedback, GameErrorCode.VALIDATION)

        game = Game.create(player_names)
        await self._repo.save(game)
        logger.info("game started", num_players=len(game.players))
        return game

    async def load_game(self) -> Game | None:
        return await self._repo.load()

    async def set_score(self, player_id: str, round_index: int, score: int) -> Game:
        """Record an entered score for a player in an unlocked round."""
        game = await self._require_game()
        player = _get_player(game, player_id)
        round_ = _get_round(game, round_index)

        if isinstance(score, bool) or not isinstance(score, int):
            raise _rejection("score", "Score must be a whole number", GameErrorCode.VALIDATION)
        score_feedback = validate_score(score)
        if score_feedback.has_feedback:
            raise _rejection_from(score_feedback, GameErrorCode.VALIDATION)

        _require_not_ended(game)
        _require_unlocked(round_)

        if game.is_skipped_in(player, round_index):
            raise _rejection("player", "Player is skipped for this round", GameErrorCode.PLAYER_SKIPPED)

        updated = game.update_round(round_index, round_.set_score(player.id, entered(score)))
        await self._repo.save(updated)
        logger.info("score set", player_id=player_id, round_index=round_index, score=score)
        return updated

    async def skip_player(self, player_id: str, round_index: int, *, all_future: bool = False) -> Game:
        """
        Mark a player as skipped for a round.

        With all_future, the player also gets a skip_from_round anchor so every
        later round is skipped without writing a marker into each. A round
        already covered by an earlier anchor is left as it is, and a cascade may
        not reach over a locked round the player has a score in.
        """
        game = await self._require_game()
        player = _get_player(game, player_id)
        round_ = _get_round(game, round_index)

        _require_not_ended(game)
        _require_unlocked(round_)

        if player.is_skipped_at(round_index):
            # already covered by a cascade; a marker here would outlive the anchor
            updated = game
        else:
            updated = game.update_round(round_index, round_.set_score(player.id, skipped()))
            if all_future:
                _require_cascade_leaves_locked_rounds(game, player, round_index, clearing=False)
                updated = updated.update_player(player.skip_from(round_index))

        await self._repo.save(updated)
        logger.info("player skipped", player_id=player_id, round_index=round_index, all_future=all_future)
        return updated

    async def unskip_player(self, player_id: str, round_index: int) -> Game:
        """
        Revert a skip back to pending.

        Unskipping the anchor round of a skip cascade ends the cascade. Rounds
        after the anchor cannot be unskipped on their own.
        """
        game = await self._require_game()
        player = _get_player(game, player_id)
        round_ = _get_round(game, round_index)

        _require_not_ended(game)
        _require_unlocked(round_)

        anchor = player.skip_from_round
        if anchor is not None and round_index > anchor:
            raise _rejection(
                "player",
                f"Player skips all rounds from round {anchor + 1}; unskip that round first",
                GameErrorCode.CANNOT_UNSKIP_CASCADED,
            )

        explicitly_skipped = isinstance(round_.get_score(player.id), SkippedScore)
        if not explicitly_skipped and anchor != round_index:
            raise _rejection("player", "Player is not skipped for this round", GameErrorCode.PLAYER_NOT_SKIPPED)

        updated = game.update_round(round_index, round_.set_score(player.id, pending()))
        if anchor == round_index:
            _require_cascade_leaves_locked_rounds(game, player, round_index, clearing=True)
            updated = updated.update_player(player.clear_skip())

        await self._repo.save(updated)
        logger.info(
            "player unskipped",
            player_id=player_id,
            round_index=round_index,
            cascade_cleared=anchor == round_index,
        )
        return updated

    async def lock_round(self, round_index: int) -> Game:
        """Freeze a round once it passes completion validation."""
        game = await self._require_game()
        round_ = _get_round(game, round_index)

        if round_.is_locked:
            raise _rejection("round", "Round is already locked", GameErrorCode.ROUND_ALREADY_LOCKED)

        completion = validate_round_completion(round_, round_index, game.players)
        if completion.has_feedback:
            raise _rejection_from(completion, GameErrorCode.INCOMPLETE_ROUND)

        updated = game.update_round(round_index, round_.lock())
        await self._repo.save(updated)
        logger.info("round locked", round_index=round_index)
        return updated

    async def unlock_round(self, round_index: int) -> Game:
        game = await self._require_game()
        round_ = _get_round(game, round_index)

        if not round_.is_locked:
            raise _rejection("round", "Round is not locked", GameErrorCode.ROUND_NOT_LOCKED)

        if game.is_ended:
            raise _rejection("game", "Cannot unlock round in ended game", GameErrorCode.GAME_ENDED)

        updated = game.update_round(round_index, round_.unlock())
        await self._repo.save(updated)
        logger.info("round unlocked", round_index=round_index)
        return updated

    async def end_game(self) -> Game:
        """End the game. Every round must be locked first."""
        game = await self._require_game()

        if game.is_ended:
            raise _rejection("game", "Game is already ended", GameErrorCode.GAME_ALREADY_ENDED)

        if any(not round_.is_locked for round_ in game.rounds):
            raise _rejection(
                "game",
                "All rounds must be locked before ending the game",
                GameErrorCode.INCOMPLETE_LOCKING,
            )

        updated = game.end()
        await self._repo.save(updated)
        logger.info("game ended")
        return updated

    async def reopen_game(self) -> Game:
        """Take an ended game back to in-progress, keeping players and rounds."""
        game = await self._require_game()

        if not game.is_ended:
            raise _rejection("game", "Game is not ended", GameErrorCode.GAME_NOT_ENDED)

        updated = game.reopen()
        await self._repo.save(updated)
        logger.info("game reopened")
        return updated

    async def clear_game(self) -> None:
        await self._repo.clear()
        logger.info("game cleared")

    async def import_game(self, game: Game) -> Game:
        """Persist an externally supplied game as the active one, replacing any current game."""
        await self._repo.save(game)
        logger.info("game imported", num_players=len(game.players), is_ended=game.is_ended)
        return game

    # -- private helpers --

    async def _require_game(self) -> Game:
        game = await self._repo.load()
        if game is None:
            raise _rejection("game", "No active game", GameErrorCode.NO_ACTIVE_GAME)
        return game


def _get_player(game: Game, player_id: str) -> Player:
    player = game.find_player(player_id)
    if player is None:
        raise _rejection("player", "Player not found", GameErrorCode.PLAYER_NOT_FOUND)
    return player


def _get_round(game: Game, round_index: int) -> Round:
    if isinstance(round_index, bool) or not isinstance(round_index, int) or not (0 <= round_index < len(game.rounds)):
        raise _rejection("round", "Invalid round index", GameErrorCode.INVALID_ROUND_INDEX)
    return game.rounds[round_index]


def _require_not_ended(game: Game) -> None:
    if game.is_ended:
        raise _rejection("game", "Game has ended", GameErrorCode.GAME_ENDED)


def _require_unlocked(round_: Round) -> None:
    if round_.is_locked:
        raise _rejection("round", "Round is locked", GameErrorCode.ROUND_LOCKED)


def _require_cascade_leaves_locked_rounds(game: Game, player: Player, anchor: int, *, clearing: bool) -> None:
    """
    Reject a cascade change that would alter the player's effective score in a locked round.

    Setting an anchor turns every later round into a skip; clearing one brings
    back whatever the round itself holds. Rounds where the player already has
    an explicit skip marker are unaffected either way.
    """
    end = len(game.rounds) if clearing or player.skip_from_round is None else player.skip_from_round
    for index in range(anchor + 1, end):
        round_ = game.rounds[index]
        if round_.is_locked and not isinstance(round_.get_score(player.id), SkippedScore):
            raise _rejection(
                "round",
                f"Round {index + 1} is locked; unlock it before changing the skip cascade",
                GameErrorCode.ROUND_LOCKED,
            )


def _rejection(field: str, message: str, code: GameErrorCode) -> ValidationError:
    return _rejection_from(Feedback.from_dict({field: [message]}), code)


def _rejection_from(feedback: Feedback, code: GameErrorCode) -> ValidationError:
    logger.info("operation rejected", error_code=code, fields=feedback.fields)
    return ValidationError(feedback, code)
