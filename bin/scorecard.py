"""Keep score for a rummy game from the command line.

Usage: uv run python bin/scorecard.py <command> [args]

    start Alice Bob Charlie      start a new game
    score Alice 1 25             record a score (round numbers start at 1)
    skip Charlie 3 [--all]       skip a round, or every round from it on
    unskip Charlie 3
    lock 1 / unlock 1
    end / reopen / clear
    show                         scorecard and standings
    stats Alice
    share                        print a share URL
    import <url-or-payload>

Storage and logging are configured with SCORECARD_* environment variables.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from game.app import Services, create_services
from game.logic.entities import Game, Player
from game.logic.exceptions import GameDataError, ShareDecodeError, ValidationError
from game.logic.stats import calculate_player_stats, calculate_player_totals, calculate_rankings
from game.logic.value_objects import EnteredScore, SkippedScore
from shared.logging import setup_logging
from shared.settings import ScorecardSettings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rummy scorecard")
    parser.add_argument("-v", "--verbose", action="store_true", help="log at the configured level instead of WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    start = sub.add_parser("start", help="start a new game")
    start.add_argument("names", nargs="+")

    score = sub.add_parser("score", help="record a score")
    score.add_argument("player")
    score.add_argument("round", type=int)
    score.add_argument("score", type=int)

    skip = sub.add_parser("skip", help="skip a player for a round")
    skip.add_argument("player")
    skip.add_argument("round", type=int)
    skip.add_argument("--all", dest="all_future", action="store_true", help="also skip every later round")

    unskip = sub.add_parser("unskip", help="undo a skip")
    unskip.add_argument("player")
    unskip.add_argument("round", type=int)

    for name in ("lock", "unlock"):
        p = sub.add_parser(name, help=f"{name} a round")
        p.add_argument("round", type=int)

    for name in ("end", "reopen", "clear", "show", "share"):
        sub.add_parser(name)

    stats = sub.add_parser("stats", help="per-player statistics")
    stats.add_argument("player")

    imp = sub.add_parser("import", help="import a shared game")
    imp.add_argument("data", help="share URL or bare payload")

    return parser


def _resolve_player(game: Game | None, ref: str) -> str:
    """Accept a player id or a case-insensitive name. Unknown refs pass through for the service to reject."""
    if game is None:
        return ref
    for player in game.players:
        if player.id.value == ref or player.name.lower() == ref.lower():
            return player.id.value
    return ref


def _cell(game: Game, player: Player, round_index: int) -> str:
    score = game.score_at(player, round_index)
    if isinstance(score, EnteredScore):
        return str(score.value.value)
    if isinstance(score, SkippedScore):
        return "-"
    return "."


def _print_game(game: Game) -> None:
    width = max(len(p.name) for p in game.players)
    header = " ".join(f"{r.type.abbreviation:>5}" for r in game.rounds)
    print(f"{'':<{width}} {header} {'Total':>6}")
    totals = calculate_player_totals(game)
    for player in game.players:
        cells = " ".join(f"{_cell(game, player, i):>5}" for i in range(len(game.rounds)))
        print(f"{player.name:<{width}} {cells} {totals[player.id.value]:>6}")
    locks = " ".join(f"{'L' if r.is_locked else '':>5}" for r in game.rounds)
    print(f"{'':<{width}} {locks}")
    print()
    for ranking in calculate_rankings(game):
        note = " (skipped rounds)" if ranking.has_skipped_rounds else ""
        print(f"{ranking.rank}. {ranking.player_name} - {ranking.total} in {ranking.rounds_played} rounds{note}")
    if game.is_ended:
        print("\nGame ended.")


async def _run(args: argparse.Namespace, services: Services) -> Game | None:  # noqa: PLR0911, C901
    service = services.game_service

    if args.command == "start":
        return await service.start_game(args.names)
    if args.command == "clear":
        await service.clear_game()
        print("Game cleared.")
        return None
    if args.command == "import":
        share = services.share_service
        payload = share.extract_payload(args.data) if "?" in args.data else args.data
        return await service.import_game(share.decode(payload))

    current = await service.load_game()
    if args.command == "score":
        return await service.set_score(_resolve_player(current, args.player), args.round - 1, args.score)
    if args.command == "skip":
        return await service.skip_player(
            _resolve_player(current, args.player),
            args.round - 1,
            all_future=args.all_future,
        )
    if args.command == "unskip":
        return await service.unskip_player(_resolve_player(current, args.player), args.round - 1)
    if args.command == "lock":
        return await service.lock_round(args.round - 1)
    if args.command == "unlock":
        return await service.unlock_round(args.round - 1)
    if args.command == "end":
        return await service.end_game()
    if args.command == "reopen":
        return await service.reopen_game()

    if current is None:
        print("No active game.")
        sys.exit(1)
    if args.command == "share":
        print(services.share_service.create_share_url(current))
    elif args.command == "stats":
        stats = calculate_player_stats(current, _resolve_player(current, args.player))
        if stats is None:
            print(f"Unknown player: {args.player}")
            sys.exit(1)
        print(stats.model_dump_json(indent=2))
    else:
        _print_game(current)
    return None


async def main() -> None:
    args = _build_parser().parse_args()
    settings = ScorecardSettings()
    if not args.verbose:
        settings = settings.model_copy(update={"log_level": "WARNING"})
    setup_logging(settings)

    services = create_services(settings)
    try:
        game = await _run(args, services)
    except ValidationError as e:
        for field, messages in e.feedback.to_dict().items():
            for message in messages:
                print(f"Error ({field}): {message}")
        sys.exit(1)
    except ShareDecodeError as e:
        print(f"Error ({e.kind.value}): {e}")
        sys.exit(1)
    except GameDataError as e:
        print(f"Error: stored game is unreadable: {e}")
        sys.exit(1)
    finally:
        services.close()

    if game is not None:
        _print_game(game)


if __name__ == "__main__":
    asyncio.run(main())
