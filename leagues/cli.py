#!/usr/bin/env python3
"""
leagues/cli.py - Command line interface for Leagues

Usage:
    leagues [--caller ACCOUNT] [--db PATH] <command> ...

    leagues create <league> <player>... --best-of 3 [--trusted ACCOUNT ...]
    leagues add-game <league> <player1> <player2> --winner 1|2 [--data JSON]
    leagues status <league>
    leagues match <league> <player1> <player2>
    leagues delete <league> [--force]
    leagues game-types
    leagues keygen
    leagues arena [--host HOST] [--port 8000]

Local commands act on the SQLite store directly. The caller is --caller,
or [identity] account from ~/.leagues/config.toml.
"""

import argparse
import json
import logging
import sys

from leagues.config import load_config

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _open_contract(args):
    from arena.db import ArenaDB
    from leagues.contract import LeagueContract

    return LeagueContract.open(ArenaDB(args.db))


def _caller(args) -> str | None:
    if args.caller:
        return args.caller
    logger.error("No caller given: pass --caller or set [identity] account in config.toml")
    return None


def _run(func) -> int:
    """Run a contract call, turning league errors into exit code 1."""
    from leagues.errors import LeagueError

    try:
        func()
    except LeagueError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    return 0


def cmd_create(args):
    """Create a league owned by the caller."""
    caller = _caller(args)
    if caller is None:
        return 1
    contract = _open_contract(args)

    def create():
        contract.create_league(
            args.league, args.players, args.trusted, args.best_of, args.game_type, caller
        )
        logger.info(f"🏟  League {args.league} created")
        logger.info(f"   Players: {', '.join(args.players)}")
        logger.info(f"   Format: Bo{args.best_of}, {args.game_type}")

    return _run(create)


def cmd_add_game(args):
    """Record one game."""
    caller = _caller(args)
    if caller is None:
        return 1
    contract = _open_contract(args)

    def add():
        winner = contract.add_game(
            args.league, (args.player1, args.player2), args.winner == 1, args.data, caller
        )
        winner_name = args.player1 if args.winner == 1 else args.player2
        logger.info(f"   Game over! {winner_name} wins")
        if winner.exists:
            match = contract.get_match(args.league, (args.player1, args.player2))
            logger.info(f"🏆 Match complete: {match['winner']} wins")
        if contract.is_finished(args.league):
            logger.info(f"🏁 League {args.league} is finished")

    return _run(add)


def cmd_status(args):
    """Print a league summary as JSON."""
    contract = _open_contract(args)
    return _run(lambda: print(json.dumps(contract.league_summary(args.league), indent=2)))


def cmd_match(args):
    """Print the games between two players as JSON."""
    contract = _open_contract(args)
    return _run(
        lambda: print(
            json.dumps(contract.get_match(args.league, (args.player1, args.player2)), indent=2)
        )
    )


def cmd_delete(args):
    """Delete a league (owner only)."""
    caller = _caller(args)
    if caller is None:
        return 1
    contract = _open_contract(args)

    def delete():
        contract.delete_league(args.league, args.force, caller)
        logger.info(f"League {args.league} deleted")

    return _run(delete)


def cmd_game_types(args):
    """List registered game types."""
    from leagues.game_types import list_game_types

    for name in list_game_types():
        print(name)
    return 0


def cmd_keygen(args):
    """Generate an account for signing arena requests."""
    from leagues.identity import generate_account

    address, key = generate_account()
    print(f"address:     {address}")
    print(f"private_key: {key}")
    return 0


def cmd_arena(args):
    """Start the arena server."""
    import uvicorn

    from arena.server import app

    # Set DB path on app state so lifespan picks it up
    app.state.db_path = args.db
    logger.info(f"Starting arena server on {args.host}:{args.port} (db: {args.db})")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    return 0


def main(argv: list[str] | None = None):
    config = load_config()
    _setup_logging(config.log_level)

    parser = argparse.ArgumentParser(
        prog="leagues",
        description="Round-robin leagues of 1v1 matches",
    )
    parser.add_argument("--db", default=config.arena.db_path, help=f"SQLite database path (default: {config.arena.db_path})")
    parser.add_argument("--caller", default=config.identity.account, help="Account performing the operation")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # create command
    create_parser = subparsers.add_parser("create", help="Create a league")
    create_parser.add_argument("league", help="League name (unique, at least 3 chars)")
    create_parser.add_argument("players", nargs="+", help="Participants (at least 3)")
    create_parser.add_argument("--best-of", "-b", type=int, default=1, help="Games per match, odd (default: 1)")
    create_parser.add_argument("--game-type", default="StandardGameType", help="Game type (default: StandardGameType)")
    create_parser.add_argument("--trusted", "-t", action="append", default=[], help="Trusted account (repeatable)")
    create_parser.set_defaults(func=cmd_create)

    # add-game command
    add_parser = subparsers.add_parser("add-game", help="Record a game")
    add_parser.add_argument("league", help="League name")
    add_parser.add_argument("player1", help="First player")
    add_parser.add_argument("player2", help="Second player")
    add_parser.add_argument("--winner", "-w", type=int, choices=[1, 2], required=True, help="Which player won (1 or 2)")
    add_parser.add_argument("--data", default="{}", help="Game data as JSON (default: {})")
    add_parser.set_defaults(func=cmd_add_game)

    # status command
    status_parser = subparsers.add_parser("status", help="Show a league")
    status_parser.add_argument("league", help="League name")
    status_parser.set_defaults(func=cmd_status)

    # match command
    match_parser = subparsers.add_parser("match", help="Show the games between two players")
    match_parser.add_argument("league", help="League name")
    match_parser.add_argument("player1", help="First player")
    match_parser.add_argument("player2", help="Second player")
    match_parser.set_defaults(func=cmd_match)

    # delete command
    delete_parser = subparsers.add_parser("delete", help="Delete a league")
    delete_parser.add_argument("league", help="League name")
    delete_parser.add_argument("--force", action="store_true", help="Delete even if unfinished")
    delete_parser.set_defaults(func=cmd_delete)

    # game-types command
    types_parser = subparsers.add_parser("game-types", help="List game types")
    types_parser.set_defaults(func=cmd_game_types)

    # keygen command
    keygen_parser = subparsers.add_parser("keygen", help="Generate a signing account")
    keygen_parser.set_defaults(func=cmd_keygen)

    # arena command
    arena_parser = subparsers.add_parser("arena", help="Start the league server")
    arena_parser.add_argument("--host", default=config.arena.host, help=f"Bind address (default: {config.arena.host})")
    arena_parser.add_argument("--port", "-p", type=int, default=config.arena.port, help=f"Server port (default: {config.arena.port})")
    arena_parser.set_defaults(func=cmd_arena)

    args = parser.parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
