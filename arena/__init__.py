"""
arena - HTTP server for leagues

Serves the league contract over HTTP and stores it in SQLite. The arena
never decides who won a game: it resolves the caller and hands the call to
the contract.
"""

from .server import app
from .db import ArenaDB

__all__ = ["app", "ArenaDB"]
