"""
Leagues - round-robin leagues of 1v1 matches

Records the games of every pairing in a league, decides best-of-N matches
and tells when a league is finished.
"""

__version__ = "0.1.0"

from .errors import (
    LeagueError,
    LeagueValidationError,
    LeagueAuthorizationError,
    LeagueStateError,
    InvalidGameDataError,
)

from .game_types import (
    GameType,
    list_game_types,
)

from .game_match import (
    GameMatch,
    GameRecord,
    Winner,
)

from .league import (
    League,
    PlayerPair,
    UpgradeableLeagueProperties,
)

from .contract import LeagueContract

from .store import MemoryStorage, Storage

__all__ = [
    # Version
    "__version__",
    # Errors
    "LeagueError",
    "LeagueValidationError",
    "LeagueAuthorizationError",
    "LeagueStateError",
    "InvalidGameDataError",
    # Game types
    "GameType",
    "list_game_types",
    # Matches
    "GameMatch",
    "GameRecord",
    "Winner",
    # League
    "League",
    "PlayerPair",
    "UpgradeableLeagueProperties",
    "LeagueContract",
    # Storage
    "MemoryStorage",
    "Storage",
]
