"""
leagues/game_match.py - Games and the best-of-N match between two players

A match is the bundle of games between one pair of contestants. Which
contestant is "first" is decided by the canonical PlayerPair the match is
stored under, never by the order a caller named them in.
"""

import json
from dataclasses import dataclass, field
from enum import Enum

from .game_types import GameType, decode_game_data, encode_game_data


class Winner(Enum):
    """Outcome of a match so far."""

    FIRST_PLAYER = "first"
    SECOND_PLAYER = "second"
    UNDECIDED = "undecided"

    @property
    def exists(self) -> bool:
        """True once the match has a winner."""
        return self is not Winner.UNDECIDED


@dataclass(frozen=True)
class GameRecord:
    """One resolved game: who won plus the encoded game data."""

    first_player_is_winner: bool
    game_data: bytes = b""

    @classmethod
    def new_with_data(
        cls, first_player_is_winner: bool, game_type: GameType, data: str
    ) -> "GameRecord":
        """Build a game from human readable game data.

        Raises:
            InvalidGameDataError: data does not conform to the game type
        """
        return cls(first_player_is_winner, encode_game_data(game_type, data))

    def content(self, game_type: GameType) -> str:
        """The game data as JSON."""
        return decode_game_data(game_type, self.game_data)


@dataclass
class GameMatch:
    """Ordered games between the two players of one PlayerPair."""

    games: list[GameRecord] = field(default_factory=list)

    def winner(self, best_of: int) -> Winner:
        """Winner according to best-of rules.

        Only the first best_of games count. A side wins on reaching
        (best_of + 1) // 2 game wins.
        """
        first = 0
        second = 0
        for game in self.games[:best_of]:
            if game.first_player_is_winner:
                first += 1
            else:
                second += 1

        win_condition = (best_of + 1) // 2

        if first == win_condition:
            return Winner.FIRST_PLAYER
        if second == win_condition:
            return Winner.SECOND_PLAYER
        return Winner.UNDECIDED

    def add_game(self, game: GameRecord) -> None:
        """Append a game. Bounds are the caller's business."""
        self.games.append(game)

    def __len__(self) -> int:
        return len(self.games)

    # ------------------------------------------------------------------
    # Storage form
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        return json.dumps(
            [
                {"first_player_is_winner": g.first_player_is_winner, "game_data": g.game_data.hex()}
                for g in self.games
            ],
            separators=(",", ":"),
        ).encode()

    @classmethod
    def from_bytes(cls, raw: bytes) -> "GameMatch":
        return cls(
            games=[
                GameRecord(item["first_player_is_winner"], bytes.fromhex(item["game_data"]))
                for item in json.loads(raw)
            ]
        )
