"""
leagues/league.py - The league aggregate

A league owns an immutable roster, the matches between every pair of roster
entries, the set of trusted accounts and its owner.

Players are referenced by their index in the roster, never by name. A
PlayerPair of two indices is the key of a match and is stored canonically
(smaller index first), so "Alice vs Bob" and "Bob vs Alice" are the same
match.

Authorization is not enforced here. is_allowed() and is_owner() are plain
predicates; the contract decides which one an operation needs.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Any, Iterator

from .errors import (
    LeagueNotFinishedError,
    MatchFinishedError,
    NotOwnerError,
    PlayerNotFoundError,
    SamePlayerError,
)
from .game_match import GameMatch, GameRecord, Winner
from .game_types import GameType
from .keys import CollectionKeyTuple
from .store import LookupSet, Storage, UnorderedMap, Vector

logger = logging.getLogger(__name__)


# ============================================================================
# PlayerPair
# ============================================================================


@dataclass(frozen=True)
class PlayerPair:
    """The two contestants of a match, smaller roster index first."""

    first: int
    second: int

    @classmethod
    def new(cls, first: int, second: int) -> "PlayerPair":
        """Canonical pair; new(a, b) == new(b, a)."""
        if first <= second:
            return cls(first, second)
        return cls(second, first)

    def is_swapped(self, should_be_first: int) -> bool:
        """True if the caller's first index ended up second.

        A caller's "first player won" flag has to be flipped in that case.
        """
        return self.first != should_be_first

    def to_bytes(self) -> bytes:
        return struct.pack(">II", self.first, self.second)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "PlayerPair":
        first, second = struct.unpack(">II", raw)
        return cls(first, second)


# ============================================================================
# Properties
# ============================================================================


@dataclass(frozen=True)
class LeaguePropertiesV1:
    """First (and current) version of the league properties."""

    best_of: int
    game_type: GameType


@dataclass(frozen=True)
class UpgradeableLeagueProperties:
    """League properties tagged with their schema version.

    Stored leagues keep the version they were created with. A new version
    gets its own dataclass and a branch in each accessor below.
    """

    version: str
    value: LeaguePropertiesV1

    @classmethod
    def v1(cls, best_of: int, game_type: GameType) -> "UpgradeableLeagueProperties":
        return cls("v1", LeaguePropertiesV1(best_of=best_of, game_type=game_type))

    @property
    def best_of(self) -> int:
        if self.version == "v1":
            return self.value.best_of
        raise ValueError(f"Unknown league properties version: {self.version!r}")

    @property
    def game_type(self) -> GameType:
        if self.version == "v1":
            return self.value.game_type
        raise ValueError(f"Unknown league properties version: {self.version!r}")

    def to_dict(self) -> dict[str, Any]:
        if self.version == "v1":
            return {
                "version": "v1",
                "best_of": self.value.best_of,
                "game_type": self.value.game_type.value,
            }
        raise ValueError(f"Unknown league properties version: {self.version!r}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UpgradeableLeagueProperties":
        version = data.get("version")
        if version == "v1":
            return cls.v1(data["best_of"], GameType(data["game_type"]))
        raise ValueError(f"Unknown league properties version: {version!r}")


# ============================================================================
# League
# ============================================================================


class League:
    """Roster, matches and access rights of one league."""

    def __init__(
        self,
        storage: Storage,
        keys: CollectionKeyTuple,
        properties: UpgradeableLeagueProperties,
        owner: str,
    ):
        self.keys = keys
        self.properties = properties
        self.owner = owner
        self._players = Vector(storage, keys.players_key)
        self._trusted = LookupSet(storage, keys.trusted_key)
        self._matches: UnorderedMap[PlayerPair, GameMatch] = UnorderedMap(
            storage,
            keys.matches_key,
            PlayerPair.to_bytes,
            PlayerPair.from_bytes,
            GameMatch.to_bytes,
            GameMatch.from_bytes,
        )

    @classmethod
    def new(
        cls,
        storage: Storage,
        keys: CollectionKeyTuple,
        properties: UpgradeableLeagueProperties,
        players: list[str],
        trusted_accounts: list[str],
        owner: str,
    ) -> "League":
        """Create a league and fill its roster and trusted set.

        The owner is always allowed, so it is left out of the trusted set.
        Whatever was left under the key prefixes is cleared first.
        """
        league = cls(storage, keys, properties, owner)
        league.clear()
        for player in players:
            league._players.push(player)
        for account in trusted_accounts:
            if account != owner:
                league._trusted.insert(account)
        return league

    # ------------------------------------------------------------------
    # Storage form (the collections persist themselves)
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "properties": self.properties.to_dict(),
            "keys": self.keys.to_dict(),
            "owner": self.owner,
        }

    @classmethod
    def from_dict(cls, storage: Storage, data: dict[str, Any]) -> "League":
        return cls(
            storage,
            CollectionKeyTuple.from_dict(data["keys"]),
            UpgradeableLeagueProperties.from_dict(data["properties"]),
            data["owner"],
        )

    def clear(self) -> None:
        """Drop the roster, trusted set and matches from storage."""
        self._players.clear()
        self._trusted.clear()
        self._matches.clear()

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def is_owner(self, caller: str) -> bool:
        return caller == self.owner

    def is_allowed(self, caller: str) -> bool:
        """Owner or trusted account."""
        return self.is_owner(caller) or self._trusted.contains(caller)

    def check_delete(self, caller: str, force: bool = False) -> None:
        """Raise unless caller may delete the league now.

        Raises:
            NotOwnerError: caller is not the owner
            LeagueNotFinishedError: unfinished and not forced
        """
        if not self.is_owner(caller):
            raise NotOwnerError()
        if not (force or self.is_finished()):
            raise LeagueNotFinishedError()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def best_of(self) -> int:
        return self.properties.best_of

    @property
    def game_type(self) -> GameType:
        return self.properties.game_type

    def players(self) -> list[str]:
        return self._players.to_list()

    def trusted_accounts(self) -> list[str]:
        return list(self._trusted)

    def matches(self) -> Iterator[tuple[PlayerPair, GameMatch]]:
        return self._matches.items()

    def match_count(self) -> int:
        return len(self._matches)

    def is_finished(self) -> bool:
        """Every pair of players has a match and every match has a winner."""
        n = len(self._players)
        # Gaussian sum: one match per unordered pair
        if len(self._matches) != n * (n - 1) // 2:
            return False
        return all(m.winner(self.best_of).exists for m in self._matches.values())

    def get_match(self, player_names: tuple[str, str]) -> dict[str, Any]:
        """Games between two players, oriented like the caller named them."""
        pair, first_index = self._resolve_pair(player_names)
        game_match = self._matches.get(pair) or GameMatch()
        swapped = pair.is_swapped(first_index)

        winner = game_match.winner(self.best_of)
        if winner is Winner.UNDECIDED:
            winner_name = None
        elif (winner is Winner.FIRST_PLAYER) != swapped:
            winner_name = player_names[0]
        else:
            winner_name = player_names[1]

        return {
            "players": list(player_names),
            "winner": winner_name,
            "games": [
                {
                    "first_in_tuple_won": game.first_player_is_winner != swapped,
                    "game_data": game.content(self.game_type),
                }
                for game in game_match.games
            ],
        }

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_game(
        self,
        player_names: tuple[str, str],
        first_in_tuple_won: bool,
        game_data: str,
    ) -> Winner:
        """Record one game between two players.

        Returns the winner of the match after the game was added.

        Raises:
            SamePlayerError: both names are the same
            PlayerNotFoundError: a name is not on the roster
            MatchFinishedError: the match already has a winner
            InvalidGameDataError: game_data does not fit the game type
        """
        pair, first_index = self._resolve_pair(player_names)

        game_match = self._matches.get(pair) or GameMatch()
        if game_match.winner(self.best_of).exists:
            raise MatchFinishedError()

        # Flip the flag if the caller named the players in reverse order
        first_has_won = pair.is_swapped(first_index) ^ first_in_tuple_won
        game = GameRecord.new_with_data(first_has_won, self.game_type, game_data)

        game_match.add_game(game)
        self._matches.insert(pair, game_match)

        winner = game_match.winner(self.best_of)
        logger.info(
            f"Game recorded: {player_names[0]} vs {player_names[1]} "
            f"({len(game_match)}/{self.best_of}, winner: {winner.value})"
        )
        return winner

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _index_of(self, name: str) -> int | None:
        for idx, player in enumerate(self._players):
            if player == name:
                return idx
        return None

    def _resolve_pair(self, player_names: tuple[str, str]) -> tuple[PlayerPair, int]:
        first_name, second_name = player_names
        if first_name == second_name:
            raise SamePlayerError()

        first = self._index_of(first_name)
        second = self._index_of(second_name)
        if first is None or second is None:
            missing = first_name if first is None else second_name
            raise PlayerNotFoundError(f"Player not found in the league: {missing!r}")

        logger.debug(f"Resolved {first_name!r} -> {first}, {second_name!r} -> {second}")
        return PlayerPair.new(first, second), first
