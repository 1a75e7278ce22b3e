"""
leagues/contract.py - The league registry and its public operations.

LeagueContract holds every league, keyed by name, in one Storage. It is the
boundary between callers and League: it validates input, derives storage
keys, checks who is calling and persists the result. League itself never
sees its own name or decides authorization.

Callers are opaque strings (an account id, a wallet address). Whoever
constructs the call is responsible for establishing who the caller is; see
leagues/identity.py for the signed-request flavor.
"""

import json
import logging
from typing import Any

from .errors import (
    AlreadyInitializedError,
    ContractNotInitializedError,
    InvalidBestOfError,
    InvalidNameError,
    LeagueExistsError,
    LeagueNameTooShortError,
    LeagueNotFoundError,
    NotAllowedError,
    TooFewPlayersError,
)
from .game_match import Winner
from .game_types import GameType, list_game_types, parse_game_type
from .keys import CollectionKeyTuple
from .league import League, UpgradeableLeagueProperties
from .store import Storage, UnorderedMap

logger = logging.getLogger(__name__)

_STATE_KEY = b"STATE"
_LEAGUES_PREFIX = b"0"

MIN_PLAYERS = 3
MIN_NAME_LENGTH = 3


def _encode_league(data: dict[str, Any]) -> bytes:
    return json.dumps(data, separators=(",", ":")).encode()


def _check_text(values: list[str]) -> None:
    """Raise unless every value can be stored as UTF-8."""
    for value in values:
        try:
            value.encode()
        except UnicodeEncodeError as e:
            raise InvalidNameError(f"Not valid UTF-8 text: {value!r}") from e


class LeagueContract:
    """Named leagues with trusted accounts and an owner each."""

    def __init__(self, storage: Storage):
        self._storage = storage
        self._leagues: UnorderedMap[str, dict[str, Any]] = UnorderedMap(
            storage,
            _LEAGUES_PREFIX,
            str.encode,
            bytes.decode,
            _encode_league,
            json.loads,
        )

    @classmethod
    def new(cls, storage: Storage) -> "LeagueContract":
        """Initialize contract state in an empty storage.

        Raises:
            AlreadyInitializedError: storage already holds a contract
        """
        if storage.get(_STATE_KEY) is not None:
            raise AlreadyInitializedError()
        storage.put(_STATE_KEY, b"1")
        logger.info("League contract initialized")
        return cls(storage)

    @classmethod
    def load(cls, storage: Storage) -> "LeagueContract":
        """Open a previously initialized contract.

        Raises:
            ContractNotInitializedError: new() was never called on storage
        """
        if storage.get(_STATE_KEY) is None:
            raise ContractNotInitializedError()
        return cls(storage)

    @classmethod
    def open(cls, storage: Storage) -> "LeagueContract":
        """load() if initialized, new() otherwise."""
        if storage.get(_STATE_KEY) is None:
            return cls.new(storage)
        return cls(storage)

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def create_league(
        self,
        league_name: str,
        players: list[str],
        accounts: list[str],
        best_of: int,
        game_type: GameType | str,
        caller: str,
    ) -> League:
        """Create a league owned by caller.

        accounts are the trusted accounts besides the owner; the owner may
        be listed and is dropped.

        Raises:
            InvalidBestOfError, TooFewPlayersError, LeagueNameTooShortError,
            InvalidNameError, LeagueExistsError,
            InvalidGameDataError (unknown game type)

        Nothing is written unless every check passes.
        """
        if best_of < 1 or best_of % 2 != 1:
            raise InvalidBestOfError()
        if len(players) < MIN_PLAYERS:
            raise TooFewPlayersError()
        if len(league_name) < MIN_NAME_LENGTH:
            raise LeagueNameTooShortError()
        _check_text([league_name, *players, *accounts, caller])
        if league_name in self._leagues:
            raise LeagueExistsError()
        game_type = parse_game_type(game_type)

        keys = CollectionKeyTuple.from_seed(league_name)
        properties = UpgradeableLeagueProperties.v1(best_of, game_type)
        league = League.new(self._storage, keys, properties, players, accounts, caller)
        self._leagues.insert(league_name, league.to_dict())

        logger.info(
            f"League created: {league_name} ({len(players)} players, "
            f"Bo{best_of}, {game_type.value}) by {caller}"
        )
        return league

    def add_game(
        self,
        league_name: str,
        player_names: tuple[str, str],
        first_in_tuple_won: bool,
        game_data: str,
        caller: str,
    ) -> Winner:
        """Record a game; caller has to be the owner or a trusted account.

        Returns the winner of the affected match after the game.
        """
        league = self.get_league(league_name)
        if not league.is_allowed(caller):
            raise NotAllowedError()
        return league.add_game(tuple(player_names), first_in_tuple_won, game_data)

    def delete_league(self, league_name: str, force: bool, caller: str) -> None:
        """Remove a league. Only the owner may, and only once it is finished
        unless force is set."""
        league = self.get_league(league_name)
        league.check_delete(caller, force)

        league.clear()
        self._leagues.remove(league_name)
        logger.info(f"League deleted: {league_name} by {caller} (force={force})")

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @staticmethod
    def get_game_types() -> list[str]:
        return list_game_types()

    def league_exists(self, league_name: str) -> bool:
        return league_name in self._leagues

    def get_league(self, league_name: str) -> League:
        """Raises LeagueNotFoundError if there is no such league."""
        data = self._leagues.get(league_name)
        if data is None:
            raise LeagueNotFoundError(f"League does not exist: {league_name!r}")
        return League.from_dict(self._storage, data)

    def league_summary(self, league_name: str) -> dict[str, Any]:
        league = self.get_league(league_name)
        return {
            "name": league_name,
            "players": league.players(),
            "best_of": league.best_of,
            "game_type": league.game_type.value,
            "owner": league.owner,
            "trusted_accounts": league.trusted_accounts(),
            "matches": league.match_count(),
            "finished": league.is_finished(),
        }

    def get_match(self, league_name: str, player_names: tuple[str, str]) -> dict[str, Any]:
        return self.get_league(league_name).get_match(tuple(player_names))

    def is_finished(self, league_name: str) -> bool:
        return self.get_league(league_name).is_finished()
