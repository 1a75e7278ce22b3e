"""Tests for leagues.contract: the league registry and its calls."""

import pytest

from leagues.contract import LeagueContract
from leagues.errors import (
    AlreadyInitializedError,
    ContractNotInitializedError,
    InvalidBestOfError,
    InvalidGameDataError,
    InvalidNameError,
    LeagueExistsError,
    LeagueNameTooShortError,
    LeagueNotFinishedError,
    LeagueNotFoundError,
    MatchFinishedError,
    NotAllowedError,
    NotOwnerError,
    PlayerNotFoundError,
    SamePlayerError,
    TooFewPlayersError,
)
from leagues.game_match import Winner
from leagues.keys import CollectionKeyTuple
from leagues.store import LookupSet, MemoryStorage, Vector

PLAYERS = ["Alice", "Bob", "Charly"]
OWNER = "alice.near"
TRUSTED = "bob.near"
STRANGER = "mallory.near"


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def contract(storage):
    return LeagueContract.new(storage)


def _create(contract, name="SomeLeague", best_of=3, accounts=None, players=None):
    return contract.create_league(
        name,
        players or PLAYERS,
        accounts if accounts is not None else [OWNER, TRUSTED],
        best_of,
        "StandardGameType",
        OWNER,
    )


# ======================================================================
# Init
# ======================================================================


class TestInit:
    def test_new_twice_rejected(self, storage):
        LeagueContract.new(storage)
        with pytest.raises(AlreadyInitializedError):
            LeagueContract.new(storage)

    def test_load_uninitialized_rejected(self):
        with pytest.raises(ContractNotInitializedError):
            LeagueContract.load(MemoryStorage())

    def test_load_sees_existing_leagues(self, storage, contract):
        _create(contract)
        assert LeagueContract.load(storage).league_exists("SomeLeague")

    def test_open_initializes_once(self, storage):
        LeagueContract.open(storage)
        LeagueContract.open(storage)
        LeagueContract.load(storage)

    def test_game_types(self):
        assert LeagueContract.get_game_types() == ["StandardGameType"]


# ======================================================================
# create_league
# ======================================================================


class TestCreateLeague:
    def test_create(self, contract):
        _create(contract)
        summary = contract.league_summary("SomeLeague")
        assert summary["players"] == PLAYERS
        assert summary["best_of"] == 3
        assert summary["game_type"] == "StandardGameType"
        assert summary["owner"] == OWNER
        assert summary["trusted_accounts"] == [TRUSTED]
        assert summary["matches"] == 0
        assert summary["finished"] is False

    def test_create_twice_rejected(self, contract):
        _create(contract)
        with pytest.raises(LeagueExistsError):
            _create(contract)

    @pytest.mark.parametrize("best_of", [0, 2, 4, -1])
    def test_even_or_non_positive_best_of_rejected(self, contract, best_of):
        with pytest.raises(InvalidBestOfError):
            _create(contract, best_of=best_of)

    def test_two_players_rejected(self, contract):
        with pytest.raises(TooFewPlayersError):
            _create(contract, players=["Alice", "Bob"])

    def test_short_name_rejected(self, contract):
        with pytest.raises(LeagueNameTooShortError):
            _create(contract, name="ab")

    def test_unknown_game_type_rejected(self, contract):
        with pytest.raises(InvalidGameDataError):
            contract.create_league("SomeLeague", PLAYERS, [], 3, "Chess", OWNER)
        assert not contract.league_exists("SomeLeague")

    @pytest.mark.parametrize(
        "players, accounts",
        [
            (["Alice", "Bob", "\udcff"], []),
            (PLAYERS, [TRUSTED, "\udcff"]),
        ],
    )
    def test_undecodable_name_leaves_storage_untouched(self, storage, contract, players, accounts):
        before = list(storage.iter_prefix(b""))
        with pytest.raises(InvalidNameError):
            _create(contract, players=players, accounts=accounts)
        assert list(storage.iter_prefix(b"")) == before
        assert not contract.league_exists("SomeLeague")

        _create(contract, players=["Xena", "Yuri", "Zoe"])
        assert contract.league_summary("SomeLeague")["players"] == ["Xena", "Yuri", "Zoe"]

    def test_leftover_collection_data_cleared_on_create(self, storage, contract):
        keys = CollectionKeyTuple.from_seed("SomeLeague")
        Vector(storage, keys.players_key).push("Stale")
        LookupSet(storage, keys.trusted_key).insert(STRANGER)

        _create(contract)
        summary = contract.league_summary("SomeLeague")
        assert summary["players"] == PLAYERS
        assert summary["trusted_accounts"] == [TRUSTED]

    def test_leagues_are_isolated(self, contract):
        _create(contract, name="League A")
        _create(contract, name="League B", players=["Xena", "Yuri", "Zoe"])
        contract.add_game("League A", ("Alice", "Bob"), True, "{}", OWNER)
        assert contract.league_summary("League A")["matches"] == 1
        assert contract.league_summary("League B")["matches"] == 0
        assert contract.league_summary("League B")["players"] == ["Xena", "Yuri", "Zoe"]


# ======================================================================
# add_game
# ======================================================================


class TestAddGame:
    def test_owner_and_trusted_may_add(self, contract):
        _create(contract)
        contract.add_game("SomeLeague", ("Alice", "Bob"), True, "{}", OWNER)
        contract.add_game("SomeLeague", ("Alice", "Charly"), True, "{}", TRUSTED)
        assert contract.league_summary("SomeLeague")["matches"] == 2

    def test_stranger_rejected(self, contract):
        _create(contract)
        with pytest.raises(NotAllowedError):
            contract.add_game("SomeLeague", ("Alice", "Bob"), True, "{}", STRANGER)
        assert contract.league_summary("SomeLeague")["matches"] == 0

    def test_unknown_league(self, contract):
        with pytest.raises(LeagueNotFoundError):
            contract.add_game("Nope", ("Alice", "Bob"), True, "{}", OWNER)

    def test_best_of_three_scenario(self, contract):
        _create(contract)
        assert contract.add_game("SomeLeague", ("Alice", "Bob"), True, "{}", OWNER) is Winner.UNDECIDED
        assert contract.add_game("SomeLeague", ("Alice", "Bob"), True, "{}", OWNER) is Winner.FIRST_PLAYER
        assert contract.get_match("SomeLeague", ("Alice", "Bob"))["winner"] == "Alice"
        with pytest.raises(MatchFinishedError):
            contract.add_game("SomeLeague", ("Alice", "Bob"), True, "{}", OWNER)

    def test_same_player_rejected(self, contract):
        _create(contract)
        with pytest.raises(SamePlayerError):
            contract.add_game("SomeLeague", ("Alice", "Alice"), True, "{}", OWNER)

    def test_unknown_player_leaves_league_untouched(self, contract):
        _create(contract)
        with pytest.raises(PlayerNotFoundError):
            contract.add_game("SomeLeague", ("Malory", "Bob"), True, "{}", OWNER)
        assert contract.league_summary("SomeLeague")["matches"] == 0


# ======================================================================
# delete_league
# ======================================================================


class TestDeleteLeague:
    def _finish(self, contract):
        for pair in [("Alice", "Bob"), ("Alice", "Charly"), ("Bob", "Charly")]:
            contract.add_game("SomeLeague", pair, True, "{}", OWNER)

    def test_best_of_one_finished_league_deletes(self, storage, contract):
        _create(contract, best_of=1, accounts=[])
        self._finish(contract)
        assert contract.is_finished("SomeLeague") is True

        contract.delete_league("SomeLeague", False, OWNER)
        assert not contract.league_exists("SomeLeague")
        keys = CollectionKeyTuple.from_seed("SomeLeague")
        for prefix in (keys.players_key, keys.trusted_key, keys.matches_key):
            assert list(storage.iter_prefix(prefix)) == []

    def test_unfinished_league_rejected(self, contract):
        _create(contract)
        with pytest.raises(LeagueNotFinishedError):
            contract.delete_league("SomeLeague", False, OWNER)
        assert contract.league_exists("SomeLeague")

    def test_force_deletes_unfinished(self, contract):
        _create(contract)
        contract.delete_league("SomeLeague", True, OWNER)
        assert not contract.league_exists("SomeLeague")

    def test_trusted_may_not_delete(self, contract):
        _create(contract, best_of=1)
        self._finish(contract)
        with pytest.raises(NotOwnerError):
            contract.delete_league("SomeLeague", True, TRUSTED)

    def test_unknown_league(self, contract):
        with pytest.raises(LeagueNotFoundError):
            contract.delete_league("Nope", True, OWNER)

    def test_name_reusable_after_delete(self, contract):
        _create(contract)
        contract.add_game("SomeLeague", ("Alice", "Bob"), True, "{}", OWNER)
        contract.delete_league("SomeLeague", True, OWNER)
        _create(contract)
        assert contract.league_summary("SomeLeague")["matches"] == 0
