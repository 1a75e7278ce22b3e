"""Tests for leagues.game_match: games and best-of-N winners."""

from itertools import product

import pytest

from leagues.errors import InvalidGameDataError
from leagues.game_match import GameMatch, GameRecord, Winner
from leagues.game_types import GameType


def _match(*outcomes: bool) -> GameMatch:
    """Match whose games were won by the first player where outcome is True."""
    return GameMatch(games=[GameRecord(o, b"{}") for o in outcomes])


class TestWinner:
    def test_undecided_has_no_winner(self):
        assert Winner.UNDECIDED.exists is False

    def test_decided_has_winner(self):
        assert Winner.FIRST_PLAYER.exists is True
        assert Winner.SECOND_PLAYER.exists is True


class TestGameRecord:
    def test_new_with_data(self):
        game = GameRecord.new_with_data(True, GameType.STANDARD, "{}")
        assert game.first_player_is_winner is True
        assert game.content(GameType.STANDARD) == "{}"

    def test_new_with_bad_data_raises(self):
        with pytest.raises(InvalidGameDataError):
            GameRecord.new_with_data(True, GameType.STANDARD, '{"map": "Lost Temple"}')

    def test_is_immutable(self):
        game = GameRecord(True, b"{}")
        with pytest.raises(AttributeError):
            game.first_player_is_winner = False


class TestGameMatchWinner:
    def test_empty_match_is_undecided(self):
        assert _match().winner(3) is Winner.UNDECIDED

    def test_best_of_one(self):
        assert _match(True).winner(1) is Winner.FIRST_PLAYER
        assert _match(False).winner(1) is Winner.SECOND_PLAYER

    def test_best_of_three_needs_two(self):
        assert _match(True).winner(3) is Winner.UNDECIDED
        assert _match(True, True).winner(3) is Winner.FIRST_PLAYER

    def test_best_of_three_split_goes_to_decider(self):
        assert _match(True, False).winner(3) is Winner.UNDECIDED
        assert _match(True, False, False).winner(3) is Winner.SECOND_PLAYER

    def test_games_beyond_best_of_are_ignored(self):
        # Not reachable through League, but winner() must not count them
        assert _match(False, True, True).winner(1) is Winner.SECOND_PLAYER

    @pytest.mark.parametrize("best_of", [1, 3, 5, 7])
    def test_every_outcome_sequence(self, best_of):
        needed = (best_of + 1) // 2
        for outcomes in product([True, False], repeat=best_of):
            first = second = 0
            for played, first_won in enumerate(outcomes, start=1):
                first += first_won
                second += not first_won
                result = _match(*outcomes[:played]).winner(best_of)
                if first == needed:
                    assert result is Winner.FIRST_PLAYER
                    break
                if second == needed:
                    assert result is Winner.SECOND_PLAYER
                    break
                assert result is Winner.UNDECIDED

    def test_winner_is_idempotent(self):
        match = _match(True, True)
        assert match.winner(3) is match.winner(3)


class TestGameMatchStorage:
    def test_add_game_appends_in_order(self):
        match = GameMatch()
        match.add_game(GameRecord(True, b"{}"))
        match.add_game(GameRecord(False, b"{}"))
        assert [g.first_player_is_winner for g in match.games] == [True, False]
        assert len(match) == 2

    def test_bytes_round_trip(self):
        match = _match(True, False, True)
        restored = GameMatch.from_bytes(match.to_bytes())
        assert restored == match
