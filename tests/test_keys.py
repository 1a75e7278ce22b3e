"""Tests for leagues.keys: collection prefixes derived from league names."""

import hashlib

from leagues.keys import CollectionKeyTuple


class TestCollectionKeyTuple:
    def test_prefixes_extend_sha256_of_seed(self):
        keys = CollectionKeyTuple.from_seed("SomeLeague")
        digest = hashlib.sha256(b"SomeLeague").digest()
        assert keys.players_key == digest + b"\x00"
        assert keys.trusted_key == digest + b"\x01"
        assert keys.matches_key == digest + b"\x02"

    def test_three_distinct_prefixes(self):
        keys = CollectionKeyTuple.from_seed("SomeLeague")
        assert len({keys.players_key, keys.trusted_key, keys.matches_key}) == 3

    def test_deterministic(self):
        assert CollectionKeyTuple.from_seed("SomeLeague") == CollectionKeyTuple.from_seed("SomeLeague")

    def test_different_leagues_do_not_share_prefixes(self):
        a = CollectionKeyTuple.from_seed("League A")
        b = CollectionKeyTuple.from_seed("League B")
        a_keys = {a.players_key, a.trusted_key, a.matches_key}
        assert not a_keys & {b.players_key, b.trusted_key, b.matches_key}

    def test_custom_hash_function(self):
        keys = CollectionKeyTuple.from_seed("abc", hash_fn=lambda data: data.upper())
        assert keys.players_key == b"ABC\x00"

    def test_dict_round_trip(self):
        keys = CollectionKeyTuple.from_seed("SomeLeague")
        assert CollectionKeyTuple.from_dict(keys.to_dict()) == keys
