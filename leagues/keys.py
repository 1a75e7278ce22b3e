"""
leagues/keys.py - Storage key prefixes for the collections inside a league

A league does not know its own name, so the prefixes of its three
collections are derived from the (unique) league name once, at creation,
and stored with the league.
"""

import hashlib
from dataclasses import dataclass
from typing import Callable


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


@dataclass(frozen=True)
class CollectionKeyTuple:
    """The three collection prefixes of one league."""

    players_key: bytes
    trusted_key: bytes
    matches_key: bytes

    @classmethod
    def from_seed(
        cls, seed: str, hash_fn: Callable[[bytes], bytes] = sha256
    ) -> "CollectionKeyTuple":
        """Derive the prefixes from a unique seed (the league name).

        The seed digest gets one trailing byte (0, 1, 2) per collection, so
        the three prefixes differ from each other and, through the digest,
        from every other league's.
        """
        digest = hash_fn(seed.encode())
        return cls(
            players_key=digest + b"\x00",
            trusted_key=digest + b"\x01",
            matches_key=digest + b"\x02",
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "players": self.players_key.hex(),
            "trusted": self.trusted_key.hex(),
            "matches": self.matches_key.hex(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> "CollectionKeyTuple":
        return cls(
            players_key=bytes.fromhex(data["players"]),
            trusted_key=bytes.fromhex(data["trusted"]),
            matches_key=bytes.fromhex(data["matches"]),
        )
