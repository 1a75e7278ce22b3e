"""
leagues/store.py - Persistent collections over a byte-keyed store

The engine only needs four things from storage: get, put, remove and
iteration over a key prefix. Anything providing those (see Storage) can back
a league: MemoryStorage for tests, arena.db.ArenaDB for SQLite.

Each collection owns every key under its prefix:
  prefix + b"m"          length (8 bytes, big endian)
  prefix + b"i" + key    one element
"""

from typing import Callable, Generic, Iterator, Protocol, TypeVar

K = TypeVar("K")
V = TypeVar("V")

_META = b"m"
_ITEM = b"i"


class Storage(Protocol):
    """Byte-keyed key-value store."""

    def get(self, key: bytes) -> bytes | None: ...

    def put(self, key: bytes, value: bytes) -> None: ...

    def remove(self, key: bytes) -> None: ...

    def iter_prefix(self, prefix: bytes) -> Iterator[tuple[bytes, bytes]]:
        """(key, value) pairs whose key starts with prefix, ordered by key."""
        ...


class MemoryStorage:
    """Dict-backed Storage. Used in tests and for throwaway leagues."""

    def __init__(self):
        self._data: dict[bytes, bytes] = {}

    def get(self, key: bytes) -> bytes | None:
        return self._data.get(key)

    def put(self, key: bytes, value: bytes) -> None:
        self._data[key] = value

    def remove(self, key: bytes) -> None:
        self._data.pop(key, None)

    def iter_prefix(self, prefix: bytes) -> Iterator[tuple[bytes, bytes]]:
        for key in sorted(k for k in self._data if k.startswith(prefix)):
            yield key, self._data[key]

    def __len__(self) -> int:
        return len(self._data)


def clear_prefix(storage: Storage, prefix: bytes) -> int:
    """Remove every key under prefix. Returns the number removed."""
    keys = [key for key, _ in storage.iter_prefix(prefix)]
    for key in keys:
        storage.remove(key)
    return len(keys)


def _encode_str(value: str) -> bytes:
    return value.encode()


def _decode_str(raw: bytes) -> str:
    return raw.decode()


# ============================================================================
# Collections
# ============================================================================


class _Collection:
    def __init__(self, storage: Storage, prefix: bytes):
        self._storage = storage
        self.prefix = prefix

    def _item_key(self, suffix: bytes) -> bytes:
        return self.prefix + _ITEM + suffix

    def _get_len(self) -> int:
        raw = self._storage.get(self.prefix + _META)
        return int.from_bytes(raw, "big") if raw else 0

    def _set_len(self, length: int) -> None:
        self._storage.put(self.prefix + _META, length.to_bytes(8, "big"))

    def __len__(self) -> int:
        return self._get_len()

    def clear(self) -> None:
        clear_prefix(self._storage, self.prefix)


class Vector(_Collection):
    """Append-only list of strings."""

    def push(self, value: str) -> None:
        index = self._get_len()
        self._storage.put(self._item_key(index.to_bytes(8, "big")), _encode_str(value))
        self._set_len(index + 1)

    def get(self, index: int) -> str | None:
        if not 0 <= index < self._get_len():
            return None
        raw = self._storage.get(self._item_key(index.to_bytes(8, "big")))
        return _decode_str(raw) if raw is not None else None

    def __iter__(self) -> Iterator[str]:
        for _, raw in self._storage.iter_prefix(self.prefix + _ITEM):
            yield _decode_str(raw)

    def to_list(self) -> list[str]:
        return list(self)


class LookupSet(_Collection):
    """Set of strings with membership lookup."""

    def insert(self, value: str) -> bool:
        """Add value. Returns False if it was already present."""
        key = self._item_key(_encode_str(value))
        if self._storage.get(key) is not None:
            return False
        self._storage.put(key, b"")
        self._set_len(self._get_len() + 1)
        return True

    def contains(self, value: str) -> bool:
        return self._storage.get(self._item_key(_encode_str(value))) is not None

    def remove(self, value: str) -> bool:
        key = self._item_key(_encode_str(value))
        if self._storage.get(key) is None:
            return False
        self._storage.remove(key)
        self._set_len(self._get_len() - 1)
        return True

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and self.contains(value)

    def __iter__(self) -> Iterator[str]:
        start = len(self.prefix + _ITEM)
        for key, _ in self._storage.iter_prefix(self.prefix + _ITEM):
            yield _decode_str(key[start:])


class UnorderedMap(_Collection, Generic[K, V]):
    """Map with a counted length and iteration over its entries."""

    def __init__(
        self,
        storage: Storage,
        prefix: bytes,
        key_to_bytes: Callable[[K], bytes],
        key_from_bytes: Callable[[bytes], K],
        value_to_bytes: Callable[[V], bytes],
        value_from_bytes: Callable[[bytes], V],
    ):
        super().__init__(storage, prefix)
        self._key_to_bytes = key_to_bytes
        self._key_from_bytes = key_from_bytes
        self._value_to_bytes = value_to_bytes
        self._value_from_bytes = value_from_bytes

    def get(self, key: K) -> V | None:
        raw = self._storage.get(self._item_key(self._key_to_bytes(key)))
        return self._value_from_bytes(raw) if raw is not None else None

    def insert(self, key: K, value: V) -> None:
        item_key = self._item_key(self._key_to_bytes(key))
        if self._storage.get(item_key) is None:
            self._set_len(self._get_len() + 1)
        self._storage.put(item_key, self._value_to_bytes(value))

    def remove(self, key: K) -> V | None:
        item_key = self._item_key(self._key_to_bytes(key))
        raw = self._storage.get(item_key)
        if raw is None:
            return None
        self._storage.remove(item_key)
        self._set_len(self._get_len() - 1)
        return self._value_from_bytes(raw)

    def __contains__(self, key: object) -> bool:
        return self._storage.get(self._item_key(self._key_to_bytes(key))) is not None

    def items(self) -> Iterator[tuple[K, V]]:
        start = len(self.prefix + _ITEM)
        for item_key, raw in self._storage.iter_prefix(self.prefix + _ITEM):
            yield self._key_from_bytes(item_key[start:]), self._value_from_bytes(raw)

    def values(self) -> Iterator[V]:
        for _, value in self.items():
            yield value
