"""An in-memory key/value table, the server's health registry and response codes."""

from __future__ import annotations

import threading
from enum import Enum
from itertools import islice

Key = bytes | bytearray | memoryview | str


def _as_bytes(item: Key) -> bytes:
    if isinstance(item, str):
        return item.encode("utf-8")
    return bytes(item)


class RespCode(Enum):
    """Response codes that actions hand back instead of a value."""

    OKAY = "0"
    NIL = "1"
    OVERWRITE_ERR = "2"
    ACTION_ERR = "3"
    PACKET_ERR = "4"
    SERVER_ERR = "5"
    OTHER_ERR = "6"
    WRONGTYPE_ERR = "wrongtype-err"
    ENCODING_ERR = "encoding-err"
    WRONG_MODEL = "wrong-model"
    CONTAINER_NOT_FOUND = "container-not-found"


class Registry:
    """Tracks whether the database is healthy enough to accept writes."""

    def __init__(self) -> None:
        self._poisoned = threading.Event()

    def poison(self) -> None:
        """Mark the database as unhealthy; writes are refused from now on."""
        self._poisoned.set()

    def unpoison(self) -> None:
        """Mark the database as healthy again."""
        self._poisoned.clear()

    def state_okay(self) -> bool:
        """True while the database has not been poisoned."""
        return not self._poisoned.is_set()


class KVEngine:
    """A thread-safe table mapping byte-string keys to byte-string values.

    Keys and values may be given as ``str`` (encoded as UTF-8) or any bytes-like
    object; they are always stored and returned as ``bytes``.
    """

    def __init__(self) -> None:
        self._data: dict[bytes, bytes] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def set(self, key: Key, value: Key) -> bool:
        """Insert ``key`` only if it is absent. Returns True if it was inserted."""
        k = _as_bytes(key)
        with self._lock:
            if k in self._data:
                return False
            self._data[k] = _as_bytes(value)
            return True

    def update(self, key: Key, value: Key) -> bool:
        """Replace the value of an existing ``key``. Returns True if it existed."""
        k = _as_bytes(key)
        with self._lock:
            if k not in self._data:
                return False
            self._data[k] = _as_bytes(value)
            return True

    def upsert(self, key: Key, value: Key) -> None:
        """Insert or replace the value of ``key``."""
        with self._lock:
            self._data[_as_bytes(key)] = _as_bytes(value)

    def get(self, key: Key) -> bytes | None:
        """The value of ``key``, or None if it is absent."""
        with self._lock:
            return self._data.get(_as_bytes(key))

    def exists(self, key: Key) -> bool:
        """True if ``key`` is present."""
        with self._lock:
            return _as_bytes(key) in self._data

    def remove(self, key: Key) -> bool:
        """Delete ``key``. Returns True if it was present."""
        with self._lock:
            return self._data.pop(_as_bytes(key), None) is not None

    def pop(self, key: Key) -> bytes | None:
        """Delete ``key`` and return its value, or None if it was absent."""
        with self._lock:
            return self._data.pop(_as_bytes(key), None)

    def take_snapshot(self, key: Key) -> bytes | None:
        """The value of ``key`` at this moment, or None if it is absent."""
        return self.get(key)

    def remove_if(self, key: Key, expected: Key) -> bool:
        """Delete ``key`` only if its value still equals ``expected``."""
        k = _as_bytes(key)
        with self._lock:
            if self._data.get(k) != _as_bytes(expected):
                return False
            del self._data[k]
            return True

    def update_if(self, key: Key, value: Key, expected: Key) -> bool:
        """Replace the value of ``key`` only if it still equals ``expected``."""
        k = _as_bytes(key)
        with self._lock:
            if self._data.get(k) != _as_bytes(expected):
                return False
            self._data[k] = _as_bytes(value)
            return True

    def keys(self, count: int) -> list[bytes]:
        """At most ``count`` keys, in insertion order."""
        with self._lock:
            return list(islice(self._data, count))

    def truncate(self) -> None:
        """Delete every key."""
        with self._lock:
            self._data.clear()