"""Actions that read from a table: HEYA, DBSIZE, EXISTS, GET, KEYLEN, LSKEYS and MGET.

Each action takes the current table and the query's arguments (the action name
excluded) and returns the response: a value, a list, or a RespCode.

This store holds a single table, so a named entity given to DBSIZE or LSKEYS
never resolves and yields ``RespCode.CONTAINER_NOT_FOUND``.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from skykv.kvstore import Key, KVEngine, RespCode

DEFAULT_COUNT = 10
HEYA = b"HEY!"

_USIZE_MAX = 2**64 - 1
_USIZE_PATTERN = re.compile(rb"\+?[0-9]+")


class JSONBlob:
    """Builds a flat JSON object of string values, byte by byte."""

    def __init__(self, size: int = 0) -> None:
        self._buf = bytearray(b"{")
        self._size_hint = size

    def insert(self, key: str, value: bytes | None) -> None:
        """Add ``"key":"value"``, or ``"key":null`` when ``value`` is None."""
        self._buf += b'"' + key.encode("utf-8") + b'":'
        if value is None:
            self._buf += b"null"
        else:
            self._buf += b'"' + bytes(value) + b'"'
        self._buf += b","

    def finish(self) -> bytes:
        """Close the object by replacing the final byte with ``}``."""
        self._buf[-1:] = b"}"
        return bytes(self._buf)


def _as_bytes(item: Key) -> bytes:
    if isinstance(item, str):
        return item.encode("utf-8")
    return bytes(item)


def _parse_count(raw: bytes) -> int | None:
    if not _USIZE_PATTERN.fullmatch(raw):
        return None
    value = int(raw)
    return value if value <= _USIZE_MAX else None


def heya(kve: KVEngine, args: Sequence[Key]) -> bytes:
    """Answer a greeting."""
    return HEYA


def dbsize(kve: KVEngine, args: Sequence[Key]) -> int | RespCode:
    """The number of keys in the table."""
    if len(args) > 1:
        return RespCode.ACTION_ERR
    if args:
        return RespCode.CONTAINER_NOT_FOUND
    return len(kve)


def exists(kve: KVEngine, args: Sequence[Key]) -> int | RespCode:
    """How many of the given keys exist."""
    if not args:
        return RespCode.ACTION_ERR
    return sum(1 for key in args if kve.exists(key))


def get(kve: KVEngine, args: Sequence[Key]) -> bytes | RespCode:
    """The value of exactly one key, or NIL."""
    if len(args) != 1:
        return RespCode.ACTION_ERR
    value = kve.get(args[0])
    return RespCode.NIL if value is None else value


def keylen(kve: KVEngine, args: Sequence[Key]) -> int | RespCode:
    """The length in bytes of the value of exactly one key, or NIL."""
    if len(args) != 1:
        return RespCode.ACTION_ERR
    value = kve.get(args[0])
    return RespCode.NIL if value is None else len(value)


def lskeys(kve: KVEngine, args: Sequence[Key]) -> list[bytes] | RespCode:
    """List up to a count of keys (10 by default); the count may be given as an argument."""
    if len(args) > 3:
        return RespCode.ACTION_ERR
    if not args:
        return kve.keys(DEFAULT_COUNT)
    if len(args) == 1:
        arg = _as_bytes(args[0])
        if arg[:1].isdigit():
            count = _parse_count(arg)
            if count is None:
                return RespCode.WRONGTYPE_ERR
            return kve.keys(count)
        return RespCode.CONTAINER_NOT_FOUND
    # An entity followed by a count: the entity is resolved first.
    return RespCode.CONTAINER_NOT_FOUND


def mget(kve: KVEngine, args: Sequence[Key]) -> list[bytes | RespCode] | RespCode:
    """The value of each key in order, with NIL for every missing one."""
    if not args:
        return RespCode.ACTION_ERR
    results: list[bytes | RespCode] = []
    for key in args:
        value = kve.get(key)
        results.append(RespCode.NIL if value is None else value)
    return results