"""Actions that change a table: DEL, FLUSHDB, MSET, MUPDATE, POP, SET, UPDATE and USET.

Each action takes the current table, the server's health registry and the
query's arguments (the action name excluded) and returns the response: a
count, a list, or a RespCode. While the registry is poisoned, writes are
refused with ``RespCode.SERVER_ERR``.

This store holds a single table, so a named entity given to FLUSHDB never
resolves and yields ``RespCode.CONTAINER_NOT_FOUND``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence

from skykv.kvstore import Key, KVEngine, Registry, RespCode


def _pairs(args: Sequence[Key]) -> Iterator[tuple[Key, Key]]:
    it = iter(args)
    return zip(it, it)


def _is_bad_pair_count(args: Sequence[Key]) -> bool:
    # An odd count means some key has no value; nothing runs in that case.
    return len(args) == 0 or len(args) & 1 == 1


def delete(kve: KVEngine, registry: Registry, args: Sequence[Key]) -> int | RespCode:
    """Delete the given keys and return how many of them existed."""
    if not args:
        return RespCode.ACTION_ERR
    if not registry.state_okay():
        return RespCode.SERVER_ERR
    return sum(1 for key in args if kve.remove(key))


def flushdb(kve: KVEngine, registry: Registry, args: Sequence[Key]) -> RespCode:
    """Delete every key in the table."""
    if len(args) > 1:
        return RespCode.ACTION_ERR
    if not registry.state_okay():
        return RespCode.SERVER_ERR
    if args:
        return RespCode.CONTAINER_NOT_FOUND
    kve.truncate()
    return RespCode.OKAY


def _multi(
    operation: Callable[[Key, Key], bool], registry: Registry, args: Sequence[Key]
) -> int | RespCode:
    if _is_bad_pair_count(args):
        return RespCode.ACTION_ERR
    if not registry.state_okay():
        return RespCode.SERVER_ERR
    return sum(1 for key, value in _pairs(args) if operation(key, value))


def mset(kve: KVEngine, registry: Registry, args: Sequence[Key]) -> int | RespCode:
    """Set each absent key of the key/value pairs; return how many were set."""
    return _multi(kve.set, registry, args)


def mupdate(kve: KVEngine, registry: Registry, args: Sequence[Key]) -> int | RespCode:
    """Update each existing key of the key/value pairs; return how many were updated."""
    return _multi(kve.update, registry, args)


def pop(
    kve: KVEngine, registry: Registry, args: Sequence[Key]
) -> list[bytes | RespCode] | RespCode:
    """Remove each key and return its value, or NIL for each missing one."""
    if not args:
        return RespCode.ACTION_ERR
    if not registry.state_okay():
        return RespCode.SERVER_ERR
    results: list[bytes | RespCode] = []
    for key in args:
        # The database may be poisoned while the keys are being popped.
        if not registry.state_okay():
            results.append(RespCode.SERVER_ERR)
            continue
        value = kve.pop(key)
        results.append(RespCode.NIL if value is None else value)
    return results


def set_key(kve: KVEngine, registry: Registry, args: Sequence[Key]) -> RespCode:
    """Set one absent key; OVERWRITE_ERR if it already exists."""
    if len(args) != 2:
        return RespCode.ACTION_ERR
    if not registry.state_okay():
        return RespCode.SERVER_ERR
    key, value = args
    return RespCode.OKAY if kve.set(key, value) else RespCode.OVERWRITE_ERR


def update(kve: KVEngine, registry: Registry, args: Sequence[Key]) -> RespCode:
    """Update one existing key; NIL if it does not exist."""
    if len(args) != 2:
        return RespCode.ACTION_ERR
    if not registry.state_okay():
        return RespCode.SERVER_ERR
    key, value = args
    return RespCode.OKAY if kve.update(key, value) else RespCode.NIL
    

def uset(kve: KVEngine, registry: Registry, args: Sequence[Key]) -> int | RespCode:
    """Insert or update every key/value pair; return the number of pairs."""
    if _is_bad_pair_count(args):
        return RespCode.ACTION_ERR
    if not registry.state_okay():
        return RespCode.SERVER_ERR
    for key, value in _pairs(args):
        kve.upsert(key, value)
    return len(args) // 2