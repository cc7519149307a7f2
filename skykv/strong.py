"""Strong actions: SDEL, SSET and SUPDATE.

A strong action runs on several keys at once and either applies to all of them
or to none. It first takes a snapshot of every key it touches. Only if every
key is in the required state (present for SDEL and SUPDATE, absent for SSET)
does it go on to change them. A key that another writer changed after the
snapshot keeps that newer value; such a change happened after the snapshot,
so the outcome is still consistent.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from enum import Enum

from skykv.kvstore import Key, KVEngine, Registry, RespCode

Pause = Callable[[], object] | None


class StrongActionResult(Enum):
    """The outcome of a strong action."""

    SERVER_ERROR = "server_error"
    NIL = "nil"
    OVERWRITE_ERROR = "overwrite_error"
    ENCODING_ERROR = "encoding_error"
    OKAY = "okay"

    def is_ok(self) -> bool:
        """True if the action applied to every key."""
        return self is StrongActionResult.OKAY


_RESPONSES = {
    StrongActionResult.OKAY: RespCode.OKAY,
    StrongActionResult.NIL: RespCode.NIL,
    StrongActionResult.OVERWRITE_ERROR: RespCode.OVERWRITE_ERR,
    StrongActionResult.SERVER_ERROR: RespCode.SERVER_ERR,
    StrongActionResult.ENCODING_ERROR: RespCode.ENCODING_ERR,
}


def _pairs(args: Sequence[Key]) -> Iterator[tuple[Key, Key]]:
    it = iter(args)
    return zip(it, it)


def _is_bad_pair_count(args: Sequence[Key]) -> bool:
    return len(args) == 0 or len(args) & 1 == 1


def _run_pause(pause: Pause) -> None:
    if pause is not None:
        pause()


def snapshot_and_del(
    kve: KVEngine, registry: Registry, keys: Sequence[Key], pause: Pause = None
) -> StrongActionResult:
    """Delete every key if all of them exist when the snapshot is taken.

    ``pause`` is called between taking the snapshot and deleting the keys.
    A key whose value changed after the snapshot is left alone.
    """
    snapshots: list[bytes] = []
    all_present = True
    for key in keys:
        snapshot = kve.take_snapshot(key)
        if snapshot is None:
            all_present = False
            break
        snapshots.append(snapshot)
    _run_pause(pause)
    if not registry.state_okay():
        return StrongActionResult.SERVER_ERROR
    if not all_present:
        return StrongActionResult.NIL
    for key, snapshot in zip(keys, snapshots):
        kve.remove_if(key, snapshot)
    return StrongActionResult.OKAY


def snapshot_and_insert(
    kve: KVEngine, registry: Registry, args: Sequence[Key], pause: Pause = None
) -> StrongActionResult:
    """Insert every key/value pair if none of the keys exist when checked.

    ``pause`` is called between the check and the inserts. A key that another
    writer created in the meantime keeps that writer's value.
    """
    all_absent = all(not kve.exists(key) for key, _ in _pairs(args))
    _run_pause(pause)
    if not registry.state_okay():
        return StrongActionResult.SERVER_ERROR
    if not all_absent:
        return StrongActionResult.OVERWRITE_ERROR
    for key, value in _pairs(args):
        kve.set(key, value)
    return StrongActionResult.OKAY


def snapshot_and_update(
    kve: KVEngine, registry: Registry, args: Sequence[Key], pause: Pause = None
) -> StrongActionResult:
    """Update every key/value pair if all the keys exist when the snapshot is taken.

    ``pause`` is called between taking the snapshot and the updates. A key
    whose value changed after the snapshot keeps the newer value.
    """
    snapshots: list[bytes] = []
    all_present = True
    for key, _ in _pairs(args):
        snapshot = kve.take_snapshot(key)
        if snapshot is None:
            all_present = False
            break
        snapshots.append(snapshot)
    _run_pause(pause)
    if not registry.state_okay():
        return StrongActionResult.SERVER_ERROR
    if not all_present:
        return StrongActionResult.NIL
    for (key, value), snapshot in zip(_pairs(args), snapshots):
        kve.update_if(key, value, snapshot)
    return StrongActionResult.OKAY


def sdel(kve: KVEngine, registry: Registry, args: Sequence[Key]) -> RespCode:
    """Delete all the given keys, or none: OKAY, or NIL if some key is missing."""
    if not args:
        return RespCode.ACTION_ERR
    if not registry.state_okay():
        return RespCode.SERVER_ERR
    return _RESPONSES[snapshot_and_del(kve, registry, args)]


def sset(kve: KVEngine, registry: Registry, args: Sequence[Key]) -> RespCode:
    """Set all the key/value pairs, or none: OKAY, or OVERWRITE_ERR if some key exists."""
    if _is_bad_pair_count(args):
        return RespCode.ACTION_ERR
    if not registry.state_okay():
        return RespCode.SERVER_ERR
    return _RESPONSES[snapshot_and_insert(kve, registry, args)]


def supdate(kve: KVEngine, registry: Registry, args: Sequence[Key]) -> RespCode:
    """Update all the key/value pairs, or none: OKAY, or NIL if some key is missing."""
    if _is_bad_pair_count(args):
        return RespCode.ACTION_ERR
    if not registry.state_okay():
        return RespCode.SERVER_ERR
    return _RESPONSES[snapshot_and_update(kve, registry, args)]