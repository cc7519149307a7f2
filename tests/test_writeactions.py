import pytest

from skykv.kvstore import KVEngine, Registry, RespCode
from skykv.writeactions import (
    delete,
    flushdb,
    mset,
    mupdate,
    pop,
    set_key,
    update,
    uset,
)


@pytest.fixture
def kve():
    engine = KVEngine()
    engine.upsert("k1", "v1")
    engine.upsert("k2", "v2")
    return engine


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture
def poisoned():
    reg = Registry()
    reg.poison()
    return reg


# --- DEL ---

def test_delete_counts_existing_keys(kve, registry):
    keys = ["k1", "k2", "missing"]
    assert delete(kve, registry, keys) == len(keys) - 1
    assert len(kve) == 0


def test_delete_without_args_is_action_error(kve, registry):
    assert delete(kve, registry, []) is RespCode.ACTION_ERR
    assert kve.exists("k1")


def test_delete_poisoned_is_server_error(kve, poisoned):
    assert delete(kve, poisoned, ["k1"]) is RespCode.SERVER_ERR
    assert kve.get("k1") == b"v1"


# --- FLUSHDB ---

def test_flushdb_empties_table(kve, registry):
    assert flushdb(kve, registry, []) is RespCode.OKAY
    assert len(kve) == 0


def test_flushdb_too_many_args(kve, registry):
    assert flushdb(kve, registry, ["a", "b"]) is RespCode.ACTION_ERR
    assert kve.exists("k2")


def test_flushdb_unknown_entity(kve, registry):
    assert flushdb(kve, registry, ["ks:tbl"]) is RespCode.CONTAINER_NOT_FOUND
    assert kve.exists("k1")


def test_flushdb_poisoned(kve, poisoned):
    assert flushdb(kve, poisoned, []) is RespCode.SERVER_ERR
    assert kve.exists("k1")


# --- MSET / MUPDATE ---

def test_mset_sets_only_absent_keys(kve, registry):
    args = ["k1", "new", "k3", "v3"]
    assert mset(kve, registry, args) == len(args) // 2 - 1
    assert kve.get("k1") == b"v1"
    assert kve.get("k3") == b"v3"


@pytest.mark.parametrize("args", [[], ["k3"], ["k3", "v3", "k4"]])
def test_mset_bad_arity(kve, registry, args):
    assert mset(kve, registry, args) is RespCode.ACTION_ERR
    assert not kve.exists("k3")


def test_mset_poisoned(kve, poisoned):
    assert mset(kve, poisoned, ["k3", "v3"]) is RespCode.SERVER_ERR
    assert not kve.exists("k3")


def test_mupdate_updates_only_existing_keys(kve, registry):
    args = ["k1", "u1", "k3", "v3"]
    assert mupdate(kve, registry, args) == len(args) // 2 - 1
    assert kve.get("k1") == b"u1"
    assert not kve.exists("k3")


@pytest.mark.parametrize("args", [[], ["k1"], ["k1", "a", "k2"]])
def test_mupdate_bad_arity(kve, registry, args):
    assert mupdate(kve, registry, args) is RespCode.ACTION_ERR
    assert kve.get("k1") == b"v1"


def test_mupdate_poisoned(kve, poisoned):
    assert mupdate(kve, poisoned, ["k1", "u1"]) is RespCode.SERVER_ERR
    assert kve.get("k1") == b"v1"


# --- POP ---

def test_pop_returns_values_and_nil(kve, registry):
    assert pop(kve, registry, ["k1", "missing"]) == [b"v1", RespCode.NIL]
    assert not kve.exists("k1")
    assert kve.exists("k2")


def test_pop_without_args(kve, registry):
    assert pop(kve, registry, []) is RespCode.ACTION_ERR


def test_pop_poisoned(kve, poisoned):
    assert pop(kve, poisoned, ["k1"]) is RespCode.SERVER_ERR
    assert kve.exists("k1")


# --- SET / UPDATE ---

def test_set_new_key(kve, registry):
    assert set_key(kve, registry, ["k3", "v3"]) is RespCode.OKAY
    assert kve.get("k3") == b"v3"


def test_set_existing_key_is_overwrite_error(kve, registry):
    assert set_key(kve, registry, ["k1", "x"]) is RespCode.OVERWRITE_ERR
    assert kve.get("k1") == b"v1"


@pytest.mark.parametrize("args", [[], ["k3"], ["k3", "v3", "extra"]])
def test_set_bad_arity(kve, registry, args):
    assert set_key(kve, registry, args) is RespCode.ACTION_ERR


def test_set_poisoned(kve, poisoned):
    assert set_key(kve, poisoned, ["k3", "v3"]) is RespCode.SERVER_ERR
    assert not kve.exists("k3")


def test_update_existing_key(kve, registry):
    assert update(kve, registry, ["k1", "u1"]) is RespCode.OKAY
    assert kve.get("k1") == b"u1"


def test_update_missing_key_is_nil(kve, registry):
    assert update(kve, registry, ["k3", "v3"]) is RespCode.NIL
    assert not kve.exists("k3")


def test_update_bad_arity(kve, registry):
    assert update(kve, registry, ["k1"]) is RespCode.ACTION_ERR


def test_update_poisoned(kve, poisoned):
    assert update(kve, poisoned, ["k1", "u1"]) is RespCode.SERVER_ERR
    assert kve.get("k1") == b"v1"


# --- USET ---

def test_uset_inserts_and_updates(kve, registry):
    args = ["k1", "u1", "k3", "v3"]
    assert uset(kve, registry, args) == len(args) // 2
    assert kve.get("k1") == b"u1"
    assert kve.get("k3") == b"v3"


@pytest.mark.parametrize("args", [[], ["k1"], ["k1", "a", "k3"]])
def test_uset_bad_arity(kve, registry, args):
    assert uset(kve, registry, args) is RespCode.ACTION_ERR
    assert kve.get("k1") == b"v1"


def test_uset_poisoned(kve, poisoned):
    assert uset(kve, poisoned, ["k3", "v3"]) is RespCode.SERVER_ERR
    assert not kve.exists("k3")


def test_writes_resume_after_unpoison(kve, poisoned):
    assert set_key(kve, poisoned, ["k3", "v3"]) is RespCode.SERVER_ERR
    poisoned.unpoison()
    assert set_key(kve, poisoned, ["k3", "v3"]) is RespCode.OKAY
    assert kve.get("k3") == b"v3"