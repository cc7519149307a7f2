# skykv

`skykv` is a small in-memory key/value table together with the pieces that
sit around it: a query splitter, the query actions (`GET`, `SET`, `MSET`,
`DEL`, `POP`, `LSKEYS` and friends), "strong" all-or-nothing multi-key
actions, server configuration parsing, a worker pool for load generation and a
printer for query results.

It needs nothing beyond the standard library and Python 3.11 or later.

## Modules

| Module | What it gives you |
| --- | --- |
| `skykv.query` | `split_into_args` and `turn_into_query` turn a typed line into query arguments, honouring single and double quotes |
| `skykv.kvstore` | `KVEngine`, a thread-safe table of byte-string keys and values; `Registry`, the health flag that write actions check; `RespCode`, the response codes |
| `skykv.readactions` | `heya`, `dbsize`, `exists`, `get`, `keylen`, `lskeys`, `mget` and the `JSONBlob` builder |
| `skykv.writeactions` | `set_key`, `update`, `uset`, `mset`, `mupdate`, `delete`, `pop`, `flushdb` |
| `skykv.strong` | `sset`, `supdate`, `sdel` and the lower-level `snapshot_and_insert`, `snapshot_and_update`, `snapshot_and_del`, returning a `StrongActionResult` |
| `skykv.config` | `ParsedConfig`, `BGSave`, `SnapshotPref`, `SslOpts`, `PortConfig`, `PortMode` and `ConfigError` for TOML configuration |
| `skykv.settings` | `get_config`, which picks the configuration from command-line style options or a configuration file and returns a `ConfigResult` |
| `skykv.workpool` | `Workpool` and `PoolConfig`, a thread pool with per-worker setup, loop and exit stages, plus `ran_string`, `rand_alphastring` and `generate_random_string_vector` |
| `skykv.terminal` | coloured output: `write_with_col`, `write_info`, `write_warning`, `write_error`, `write_success` and the `Color` enum |
| `skykv.fatal` | `exit_error` and `exit_on_error`, which log a failure and exit with status 1 |
| `skykv.runner` | `Runner`, which sends a typed query over a connection you supply and prints the answer, and the `format_*` helpers it uses |

## Splitting queries

```python
from skykv.query import split_into_args, turn_into_query

split_into_args("set mykey 'hello world'")
# ['set', 'mykey', 'hello world']
turn_into_query("get mykey")
# ('get', 'mykey')
```

## Running actions against a table

Actions take the table, the registry (write actions only) and the arguments
that followed the action name. They return what a server would answer: a
value, a count, a list, or a `RespCode`. Keys and values may be `str` or
bytes-like; they are stored and returned as `bytes`.

```python
from skykv.kvstore import KVEngine, Registry
from skykv import readactions, writeactions, strong

kve = KVEngine()
registry = Registry()

writeactions.set_key(kve, registry, [b"user", b"alice"])    # RespCode.OKAY
readactions.get(kve, [b"user"])                             # b"alice"
writeactions.mset(kve, registry, [b"a", b"1", b"b", b"2"])  # 2
strong.sset(kve, registry, [b"a", b"9", b"c", b"3"])        # RespCode.OVERWRITE_ERR
readactions.lskeys(kve, [])                                 # up to 10 keys
```

A wrong number of arguments gives `RespCode.ACTION_ERR`; missing keys give
`RespCode.NIL`. After `registry.poison()` every write action answers
`RespCode.SERVER_ERR` without touching the table; `registry.unpoison()`
restores normal service.

The strong actions check every key first and only then act. If another thread
changes a value between the check and the write, the newer value is kept. The
`snapshot_and_*` functions accept a `pause` callable that runs between the two
steps.

`JSONBlob` builds a flat JSON object:

```python
from skykv.readactions import JSONBlob

blob = JSONBlob()
blob.insert("key", b"value")
blob.insert("key2", None)
blob.finish()  # b'{"key":"value","key2":null}'
```

## Configuration

```python
from skykv.config import ParsedConfig

cfg = ParsedConfig.from_toml_str("""
[server]
host = "127.0.0.1"
port = 2003

[snapshot]
every = 3600
atmost = 4
""")
```

A `[server]` section with `host` and `port` is required; `noart` and
`maxclient` are optional. Missing `[bgsave]`, `[snapshot]` and `[ssl]`
sections fall back to the defaults: BGSAVE enabled every 120 seconds,
snapshots off (`snapshot` is `None`), plain TCP only. An unreadable or
invalid file raises `ConfigError`, whose `kind` tells what went wrong.

`skykv.settings.get_config` takes a mapping (or an object with attributes)
of option values such as `host`, `port`, `sslkey`, `sslchain`, `snapevery`,
`snapkeep`, `nosave` or `config`, and returns a `ConfigResult` with the
chosen `ParsedConfig`, its `source` (`ConfigSource.DEFAULT` or
`ConfigSource.CUSTOM`) and the `restore_file`. Mixing a configuration file
with other options, or giving conflicting options, raises `ConfigError`.

## Worker pool

```python
from skykv.workpool import Workpool

results = []
with Workpool(4, lambda: results, lambda acc, item: acc.append(item * 2), lambda acc: None) as pool:
    pool.execute_iter(range(10))
# every worker has finished here; results holds the ten doubled values
```

Each worker calls the setup function once, runs the loop function for every
job it takes and calls the exit function when the pool finishes. If a worker
raised, `finish()` (and leaving the `with` block) raises `RuntimeError`.
`PoolConfig` builds pools from one stored recipe.

## Printing results

`Runner(con)` takes any object with an async `run_simple_query(query)`
method. `await runner.run_query("get mykey")` splits the line, sends the
query tuple and prints the answer: strings in quotes, integers plain, `OKAY`
in cyan, errors in red, arrays numbered from 1. A `ValueError` from the
connection is reported as a decoding failure; an `OSError` ends the process
with status 1.

## What it does not do

- There is no network server and no wire protocol: the actions are plain
  functions over a `KVEngine`, and `Runner` needs a connection object from
  elsewhere.
- Nothing is written to disk. The BGSAVE and snapshot settings are parsed and
  validated, but nothing acts on them.
- There is a single table. `dbsize`, `lskeys` and `flushdb` given a table
  name answer `RespCode.CONTAINER_NOT_FOUND`.
- There are no commands to run; the package is used as a library.