"""Choosing the server configuration from command-line options or a configuration file."""

from __future__ import annotations

import ipaddress
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from skykv.config import (
    DEFAULT_IPV4,
    DEFAULT_PORT,
    DEFAULT_SSL_PORT,
    MAXIMUM_CONNECTION_LIMIT,
    BGSave,
    ConfigError,
    IPAddress,
    ParsedConfig,
    PortConfig,
    SnapshotPref,
    SslOpts,
)

_log = logging.getLogger(__name__)

_U16_MAX = 0xFFFF
_U64_MAX = 2**64 - 1
_UINT_PATTERN = re.compile(r"\+?[0-9]+")

# Options whose presence means the configuration comes from the command line.
_OVERRIDEABLE_VALUES = (
    "host",
    "port",
    "snapevery",
    "snapkeep",
    "saveduration",
    "sslchain",
    "sslkey",
    "maxcon",
    "sslport",
    "tlspassin",
)
_OVERRIDEABLE_FLAGS = ("noart", "nosave", "sslonly")


class ConfigSource(Enum):
    """Where the configuration came from."""

    DEFAULT = "default"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ConfigResult:
    """The chosen configuration, its origin and the snapshot to restore from, if any."""

    source: ConfigSource
    config: ParsedConfig
    restore_file: str | None = None


def _cli_error(detail: str) -> ConfigError:
    return ConfigError(ConfigError.Kind.CLI_ARG, detail)


def _cfg_error(detail: str) -> ConfigError:
    return ConfigError(ConfigError.Kind.CONFIG, detail)


def _normalise(options: Any) -> dict[str, Any]:
    if options is None:
        return {}
    raw = options if isinstance(options, Mapping) else vars(options)
    return {str(key).replace("-", "_"): value for key, value in raw.items()}


def _parse_uint(text: str, limit: int) -> int | None:
    if not _UINT_PATTERN.fullmatch(text):
        return None
    value = int(text)
    return value if value <= limit else None


def _uint_option(value: str | None, limit: int, default: int | None, error: str) -> int | None:
    if value is None:
        return default
    parsed = _parse_uint(str(value), limit)
    if parsed is None:
        raise _cli_error(error)
    return parsed


def _parse_host(value: str | None) -> IPAddress:
    if value is None:
        return DEFAULT_IPV4
    try:
        if "%" in value:
            raise ValueError(value)
        return ipaddress.ip_address(value)
    except ValueError:
        raise _cli_error(
            "Invalid value for `--host`. Expected a valid IPv4 or IPv6 address"
        ) from None


def _parse_bool(value: str | None) -> bool:
    if value is None:
        return True
    if value == "true":
        return True
    if value == "false":
        return False
    raise _cli_error(
        "Please provide a boolean `true` or `false` value to --stop-write-on-fail"
    )


def _bgsave_from_cli(nosave: bool, saveduration: str | None) -> BGSave:
    if nosave:
        if saveduration is not None:
            raise _cli_error(
                "Invalid options for BGSAVE. Either supply `--nosave` or `--saveduration` or nothing"
            )
        _log.warning("BGSAVE is disabled. You might lose data if the host crashes")
        return BGSave(False, 0)
    if saveduration is not None:
        duration = _uint_option(
            saveduration,
            _U64_MAX,
            None,
            "Invalid value for `--saveduration`. Expected an unsigned 64-bit integer",
        )
        return BGSave(True, duration)
    return BGSave.default()


def _snapshot_from_cli(
    snapevery: str | None, snapkeep: str | None, failsafe: bool
) -> SnapshotPref | None:
    every = _uint_option(
        snapevery,
        _U64_MAX,
        None,
        "Invalid value for `--snapevery`. Expected an unsigned 64-bit integer",
    )
    keep = _uint_option(
        snapkeep,
        _U64_MAX,
        None,
        "Invalid value for `--snapkeep`. Expected an unsigned 64-bit integer",
    )
    if every is not None and keep is not None:
        return SnapshotPref(every, keep, failsafe)
    if every is not None:
        raise _cli_error(
            "No value supplied for `--snapkeep`. When you supply `--snapevery`, "
            "you also need to specify `--snapkeep`"
        )
    if keep is not None:
        raise _cli_error(
            "No value supplied for `--snapevery`. When you supply `--snapkeep`, "
            "you also need to specify `--snapevery`"
        )
    return None


def _ports_from_cli(
    host: IPAddress,
    port: int,
    sslport: int,
    custom_ssl_port: bool,
    sslkey: str | None,
    sslchain: str | None,
    passfile: str | None,
    sslonly: bool,
) -> PortConfig:
    if sslkey is None and sslchain is None:
        if sslonly:
            raise _cli_error(
                "You mast pass values for both --sslkey and --sslchain to use the --sslonly flag"
            )
        if custom_ssl_port:
            _log.warning("Ignoring value for `--sslport` as TLS was not enabled")
        return PortConfig.insecure_only(host, port)
    if sslkey is not None and sslchain is not None:
        ssl = SslOpts(sslkey, sslchain, sslport, passfile)
        if sslonly:
            return PortConfig.secure_only(host, ssl)
        return PortConfig.multi(host, port, ssl)
    raise _cli_error("To use SSL, pass values for both --sslkey and --sslchain")


def _from_cli(opts: dict[str, Any]) -> ParsedConfig:
    port = _uint_option(
        opts.get("port"),
        _U16_MAX,
        DEFAULT_PORT,
        "Invalid value for `--port`. Expected an unsigned 16-bit integer",
    )
    host = _parse_host(opts.get("host"))
    sslport = _uint_option(
        opts.get("sslport"),
        _U16_MAX,
        DEFAULT_SSL_PORT,
        "Invalid value for `--sslport`. Expected a valid unsigned 16-bit integer",
    )
    maxcon = _uint_option(
        opts.get("maxcon"),
        _U64_MAX,
        MAXIMUM_CONNECTION_LIMIT,
        "Invalid value for `--maxcon`. Expected a valid positive integer",
    )
    bgsave = _bgsave_from_cli(bool(opts.get("nosave")), opts.get("saveduration"))
    failsafe = _parse_bool(opts.get("stop_write_on_fail"))
    snapshot = _snapshot_from_cli(opts.get("snapevery"), opts.get("snapkeep"), failsafe)
    ports = _ports_from_cli(
        host,
        port,
        sslport,
        opts.get("sslport") is not None,
        opts.get("sslkey"),
        opts.get("sslchain"),
        opts.get("tlspassin"),
        bool(opts.get("sslonly")),
    )
    return ParsedConfig(
        noart=bool(opts.get("noart")),
        bgsave=bgsave,
        snapshot=snapshot,
        ports=ports,
        maxcon=maxcon,
    )


def _from_file(filename: str) -> ParsedConfig:
    cfg = ParsedConfig.from_file(filename)
    if cfg.bgsave.is_disabled():
        _log.warning(
            "BGSAVE is disabled: If this system crashes unexpectedly, it may lead to the loss of data"
        )
    if cfg.snapshot is not None and cfg.snapshot.every == 0:
        raise _cfg_error("The snapshot duration has to be greater than 0!")
    if not cfg.bgsave.is_disabled() and cfg.bgsave.every == 0:
        raise _cfg_error("The BGSAVE duration has to be greater than 0!")
    return cfg


def get_config(options: Any = None) -> ConfigResult:
    """Choose the configuration from parsed command-line options.

    ``options`` is a mapping (or an object with attributes) of option names to
    values: string values for ``config``, ``host``, ``port``, ``sslport``,
    ``snapevery``, ``snapkeep``, ``saveduration``, ``sslkey``, ``sslchain``,
    ``maxcon``, ``tlspassin``, ``restore`` and ``stop-write-on-fail``, and
    boolean flags ``sslonly``, ``noart`` and ``nosave``. Absent options may be
    left out or set to None. Raises ConfigError on invalid or conflicting options.
    """
    opts = _normalise(options)
    restore = opts.get("restore")
    restore_file = None if restore is None else str(restore)
    filename = opts.get("config")
    has_cli_args = any(opts.get(name) is not None for name in _OVERRIDEABLE_VALUES) or any(
        bool(opts.get(name)) for name in _OVERRIDEABLE_FLAGS
    )
    if filename is not None and has_cli_args:
        raise _cfg_error("Either use command line arguments or use a configuration file")
    if has_cli_args:
        return ConfigResult(ConfigSource.CUSTOM, _from_cli(opts), restore_file)
    if filename is not None:
        return ConfigResult(ConfigSource.CUSTOM, _from_file(str(filename)), restore_file)
    return ConfigResult(ConfigSource.DEFAULT, ParsedConfig.default(), restore_file)