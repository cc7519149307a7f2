"""Server configuration: the TOML file format and the settings it yields."""

from __future__ import annotations

import ipaddress
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

MAXIMUM_CONNECTION_LIMIT = 50000
DEFAULT_IPV4 = ipaddress.IPv4Address("127.0.0.1")
DEFAULT_PORT = 2003
DEFAULT_SSL_PORT = 2004
DEFAULT_BGSAVE_EVERY = 120

_U16_MAX = 0xFFFF
_U64_MAX = 2**64 - 1


class ConfigError(Exception):
    """A configuration could not be loaded or is not valid."""

    class Kind(Enum):
        """What went wrong."""

        OS = "os"
        SYNTAX = "syntax"
        CONFIG = "config"
        CLI_ARG = "cli_arg"

    _PREFIXES = {
        Kind.OS: "error: ",
        Kind.SYNTAX: "syntax error in configuration file: ",
        Kind.CONFIG: "Configuration error: ",
        Kind.CLI_ARG: "Argument error: ",
    }

    def __init__(self, kind: ConfigError.Kind, detail: Any) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{self._PREFIXES[kind]}{detail}")


@dataclass(frozen=True)
class BGSave:
    """Background-save settings; ``every`` is in seconds and is 0 when disabled."""

    enabled: bool = True
    every: int = DEFAULT_BGSAVE_EVERY

    def __post_init__(self) -> None:
        if not self.enabled:
            object.__setattr__(self, "every", 0)

    @classmethod
    def default(cls) -> BGSave:
        """Enabled, every 120 seconds."""
        return cls(True, DEFAULT_BGSAVE_EVERY)

    def is_disabled(self) -> bool:
        """True if background saving was turned off."""
        return not self.enabled


@dataclass(frozen=True)
class SnapshotPref:
    """Snapshot settings: take one ``every`` seconds, keep ``atmost``, poison on failure."""

    every: int
    atmost: int
    poison: bool


@dataclass(frozen=True)
class SslOpts:
    """TLS listener settings."""

    key: str
    chain: str
    port: int
    passfile: str | None = None


class PortMode(Enum):
    """Which listeners the server opens."""

    SECURE_ONLY = "secure_only"
    MULTI = "multi"
    INSECURE_ONLY = "insecure_only"


@dataclass(frozen=True)
class PortConfig:
    """The address and listeners the server binds to."""

    mode: PortMode
    host: IPAddress
    port: int | None = None
    ssl: SslOpts | None = None

    def __post_init__(self) -> None:
        if isinstance(self.host, str):
            object.__setattr__(self, "host", ipaddress.ip_address(self.host))

    @classmethod
    def secure_only(cls, host: IPAddress | str, ssl: SslOpts) -> PortConfig:
        """Only the TLS listener."""
        return cls(PortMode.SECURE_ONLY, host, None, ssl)

    @classmethod
    def insecure_only(cls, host: IPAddress | str, port: int) -> PortConfig:
        """Only the plain listener."""
        return cls(PortMode.INSECURE_ONLY, host, port, None)

    @classmethod
    def multi(cls, host: IPAddress | str, port: int, ssl: SslOpts) -> PortConfig:
        """Both the plain and the TLS listener."""
        return cls(PortMode.MULTI, host, port, ssl)


def _default_ports() -> PortConfig:
    return PortConfig.insecure_only(DEFAULT_IPV4, DEFAULT_PORT)


def _syntax(detail: str) -> ConfigError:
    return ConfigError(ConfigError.Kind.SYNTAX, detail)


def _is_uint(limit: int) -> Callable[[Any], bool]:
    return lambda v: isinstance(v, int) and not isinstance(v, bool) and 0 <= v <= limit


_KINDS: dict[str, tuple[Callable[[Any], bool], str]] = {
    "bool": (lambda v: isinstance(v, bool), "a boolean"),
    "str": (lambda v: isinstance(v, str), "a string"),
    "u16": (_is_uint(_U16_MAX), "an unsigned 16-bit integer"),
    "u64": (_is_uint(_U64_MAX), "an unsigned 64-bit integer"),
}


def _section(doc: dict[str, Any], name: str, *, required: bool) -> dict[str, Any] | None:
    if name not in doc:
        if required:
            raise _syntax(f"missing field `{name}`")
        return None
    value = doc[name]
    if not isinstance(value, dict):
        raise _syntax(f"invalid type for `{name}`: expected a table")
    return value


def _field(table: dict[str, Any], section: str, key: str, kind: str, *, required: bool = True) -> Any:
    if key not in table:
        if required:
            raise _syntax(f"missing field `{key}` in `{section}`")
        return None
    value = table[key]
    check, description = _KINDS[kind]
    if not check(value):
        raise _syntax(f"invalid value for `{section}.{key}`: expected {description}")
    return value


def _host(table: dict[str, Any]) -> IPAddress:
    raw = _field(table, "server", "host", "str")
    try:
        if "%" in raw:
            raise ValueError(raw)
        return ipaddress.ip_address(raw)
    except ValueError:
        raise _syntax(
            "invalid value for `server.host`: expected a valid IPv4 or IPv6 address"
        ) from None


def _bgsave(table: dict[str, Any] | None) -> BGSave:
    if table is None:
        return BGSave.default()
    enabled = _field(table, "bgsave", "enabled", "bool", required=False)
    every = _field(table, "bgsave", "every", "u64", required=False)
    return BGSave(
        True if enabled is None else enabled,
        DEFAULT_BGSAVE_EVERY if every is None else every,
    )


def _snapshot(table: dict[str, Any] | None) -> SnapshotPref | None:
    if table is None:
        return None
    every = _field(table, "snapshot", "every", "u64")
    atmost = _field(table, "snapshot", "atmost", "u64")
    failsafe = _field(table, "snapshot", "failsafe", "bool", required=False)
    return SnapshotPref(every, atmost, True if failsafe is None else failsafe)


def _ports(table: dict[str, Any] | None, host: IPAddress, port: int) -> PortConfig:
    if table is None:
        return PortConfig.insecure_only(host, port)
    ssl = SslOpts(
        key=_field(table, "ssl", "key", "str"),
        chain=_field(table, "ssl", "chain", "str"),
        port=_field(table, "ssl", "port", "u16"),
        passfile=_field(table, "ssl", "passin", "str", required=False),
    )
    if _field(table, "ssl", "only", "bool", required=False):
        return PortConfig.secure_only(host, ssl)
    return PortConfig.multi(host, port, ssl)


@dataclass(frozen=True)
class ParsedConfig:
    """The complete server configuration. ``snapshot`` is None when snapshots are off."""

    noart: bool = False
    bgsave: BGSave = field(default_factory=BGSave.default)
    snapshot: SnapshotPref | None = None
    ports: PortConfig = field(default_factory=_default_ports)
    maxcon: int = MAXIMUM_CONNECTION_LIMIT

    @classmethod
    def default(cls) -> ParsedConfig:
        """127.0.0.1:2003, artwork on, BGSAVE every 120 s, no snapshots, no TLS."""
        return cls()

    @classmethod
    def from_toml_str(cls, text: str) -> ParsedConfig:
        """Parse a configuration from TOML text; raises ConfigError on bad input."""
        try:
            doc = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise _syntax(exc) from exc
        server = _section(doc, "server", required=True)
        host = _host(server)
        port = _field(server, "server", "port", "u16")
        noart = _field(server, "server", "noart", "bool", required=False)
        maxclient = _field(server, "server", "maxclient", "u64", required=False)
        return cls(
            noart=bool(noart),
            bgsave=_bgsave(_section(doc, "bgsave", required=False)),
            snapshot=_snapshot(_section(doc, "snapshot", required=False)),
            ports=_ports(_section(doc, "ssl", required=False), host, port),
            maxcon=MAXIMUM_CONNECTION_LIMIT if maxclient is None else maxclient,
        )

    @classmethod
    def from_file(cls, location: str | Path) -> ParsedConfig:
        """Read and parse the TOML configuration file at ``location``."""
        try:
            text = Path(location).read_text(encoding="utf-8")
        except (OSError, ValueError) as exc:
            raise ConfigError(ConfigError.Kind.OS, exc) from exc
        return cls.from_toml_str(text)

    def is_artful(self) -> bool:
        """False if terminal artwork was turned off."""
        return not self.noart