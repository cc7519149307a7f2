import ipaddress

import pytest

from skykv.config import (
    MAXIMUM_CONNECTION_LIMIT,
    BGSave,
    ConfigError,
    ParsedConfig,
    PortConfig,
    PortMode,
    SnapshotPref,
    SslOpts,
)

SKYD_TOML = """
[server]
host = "127.0.0.1"
port = 2003
noart = false
"""


def test_config_toml_okayport():
    text = """
        [server]
        host = "127.0.0.1"
        port = 2003
    """
    assert ParsedConfig.from_toml_str(text) == ParsedConfig.default()


def test_config_toml_badport():
    text = """
        [server]
        port = 20033002
    """
    with pytest.raises(ConfigError) as info:
        ParsedConfig.from_toml_str(text)
    assert info.value.kind is ConfigError.Kind.SYNTAX


def test_port_out_of_range_with_host():
    text = '[server]\nhost = "127.0.0.1"\nport = 70000\n'
    with pytest.raises(ConfigError):
        ParsedConfig.from_toml_str(text)


def test_config_file_ok():
    assert ParsedConfig.from_toml_str(SKYD_TOML) == ParsedConfig.default()


def test_config_file_err():
    with pytest.raises(ConfigError) as info:
        ParsedConfig.from_file(SKYD_TOML)
    assert info.value.kind is ConfigError.Kind.OS


def test_from_file_roundtrip(tmp_path):
    path = tmp_path / "skyd.toml"
    path.write_text(SKYD_TOML, encoding="utf-8")
    assert ParsedConfig.from_file(str(path)) == ParsedConfig.default()


def test_config_file_noart():
    text = '[server]\nhost = "127.0.0.1"\nport = 2003\nnoart = true\n'
    cfg = ParsedConfig.from_toml_str(text)
    assert cfg == ParsedConfig(
        noart=True,
        bgsave=BGSave.default(),
        snapshot=None,
        ports=PortConfig.insecure_only("127.0.0.1", 2003),
        maxcon=MAXIMUM_CONNECTION_LIMIT,
    )
    assert cfg.is_artful() is False


def test_default_is_artful():
    assert ParsedConfig.default().is_artful() is True


def test_config_file_ipv6():
    text = '[server]\nhost = "::1"\nport = 2003\n'
    cfg = ParsedConfig.from_toml_str(text)
    assert cfg.ports == PortConfig.insecure_only(ipaddress.IPv6Address("::1"), 2003)
    assert cfg.bgsave == BGSave.default()
    assert cfg.snapshot is None


def test_config_file_template():
    text = """
[server]
host = "127.0.0.1"
port = 2003
noart = false

[bgsave]
enabled = true
every = 120

[snapshot]
every = 3600
atmost = 4
failsafe = true

[ssl]
key = "/path/to/keyfile.pem"
chain = "/path/to/chain.pem"
port = 2004
only = true
passin = "/path/to/cert/passphrase.txt"
"""
    cfg = ParsedConfig.from_toml_str(text)
    assert cfg == ParsedConfig(
        False,
        BGSave.default(),
        SnapshotPref(3600, 4, True),
        PortConfig.secure_only(
            "127.0.0.1",
            SslOpts(
                "/path/to/keyfile.pem",
                "/path/to/chain.pem",
                2004,
                "/path/to/cert/passphrase.txt",
            ),
        ),
        MAXIMUM_CONNECTION_LIMIT,
    )
    assert cfg.ports.mode is PortMode.SECURE_ONLY
    assert cfg.ports.port is None


def test_ssl_without_only_is_multi():
    text = """
[server]
host = "127.0.0.1"
port = 2003

[ssl]
key = "key.pem"
chain = "chain.pem"
port = 2004
"""
    cfg = ParsedConfig.from_toml_str(text)
    assert cfg.ports == PortConfig.multi("127.0.0.1", 2003, SslOpts("key.pem", "chain.pem", 2004))
    assert cfg.ports.ssl.passfile is None


def test_config_file_bad_bgsave_section():
    text = '[server]\nhost = "127.0.0.1"\nport = 2003\n\n[bgsave]\nenabled = "yes"\nevery = 600\n'
    with pytest.raises(ConfigError):
        ParsedConfig.from_toml_str(text)


def test_config_file_custom_bgsave():
    text = '[server]\nhost = "127.0.0.1"\nport = 2003\n\n[bgsave]\nenabled = true\nevery = 600\n'
    cfg = ParsedConfig.from_toml_str(text)
    assert cfg == ParsedConfig(bgsave=BGSave(True, 600))


def test_config_file_bgsave_enabled_only():
    text = '[server]\nhost = "127.0.0.1"\nport = 2003\n\n[bgsave]\nenabled = true\n'
    assert ParsedConfig.from_toml_str(text) == ParsedConfig.default()


def test_config_file_bgsave_every_only():
    text = '[server]\nhost = "127.0.0.1"\nport = 2003\n\n[bgsave]\nevery = 600\n'
    cfg = ParsedConfig.from_toml_str(text)
    assert cfg.bgsave == BGSave(True, 600)


def test_config_file_bgsave_disabled():
    text = '[server]\nhost = "127.0.0.1"\nport = 2003\n\n[bgsave]\nenabled = false\n'
    cfg = ParsedConfig.from_toml_str(text)
    assert cfg.bgsave.is_disabled() is True
    assert cfg.bgsave == BGSave(False, 999)


def test_config_file_snapshot():
    text = '[server]\nhost = "127.0.0.1"\nport = 2003\n\n[snapshot]\nevery = 3600\natmost = 4\n'
    cfg = ParsedConfig.from_toml_str(text)
    assert cfg == ParsedConfig(snapshot=SnapshotPref(3600, 4, True))


def test_snapshot_failsafe_false():
    text = (
        '[server]\nhost = "127.0.0.1"\nport = 2003\n\n'
        "[snapshot]\nevery = 60\natmost = 0\nfailsafe = false\n"
    )
    assert ParsedConfig.from_toml_str(text).snapshot == SnapshotPref(60, 0, False)


def test_snapshot_missing_atmost_is_error():
    text = '[server]\nhost = "127.0.0.1"\nport = 2003\n\n[snapshot]\nevery = 60\n'
    with pytest.raises(ConfigError):
        ParsedConfig.from_toml_str(text)


def test_maxclient():
    text = '[server]\nhost = "127.0.0.1"\nport = 2003\nmaxclient = 10\n'
    assert ParsedConfig.from_toml_str(text).maxcon == 10


def test_invalid_host():
    text = '[server]\nhost = "not-an-ip"\nport = 2003\n'
    with pytest.raises(ConfigError) as info:
        ParsedConfig.from_toml_str(text)
    assert info.value.kind is ConfigError.Kind.SYNTAX


def test_invalid_toml_syntax():
    with pytest.raises(ConfigError) as info:
        ParsedConfig.from_toml_str("[server\nhost = ")
    assert str(info.value).startswith("syntax error in configuration file: ")


def test_missing_server_section():
    with pytest.raises(ConfigError):
        ParsedConfig.from_toml_str('[bgsave]\nenabled = true\n')


@pytest.mark.parametrize(
    "kind, detail, expected",
    [
        (ConfigError.Kind.CONFIG, "bad", "Configuration error: bad"),
        (ConfigError.Kind.CLI_ARG, "bad", "Argument error: bad"),
        (ConfigError.Kind.OS, "bad", "error: bad"),
    ],
)
def test_config_error_messages(kind, detail, expected):
    assert str(ConfigError(kind, detail)) == expected
    assert ConfigError(kind, detail).detail == detail


def test_bgsave_default():
    default = BGSave.default()
    assert default.enabled is True
    assert default.every == 120
    assert default.is_disabled() is False


def test_default_ports():
    ports = ParsedConfig.default().ports
    assert ports.mode is PortMode.INSECURE_ONLY
    assert ports.host == ipaddress.IPv4Address("127.0.0.1")
    assert ports.port == 2003
    assert ports.ssl is None