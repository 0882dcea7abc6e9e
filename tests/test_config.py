"""Tests for check configuration loading."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from healthgate.policy.config import (
    ConfigError,
    GateConfig,
    load_config,
    parse_config,
    parse_nfs_mount,
    parse_sssd_health,
    parse_user_exists,
)


@pytest.fixture
def sample_yaml(tmp_path: Path) -> Path:
    path = tmp_path / "healthgate.yaml"
    path.write_text(textwrap.dedent("""\
        checks:
          nfs_mount:
            mounts:
              - /srv/mail
              - /srv/spool
          sssd_health:
            domain: example.com
          user_exists:
            users: [vmail, postfix]
    """), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_load(self, sample_yaml: Path) -> None:
        config = load_config(sample_yaml)
        assert isinstance(config, GateConfig)
        assert config.enabled("nfs_mount")
        assert config.enabled("sssd_health")
        assert config.enabled("user_exists")
        assert config.source == str(sample_yaml)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("checks: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="cannot parse"):
            load_config(path)

    def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.yaml"
        path.write_bytes(b"checks:\n  user_exists:\n    users: [\xff\xfe]\n")
        with pytest.raises(ConfigError, match="UTF-8"):
            load_config(path)

    def test_immutable(self, sample_yaml: Path) -> None:
        config = load_config(sample_yaml)
        with pytest.raises(TypeError):
            config.checks["user_exists"] = {}  # type: ignore[index]


class TestParseConfig:
    @pytest.mark.parametrize("raw", [None, [], "checks", {}, {"checks": None}, {"checks": []}])
    def test_missing_or_null_checks(self, raw) -> None:
        with pytest.raises(ConfigError):
            parse_config(raw)

    def test_empty_checks_mapping_is_valid(self) -> None:
        config = parse_config({"checks": {}})
        assert not any(config.enabled(n) for n in ("nfs_mount", "sssd_health", "user_exists"))

    def test_presence_alone_enables(self) -> None:
        config = parse_config({"checks": {"user_exists": None}})
        assert config.enabled("user_exists")
        assert config.block("user_exists") is None

    def test_unknown_check_ignored(self, caplog) -> None:
        config = parse_config({"checks": {"disk_space": {}}}, source="x.yaml")
        assert config.enabled("disk_space")
        assert "Ignoring unknown check 'disk_space'" in caplog.text


class TestParameterBlocks:
    def test_nfs_mount(self) -> None:
        params = parse_nfs_mount({"mounts": ["/a", "/b"], "timeout": 3})
        assert params.mounts == ("/a", "/b")
        assert params.timeout == 3.0

    def test_nfs_mount_defaults(self) -> None:
        params = parse_nfs_mount(None)
        assert params.mounts == ()
        assert params.timeout is None

    @pytest.mark.parametrize("timeout", [0, -1, "5", True])
    def test_nfs_mount_bad_timeout(self, timeout) -> None:
        with pytest.raises(ConfigError):
            parse_nfs_mount({"mounts": ["/a"], "timeout": timeout})

    def test_nfs_mount_bad_mounts(self) -> None:
        with pytest.raises(ConfigError):
            parse_nfs_mount({"mounts": "/a"})
        with pytest.raises(ConfigError):
            parse_nfs_mount({"mounts": ["/a", 3]})

    def test_sssd(self) -> None:
        assert parse_sssd_health({"domain": " example.com "}).domain == "example.com"
        assert parse_sssd_health(None).domain == ""
        with pytest.raises(ConfigError):
            parse_sssd_health({"domain": 42})

    def test_users(self) -> None:
        assert parse_user_exists({"users": ["alice"]}).users == ("alice",)
        with pytest.raises(ConfigError):
            parse_user_exists(["alice"])
