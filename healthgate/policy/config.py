"""Check configuration — loads the YAML file and provides typed parameter blocks.

The file looks like::

    checks:
      nfs_mount:
        mounts: [/srv/mail, /srv/spool]
        timeout: 5
      sssd_health:
        domain: example.com
      user_exists:
        users: [vmail, postfix]

A check runs iff its key is present under ``checks``. The parameter block is
validated only when the check runs, so a broken block fails that check
instead of the whole load.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

logger = logging.getLogger(__name__)

KNOWN_CHECKS = ("nfs_mount", "sssd_health", "user_exists")


class ConfigError(Exception):
    """Configuration file unreadable, malformed, or a parameter block invalid."""


# ── Data models ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GateConfig:
    """Immutable view of the ``checks`` mapping."""

    checks: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    source: str = ""

    def enabled(self, name: str) -> bool:
        return name in self.checks

    def block(self, name: str) -> Any:
        return self.checks.get(name)


@dataclass(frozen=True)
class NfsMountParams:
    mounts: tuple[str, ...]
    timeout: float | None = None


@dataclass(frozen=True)
class SssdParams:
    domain: str


@dataclass(frozen=True)
class UserExistsParams:
    users: tuple[str, ...]


# ── Loading ──────────────────────────────────────────────────────────────────


def load_config(path: Path | str) -> GateConfig:
    """Read and validate the top level of the config file. Raises ConfigError."""
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"cannot decode {path} as UTF-8: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse {path}: {e}") from e

    return parse_config(raw, source=str(path))


def parse_config(raw: Any, source: str = "") -> GateConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"{source or 'config'}: top level must be a mapping")

    checks = raw.get("checks")
    if not isinstance(checks, dict):
        raise ConfigError(f"{source or 'config'}: 'checks' must be a mapping, got {type(checks).__name__}")

    for name in checks:
        if name not in KNOWN_CHECKS:
            logger.warning("Ignoring unknown check '%s' in %s", name, source or "config")

    logger.debug("Enabled checks: %s", ", ".join(n for n in KNOWN_CHECKS if n in checks) or "none")
    return GateConfig(checks=MappingProxyType(dict(checks)), source=source)


# ── Parameter parsers ────────────────────────────────────────────────────────


def _block(raw: Any, name: str) -> Mapping[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{name}: parameters must be a mapping")
    return raw


def _str_list(block: Mapping[str, Any], key: str, name: str) -> tuple[str, ...]:
    value = block.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigError(f"{name}.{key} must be a list")
    if not all(isinstance(v, str) and v for v in value):
        raise ConfigError(f"{name}.{key} must contain non-empty strings")
    return tuple(value)


def parse_nfs_mount(raw: Any) -> NfsMountParams:
    block = _block(raw, "nfs_mount")
    timeout = block.get("timeout")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError("nfs_mount.timeout must be a positive number")
        timeout = float(timeout)
    return NfsMountParams(mounts=_str_list(block, "mounts", "nfs_mount"), timeout=timeout)


def parse_sssd_health(raw: Any) -> SssdParams:
    block = _block(raw, "sssd_health")
    domain = block.get("domain") or ""
    if not isinstance(domain, str):
        raise ConfigError("sssd_health.domain must be a string")
    return SssdParams(domain=domain.strip())


def parse_user_exists(raw: Any) -> UserExistsParams:
    block = _block(raw, "user_exists")
    return UserExistsParams(users=_str_list(block, "users", "user_exists"))
