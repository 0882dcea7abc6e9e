"""Shared test fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import yaml

from healthgate.config import Settings


@pytest.fixture(autouse=True)
def reset_healthgate_logger() -> Generator[None, None, None]:
    """Undo configure_logging() so caplog keeps seeing records."""
    yield
    log = logging.getLogger("healthgate")
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.propagate = True
    log.setLevel(logging.NOTSET)


@pytest.fixture
def mount_dirs(tmp_path: Path) -> dict[str, Path]:
    """Two real directories standing in for NFS mount points."""
    dirs = {}
    for name in ("a", "b"):
        d = tmp_path / "mnt" / name
        d.mkdir(parents=True)
        dirs[name] = d
    return dirs


@pytest.fixture
def write_mount_table(tmp_path: Path) -> Callable[..., Path]:
    """Write a /proc/mounts style file listing the given (mount_point, fs_type) pairs."""

    def _write(*entries: tuple[str, str]) -> Path:
        lines = [
            "sysfs /sys sysfs rw,nosuid,nodev,noexec,relatime 0 0",
            "/dev/sda1 / ext4 rw,relatime 0 0",
        ]
        for i, (mount_point, fs_type) in enumerate(entries):
            lines.append(
                f"nfs{i}.example.com:/export/{i} {mount_point} {fs_type} "
                "rw,relatime,vers=4.2,hard,proto=tcp 0 0"
            )
        path = tmp_path / "mounts"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[Any], Path]:
    def _write(data: Any) -> Path:
        path = tmp_path / "healthgate.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the host: empty mount table, no syslog socket."""
    table = tmp_path / "empty-mounts"
    table.write_text("", encoding="utf-8")
    return Settings(
        config_path=str(tmp_path / "missing.yaml"),
        mount_table=str(table),
        nfs_timeout=5.0,
        syslog_address=str(tmp_path / "no-such-socket"),
        sssctl_path="sssctl",
    )
