"""Mount enumerator — reads the live mount table and matches it against the watch list."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MOUNT_TABLE = Path("/proc/mounts")
NFS_FS_TYPES = ("nfs", "nfs4")

# The kernel escapes space, tab, newline and backslash in mount paths as \ooo
_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


class EnumerationError(Exception):
    """The mount table could not be read."""


@dataclass(frozen=True)
class MountRecord:
    """A single live mount of a tracked filesystem type."""

    mount_point: str
    fs_type: str
    options: frozenset[str]
    device: str = ""


def _unescape(field: str) -> str:
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), field)


def parse_mount_table(text: str, fs_types: Iterable[str] = NFS_FS_TYPES) -> list[MountRecord]:
    """Parse /proc/mounts content, keeping only entries of the given filesystem types."""
    wanted = set(fs_types)
    records = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 4:
            continue
        device, mount_point, fs_type, options = parts[:4]
        if fs_type not in wanted:
            continue
        records.append(
            MountRecord(
                mount_point=_unescape(mount_point),
                fs_type=fs_type,
                options=frozenset(o for o in options.split(",") if o),
                device=_unescape(device),
            )
        )
    return records


def enumerate_mounts(
    path: Path | str = MOUNT_TABLE,
    fs_types: Iterable[str] = NFS_FS_TYPES,
) -> list[MountRecord]:
    """Read the live mount table. Raises EnumerationError if it cannot be read."""
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise EnumerationError(f"cannot read mount table {path}: {e}") from e

    records = parse_mount_table(text, fs_types)
    logger.debug("Found %d tracked mounts in %s", len(records), path)
    return records


def intersect(configured: Sequence[str], live: Sequence[MountRecord]) -> list[str]:
    """Configured mount points that are live, in configured order, without duplicates."""
    live_points = {r.mount_point for r in live}
    found: list[str] = []
    for mount_point in configured:
        if mount_point in live_points and mount_point not in found:
            found.append(mount_point)
    return found
