"""Stale NFS mount probe."""

from __future__ import annotations

import logging
import os
import random
from typing import Any

from ..config import Settings
from ..policy.config import ConfigError, parse_nfs_mount
from .base import ProbeResult, summarize
from .isolation import IsolationTimeout, run_isolated
from .mounts import enumerate_mounts, intersect

logger = logging.getLogger(__name__)

NAME = "nfs_mount"


def _enter_directory(path: str) -> bool:
    """Runs in the isolated child; blocks forever on a stale mount."""
    try:
        os.chdir(path)
    except OSError:
        return False
    return True


def check_nfs_mounts(raw: Any, settings: Settings) -> ProbeResult:
    """Verify every watched mount is live and answers within the deadline.

    Fail-fast: the first stale mount ends the check. EnumerationError from
    reading the mount table is not caught here; it ends the whole run.
    """
    try:
        params = parse_nfs_mount(raw)
    except ConfigError as e:
        return ProbeResult.fail(NAME, detail=str(e))

    if not params.mounts:
        return ProbeResult.fail(NAME, detail="no NFS mounts configured")

    live = enumerate_mounts(settings.mount_table, settings.nfs_fs_types)
    found = intersect(params.mounts, live)
    if len(found) != len(params.mounts):
        missing = [m for m in params.mounts if m not in found]
        return ProbeResult.fail(
            NAME,
            detail=(
                f"configured mounts {list(params.mounts)} but only {found} are mounted "
                f"as {'/'.join(settings.nfs_fs_types)} (missing: {missing})"
            ),
        )

    timeout = params.timeout or settings.nfs_timeout
    order = list(found)
    random.shuffle(order)

    samples = []
    for mount_point in order:
        try:
            outcome = run_isolated(_enter_directory, mount_point, timeout=timeout, label=mount_point)
        except IsolationTimeout as e:
            return ProbeResult.fail(
                NAME,
                reason=f"stale NFS mount: {e.label}",
                detail=f"chdir({e.label}) did not return within {e.timeout:g}s",
                elapsed=e.elapsed,
            )
        if not outcome.passed:
            how = "was killed by signal %d" % -outcome.exitcode if outcome.abnormal else "failed"
            return ProbeResult.fail(
                NAME,
                reason=f"stale NFS mount: {mount_point}",
                detail=f"chdir({mount_point}) {how}",
                elapsed=outcome.elapsed,
            )
        logger.debug("NFS mount %s responded in %.4fs", mount_point, outcome.elapsed)
        samples.append(outcome.elapsed)

    timing = summarize(samples)
    return ProbeResult.ok(
        NAME,
        detail=f"{timing.count} NFS mounts responding",
        elapsed=sum(samples),
        perfdata=timing.perfdata(),
    )
