"""Check dispatcher — runs configured checks in a fixed order until one fails."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import Settings
from ..probes.base import ProbeResult
from ..probes.mounts import EnumerationError
from ..probes.nfs import check_nfs_mounts
from ..probes.sssd import check_sssd_health
from ..probes.users import check_users_exist
from .config import GateConfig
from .reporter import Reporter, Verdict

logger = logging.getLogger(__name__)

SENTINEL = "sentinel"

CONFIG_ERROR_REASON = "configuration error"
MOUNT_TABLE_REASON = "mount table unavailable"


def _sentinel(config: GateConfig, settings: Settings) -> ProbeResult:
    return ProbeResult.ok(SENTINEL, detail="all configured checks completed")


# Dispatcher, in declaration order. The sentinel always runs last.
CHECKS: dict[str, Callable[[GateConfig, Settings], ProbeResult]] = {
    "nfs_mount": lambda c, s: check_nfs_mounts(c.block("nfs_mount"), s),
    "sssd_health": lambda c, s: check_sssd_health(c.block("sssd_health"), s),
    "user_exists": lambda c, s: check_users_exist(c.block("user_exists")),
    SENTINEL: _sentinel,
}

CHECK_ORDER = tuple(CHECKS)


def run_checks(config: GateConfig, settings: Settings, reporter: Reporter | None = None) -> Verdict:
    """Run every enabled check; first failure defers. Never exits the process."""
    reporter = reporter or Reporter()

    for name in CHECK_ORDER:
        if name != SENTINEL and not config.enabled(name):
            continue

        logger.debug("Running check %s", name)
        try:
            result = CHECKS[name](config, settings)
        except EnumerationError as e:
            return reporter.abort(MOUNT_TABLE_REASON, str(e))

        if not reporter.undertake(result):
            return reporter.verdict

    return reporter.proceed()
