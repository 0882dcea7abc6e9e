"""SSSD domain status probe — wraps ``sssctl domain-status -o <domain>``."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from typing import Any

from ..config import Settings
from ..policy.config import ConfigError, parse_sssd_health
from .base import ProbeResult

logger = logging.getLogger(__name__)

NAME = "sssd_health"

# Coupled to sssctl's current output format.
ONLINE_MARKER = "Online status: Online"


def parse_domain_status(output: str) -> bool:
    """True when sssctl reports the domain as online."""
    return ONLINE_MARKER in output


def check_sssd_health(raw: Any, settings: Settings) -> ProbeResult:
    try:
        params = parse_sssd_health(raw)
    except ConfigError as e:
        return ProbeResult.fail(NAME, detail=str(e))

    if not params.domain:
        return ProbeResult.fail(NAME, detail="no SSSD domain configured")

    sssctl = shutil.which(settings.sssctl_path)
    if not sssctl:
        return ProbeResult.fail(NAME, detail=f"{settings.sssctl_path} not found on PATH")

    cmd = [sssctl, "domain-status", "-o", params.domain]
    t0 = time.perf_counter()
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=settings.sssctl_timeout,
            encoding="utf-8",
            errors="replace",
        )
    except subprocess.TimeoutExpired:
        return ProbeResult.fail(
            NAME,
            detail=f"sssctl timed out after {settings.sssctl_timeout:g}s",
            elapsed=time.perf_counter() - t0,
        )
    except OSError as e:
        return ProbeResult.fail(
            NAME,
            detail=f"cannot run {sssctl}: {e}",
            elapsed=time.perf_counter() - t0,
        )
    elapsed = time.perf_counter() - t0

    if result.returncode != 0:
        return ProbeResult.fail(
            NAME,
            detail=f"sssctl exited {result.returncode}: {result.stderr.strip() or result.stdout.strip()}",
            elapsed=elapsed,
        )

    if not parse_domain_status(result.stdout):
        return ProbeResult.fail(NAME, detail=f"domain {params.domain} is not online", elapsed=elapsed)

    return ProbeResult.ok(NAME, detail=f"domain {params.domain} online", elapsed=elapsed)
