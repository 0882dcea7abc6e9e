"""User-existence probe — every configured account must resolve via NSS."""

from __future__ import annotations

import logging
import pwd
import time
from typing import Any

from ..policy.config import ConfigError, parse_user_exists
from .base import ProbeResult

logger = logging.getLogger(__name__)

NAME = "user_exists"


def user_exists(username: str) -> bool:
    try:
        pwd.getpwnam(username)
    except KeyError:
        return False
    return True


def check_users_exist(raw: Any) -> ProbeResult:
    try:
        params = parse_user_exists(raw)
    except ConfigError as e:
        return ProbeResult.fail(NAME, detail=str(e))

    if not params.users:
        return ProbeResult.fail(NAME, detail="no users configured")

    t0 = time.perf_counter()
    missing = [u for u in params.users if not user_exists(u)]
    elapsed = time.perf_counter() - t0

    if missing:
        return ProbeResult.fail(NAME, detail=f"unknown users: {', '.join(missing)}", elapsed=elapsed)
    return ProbeResult.ok(NAME, detail=f"{len(params.users)} users resolved", elapsed=elapsed)
