"""Postfix policy-delegation request reader.

Postfix sends ``name=value`` lines terminated by an empty line. The verdict
does not depend on any attribute; they are read so the hook can sit behind
``spawn(8)`` and still log who triggered the check.
"""

from __future__ import annotations

import logging
from typing import TextIO

logger = logging.getLogger(__name__)

LOGGED_ATTRIBUTES = ("request", "protocol_state", "client_address", "sender", "recipient", "queue_id")


def read_request(stream: TextIO) -> dict[str, str]:
    """Read one request. Stops at the first empty line or EOF."""
    attrs: dict[str, str] = {}
    for line in stream:
        line = line.rstrip("\r\n")
        if not line:
            break
        name, sep, value = line.partition("=")
        if not sep or not name:
            logger.warning("Ignoring malformed policy attribute: %r", line)
            continue
        attrs[name] = value

    logger.debug(
        "Policy request: %s",
        " ".join(f"{k}={attrs[k]}" for k in LOGGED_ATTRIBUTES if k in attrs) or "(empty)",
    )
    return attrs
