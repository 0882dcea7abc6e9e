"""Logging setup — syslog for the MTA, rich console tracing under --debug."""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings

SYSLOG_FORMAT = "healthgate[%(process)d]: %(levelname)s %(name)s: %(message)s"
STDERR_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _syslog_handler(settings: Settings) -> logging.Handler:
    address = settings.syslog_address
    facility = logging.handlers.SysLogHandler.facility_names.get(
        settings.syslog_facility.lower(), logging.handlers.SysLogHandler.LOG_MAIL,
    )
    if address.startswith("/") and not os.path.exists(address):
        # No local syslog socket, fall back to stderr
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(STDERR_FORMAT))
        return handler

    handler = logging.handlers.SysLogHandler(address=address, facility=facility)
    handler.setFormatter(logging.Formatter(SYSLOG_FORMAT))
    return handler


def configure_logging(settings: Settings, debug: bool = False) -> None:
    """Install handlers on the ``healthgate`` logger. Safe to call more than once."""
    root = logging.getLogger("healthgate")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    syslog = _syslog_handler(settings)
    syslog.setLevel(logging.DEBUG if debug else getattr(logging, settings.log_level.upper(), logging.INFO))
    root.addHandler(syslog)

    if debug:
        console = Console(file=sys.stdout, stderr=False)
        rich_handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
        rich_handler.setLevel(logging.DEBUG)
        root.addHandler(rich_handler)

    root.setLevel(logging.DEBUG if debug else syslog.level)
    root.propagate = False
