"""Entry point — `healthgate` console script, run by Postfix per policy request."""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.panel import Panel

from .config import Settings, settings as default_settings
from .logs import configure_logging
from .policy.config import ConfigError, load_config
from .policy.orchestrator import CONFIG_ERROR_REASON, run_checks
from .policy.reporter import Reporter
from .policy.request import read_request

logger = logging.getLogger("healthgate.main")

INTERNAL_ERROR_REASON = "internal error"


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="healthgate",
        description="Defer mail delivery while local health checks fail (Postfix policy hook)",
    )
    parser.add_argument("--config", default=settings.config_path, help="YAML check configuration")
    parser.add_argument("--debug", action="store_true", help="Trace checks to stdout")
    parser.add_argument(
        "--request", action="store_true",
        help="Read one policy-delegation request from stdin before checking",
    )
    parser.add_argument("--mount-table", default=None, help="Override the mount table path")
    return parser


def run(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    """Run one gate decision. Writes exactly one verdict to stdout; returns the exit code."""
    settings = settings or default_settings
    args = build_parser(settings).parse_args(argv)
    if args.mount_table:
        settings = settings.model_copy(update={"mount_table": args.mount_table})

    configure_logging(settings, debug=args.debug)
    if args.debug:
        Console(file=sys.stdout).print(
            Panel.fit(
                f"Config:      {args.config}\n"
                f"Mount table: {settings.mount_table}\n"
                f"NFS timeout: {settings.nfs_timeout:g}s",
                title="healthgate",
                border_style="blue",
            )
        )

    reporter = Reporter()
    try:
        _decide(args, settings, reporter)
    except Exception:
        logger.exception("Unexpected error before a verdict was reached")
        if reporter.running:
            reporter.abort(INTERNAL_ERROR_REASON)

    reporter.emit(sys.stdout)
    return reporter.verdict.exit_code


def _decide(args: argparse.Namespace, settings: Settings, reporter: Reporter) -> None:
    if args.request:
        read_request(sys.stdin)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        reporter.abort(CONFIG_ERROR_REASON, str(e))
        return

    run_checks(config, settings, reporter)


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
