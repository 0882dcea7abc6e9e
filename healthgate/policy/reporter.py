"""Verdict reporter — single-shot state machine behind the policy reply.

RUNNING moves to exactly one of PROCEEDING or DEFERRED and stays there.
The first failing check (or a fatal error) defers; only after every configured
check has passed does the run proceed. The reply line is written at most once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from ..probes.base import Aggregator, ProbeResult

logger = logging.getLogger(__name__)

DEFER_PREFIX = "432 Service temporarily unavailable"


# ── Models ───────────────────────────────────────────────────────────────────


class GateState(str, Enum):
    RUNNING = "running"
    PROCEEDING = "proceeding"
    DEFERRED = "deferred"


class Action(str, Enum):
    PROCEED = "proceed"
    DEFER = "defer"


@dataclass(frozen=True)
class Verdict:
    action: Action
    reason: str = ""

    @classmethod
    def proceed(cls) -> Verdict:
        return cls(Action.PROCEED)

    @classmethod
    def defer(cls, reason: str) -> Verdict:
        return cls(Action.DEFER, reason)

    @property
    def exit_code(self) -> int:
        return 0 if self.action is Action.PROCEED else 1

    def render(self) -> str:
        """Policy-delegation reply, including the terminating blank line."""
        if self.action is Action.PROCEED:
            return "action=DUNNO\n\n"
        return f"action={DEFER_PREFIX} - {self.reason}\n\n"


# ── State machine ────────────────────────────────────────────────────────────


class Reporter:
    """Feeds probe results into the terminal state machine."""

    def __init__(self, aggregator: Aggregator | None = None) -> None:
        self.aggregator = aggregator or Aggregator()
        self.state = GateState.RUNNING
        self._verdict: Verdict | None = None
        self._emitted = False

    @property
    def running(self) -> bool:
        return self.state is GateState.RUNNING

    @property
    def verdict(self) -> Verdict:
        if self._verdict is None:
            raise RuntimeError("no verdict yet: reporter is still running")
        return self._verdict

    def _require_running(self) -> None:
        if self.state is not GateState.RUNNING:
            raise RuntimeError(f"reporter already {self.state.value}")

    def undertake(self, result: ProbeResult) -> bool:
        """Record a check result. Returns False (and defers) when it failed."""
        self._require_running()
        self.aggregator.record(result)

        if result.passed:
            logger.debug(
                "check passed: %s%s%s",
                result.name,
                f" ({result.detail})" if result.detail else "",
                f" | {result.perfdata}" if result.perfdata else "",
            )
            return True

        self.state = GateState.DEFERRED
        self._verdict = Verdict.defer(result.verdict_reason)
        logger.warning(
            "check failed: %s: %s%s",
            result.name,
            result.verdict_reason,
            f" ({result.detail})" if result.detail else "",
        )
        return False

    def abort(self, reason: str, detail: str = "") -> Verdict:
        """Fatal error: defer immediately without running anything else."""
        self._require_running()
        self.state = GateState.DEFERRED
        self._verdict = Verdict.defer(reason)
        logger.critical("%s%s", reason, f": {detail}" if detail else "")
        return self._verdict

    def proceed(self) -> Verdict:
        self._require_running()
        self.state = GateState.PROCEEDING
        self._verdict = Verdict.proceed()
        perfdata = self.aggregator.perfdata()
        logger.info(
            "all checks passed (%s)%s",
            ", ".join(self.aggregator.passed),
            f" | {perfdata}" if perfdata else "",
        )
        return self._verdict

    def emit(self, stream: TextIO) -> None:
        """Write the verdict reply. Only ever once per run."""
        if self._emitted:
            raise RuntimeError("verdict already emitted")
        line = self.verdict.render()
        # Log first: under --debug the log shares stdout and the reply must come last
        if self.state is GateState.DEFERRED:
            logger.info("verdict: defer (%s)", self.verdict.reason)
        else:
            logger.info("verdict: dunno")
        self._emitted = True
        stream.write(line)
        stream.flush()
