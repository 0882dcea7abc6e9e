"""Probe result model and timing aggregation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field


# ── Models ───────────────────────────────────────────────────────────────────


@dataclass
class ProbeResult:
    """Outcome of one configured check.

    ``reason`` is the short text that ends up in the 432 reply; it falls back to
    the check name. ``detail`` only goes to the log.
    """

    name: str
    passed: bool
    elapsed: float = 0.0
    reason: str = ""
    detail: str = ""
    perfdata: str = ""

    @property
    def verdict_reason(self) -> str:
        return self.reason or self.name

    @classmethod
    def ok(cls, name: str, detail: str = "", elapsed: float = 0.0, perfdata: str = "") -> ProbeResult:
        return cls(name=name, passed=True, elapsed=elapsed, detail=detail, perfdata=perfdata)

    @classmethod
    def fail(cls, name: str, detail: str = "", reason: str = "", elapsed: float = 0.0) -> ProbeResult:
        return cls(name=name, passed=False, elapsed=elapsed, reason=reason, detail=detail)


@dataclass(frozen=True)
class TimingSummary:
    max: float
    avg: float
    count: int

    def perfdata(self) -> str:
        return f"max={self.max:.4f}s avg={self.avg:.4f}s"


# ── Aggregation ──────────────────────────────────────────────────────────────


def summarize(samples: Sequence[float]) -> TimingSummary:
    """Max and mean of elapsed times. Raises ValueError on an empty sequence."""
    if not samples:
        raise ValueError("cannot summarize an empty set of timing samples")
    return TimingSummary(
        max=max(samples),
        avg=sum(samples) / len(samples),
        count=len(samples),
    )


@dataclass
class Aggregator:
    """Collects probe results in dispatch order."""

    results: list[ProbeResult] = field(default_factory=list)

    def record(self, result: ProbeResult) -> None:
        self.results.append(result)

    @property
    def passed(self) -> list[str]:
        return [r.name for r in self.results if r.passed]

    @property
    def failed(self) -> list[str]:
        return [r.name for r in self.results if not r.passed]

    def perfdata(self) -> str:
        """One line of performance data across every check that produced some."""
        return "; ".join(f"{r.name}: {r.perfdata}" for r in self.results if r.perfdata)
