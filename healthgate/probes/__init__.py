"""Health probes — each returns a ProbeResult; none of them exits the process."""

from .base import Aggregator, ProbeResult, TimingSummary, summarize
from .isolation import IsolatedOutcome, IsolationTimeout, run_isolated
from .mounts import EnumerationError, MountRecord, enumerate_mounts, intersect
