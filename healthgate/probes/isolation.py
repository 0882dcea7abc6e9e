"""Isolated executor — run one unit of work in a forked child under a hard deadline.

Some operations (``chdir`` into a stale NFS mount is the usual one) block in
uninterruptible kernel I/O. A timer in the same process cannot get control back,
so the work runs in a child process and the parent waits on a pidfd with a
deadline. When the deadline passes the parent SIGKILLs the child and moves on.

The child's exit status is the result: 0 when ``work`` returned truthy,
1 when it returned falsy or raised.
"""

from __future__ import annotations

import logging
import os
import select
import signal
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# Bounded wait for the kernel to reap a SIGKILLed child. A child stuck in
# D state cannot die until its I/O returns; we abandon it after this.
REAP_GRACE_SECONDS = 1.0

# One deadline at a time; probes run strictly sequentially.
_deadline_lock = threading.Lock()


class IsolationTimeout(Exception):
    """The isolated work did not finish before its deadline."""

    def __init__(self, label: str, timeout: float, elapsed: float) -> None:
        self.label = label
        self.timeout = timeout
        self.elapsed = elapsed
        super().__init__(f"{label or 'isolated work'} did not complete within {timeout:g}s")


@dataclass(frozen=True)
class IsolatedOutcome:
    """Completed (not timed out) child run."""

    passed: bool
    exitcode: int
    elapsed: float

    @property
    def abnormal(self) -> bool:
        """True when the child was killed by a signal instead of exiting."""
        return self.exitcode < 0


def run_isolated(
    work: Callable[..., Any],
    *args: Any,
    timeout: float,
    label: str = "",
) -> IsolatedOutcome:
    """Run ``work(*args)`` in a forked child, bounded by ``timeout`` seconds.

    Returns an IsolatedOutcome when the child exits on time (successfully or
    not). Raises IsolationTimeout, carrying ``label``, when it does not.
    Raises RuntimeError if another isolated run is already pending.
    """
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout!r}")
    if not _deadline_lock.acquire(blocking=False):
        raise RuntimeError("an isolated probe is already pending; overlapping runs are not supported")

    try:
        t0 = time.perf_counter()
        pid = os.fork()
        if pid == 0:
            _child_main(work, args)

        pidfd = _open_pidfd(pid)
        try:
            # Deadline armed here and disarmed as soon as the wait returns.
            if not _wait_exit(pidfd, timeout):
                elapsed = time.perf_counter() - t0
                _kill_and_reap(pid, pidfd, label)
                raise IsolationTimeout(label, timeout, elapsed)

            _, status = os.waitpid(pid, 0)
            elapsed = time.perf_counter() - t0
        finally:
            os.close(pidfd)
    finally:
        _deadline_lock.release()

    exitcode = os.waitstatus_to_exitcode(status)
    logger.debug("Isolated %s exited %d after %.4fs", label or "work", exitcode, elapsed)
    return IsolatedOutcome(passed=exitcode == 0, exitcode=exitcode, elapsed=elapsed)


def _child_main(work: Callable[..., Any], args: tuple[Any, ...]) -> None:
    """Body of the forked child. Never returns."""
    code = 1
    try:
        code = 0 if work(*args) else 1
    except Exception:
        logger.debug("Isolated work raised", exc_info=True)
    finally:
        os._exit(code)


def _open_pidfd(pid: int) -> int:
    """pidfd for ``pid``; on failure the child is killed before re-raising."""
    try:
        return os.pidfd_open(pid)
    except OSError:
        try:
            os.kill(pid, signal.SIGKILL)
            os.waitpid(pid, os.WNOHANG)
        except ChildProcessError:
            pass
        raise


def _wait_exit(pidfd: int, timeout: float) -> bool:
    """True if the child exited within ``timeout`` seconds."""
    poller = select.poll()
    poller.register(pidfd, select.POLLIN)
    return bool(poller.poll(timeout * 1000))


def _kill_and_reap(pid: int, pidfd: int, label: str) -> None:
    try:
        os.kill(pid, signal.SIGKILL)
    except ProcessLookupError:
        pass

    if _wait_exit(pidfd, REAP_GRACE_SECONDS):
        os.waitpid(pid, 0)
    else:
        logger.warning(
            "Child %d (%s) survived SIGKILL for %.1fs, abandoning it",
            pid, label or "isolated work", REAP_GRACE_SECONDS,
        )
