"""Periodic run loop.

Each cycle builds a brand-new Synchronizer, so every run starts
unauthenticated and nothing carries over between runs.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from ..data.models import SyncResult
from .synchronizer import Synchronizer


def _log(msg: str) -> None:
    """Print with flush for reliable output."""
    print(msg, flush=True)


def run_once(build_fn: Callable[[], Synchronizer]) -> SyncResult:
    """Build a synchronizer, run it, and always release its resources."""
    synchronizer = build_fn()
    try:
        return synchronizer.run()
    finally:
        synchronizer.close()


class SyncWorker:
    """Runs the synchronizer every ``interval`` seconds until stopped.

    A failed cycle is logged and does not stop the loop.
    """

    def __init__(self, build_fn: Callable[[], Synchronizer], interval_seconds: int):
        self.build_fn = build_fn
        self.interval = max(1, interval_seconds)
        self._stop_event = threading.Event()
        self.cycles = 0
        self.consecutive_failures = 0
        self.last_result: Optional[SyncResult] = None
        self.last_error: Optional[str] = None

    def run(self) -> None:
        _log(f"[sync-worker] Starting (interval={self.interval}s)")
        while not self._stop_event.is_set():
            self.run_cycle()
            _log(f"[sync-worker] Next run in {self.interval}s")
            if self._stop_event.wait(self.interval):
                break
        _log("[sync-worker] Stopped")

    def run_cycle(self) -> bool:
        """Run one cycle. Returns True if it completed."""
        self.cycles += 1
        started = time.monotonic()
        try:
            self.last_result = run_once(self.build_fn)
        except Exception as exc:
            self.consecutive_failures += 1
            self.last_error = f"{type(exc).__name__}: {exc}"
            _log(
                f"[sync-worker] Run {self.cycles} failed "
                f"(consecutive failures: {self.consecutive_failures}): {self.last_error}"
            )
            return False

        self.consecutive_failures = 0
        self.last_error = None
        _log(f"[sync-worker] Run {self.cycles} finished in {time.monotonic() - started:.1f}s")
        return True

    def stop(self) -> None:
        self._stop_event.set()
