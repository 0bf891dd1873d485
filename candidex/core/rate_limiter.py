"""
Admission Controller for Candidex

In-memory sliding-window limiter for AI endpoints. Each authenticated user
may make ``max_requests`` AI calls per rolling ``window_seconds``. Windows
live in a single map guarded by one lock; a periodic sweep removes windows
that have gone empty so idle users do not accumulate memory.
"""

import asyncio
import logging
import math
import threading
import time
from collections import deque
from typing import Callable

logger = logging.getLogger(__name__)


class AdmissionController:
    """
    Per-user sliding-window request budget.

    Safe to call from multiple threads and from the event loop; every
    read-prune-append happens under the same lock the sweep uses.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 60.0,
        sweep_interval_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max(1, int(max_requests))
        self.window_seconds = float(window_seconds)
        self.sweep_interval_seconds = float(sweep_interval_seconds)
        self._clock = clock

        self._windows: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._sweep_task: asyncio.Task | None = None

    def _prune(self, window: deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while window and window[0] <= cutoff:
            window.popleft()

    # =========================================================================
    # ADMISSION
    # =========================================================================

    def try_admit(self, user_id: str | None) -> bool:
        """
        Record and admit a request, or reject it if the budget is spent.

        Unauthenticated callers (no user id) are always admitted.
        A rejected call leaves the window unchanged apart from pruning.
        """
        if not user_id:
            return True

        now = self._clock()
        with self._lock:
            window = self._windows.get(user_id)
            if window is None:
                window = self._windows[user_id] = deque()
            self._prune(window, now)

            if len(window) >= self.max_requests:
                logger.info(f"Admission rejected for user {user_id}: {len(window)} calls in window")
                return False

            window.append(now)
            return True

    def retry_after(self, user_id: str | None) -> int:
        """Seconds until the user's oldest call leaves the window (0 if not limited)."""
        if not user_id:
            return 0

        now = self._clock()
        with self._lock:
            window = self._windows.get(user_id)
            if not window:
                return 0
            self._prune(window, now)
            if len(window) < self.max_requests:
                return 0
            return max(1, math.ceil(window[0] + self.window_seconds - now))

    def active_users(self) -> int:
        """Number of users currently holding a window."""
        with self._lock:
            return len(self._windows)

    # =========================================================================
    # SWEEP
    # =========================================================================

    def sweep(self) -> int:
        """
        Drop expired timestamps and delete windows left empty.

        Returns:
            Number of windows removed
        """
        now = self._clock()
        removed = 0
        with self._lock:
            for user_id in list(self._windows):
                window = self._windows[user_id]
                self._prune(window, now)
                if not window:
                    del self._windows[user_id]
                    removed += 1

        if removed:
            logger.debug(f"Admission sweep removed {removed} idle windows")
        return removed

    async def _sweep_loop(self):
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            self.sweep()

    async def start(self):
        """Start the periodic sweep on the running event loop."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_loop())
            logger.info(f"Admission sweep scheduled every {self.sweep_interval_seconds:.0f}s")

    async def stop(self):
        """Cancel the periodic sweep."""
        if self._sweep_task is None:
            return
        self._sweep_task.cancel()
        try:
            await self._sweep_task
        except asyncio.CancelledError:
            pass
        self._sweep_task = None
