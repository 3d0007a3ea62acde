"""
Delayed one-shot task execution for marker lifetimes.

LifetimeScheduler runs every task on a single background thread, in fire
time order. Tasks are not cancellable once registered; callers that need
to ignore a stale task must make the task itself check (see
MarkersListener's generation-checked expiry).
"""

import heapq
import itertools
import logging
import math
import threading
import time
from typing import Callable, List, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

Task = Callable[[], None]

# Longest single sleep of the worker; later fire times are reached in steps
MAX_WAIT = 60.0  # seconds


class Scheduler(Protocol):
    """Narrow delayed-task interface (swappable for a synchronous test double)."""

    def after(self, delay: float, task: Task) -> None:
        """Run task once, delay seconds from now, on another execution context."""
        ...


class LifetimeScheduler:
    """
    Timer thread backed by a min-heap of (fire_time, seq, task).

    The worker thread is started lazily on the first registration.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic,
                 name: str = "lifetime-scheduler"):
        """
        Args:
            clock: Monotonic time source in seconds
            name: Worker thread name
        """
        self._clock = clock
        self._name = name
        self._queue: List[Tuple[float, int, Task]] = []
        self._seq = itertools.count()  # FIFO tie-break for equal fire times
        self._cond = threading.Condition()
        self._running = False
        self._stopped = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        with self._cond:
            self._start_locked()

    def _start_locked(self) -> None:
        """Start worker thread (internal, must hold self._cond)."""
        if self._running or self._stopped:
            return
        self._running = True
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.debug("Lifetime scheduler started")

    def after(self, delay: float, task: Task) -> None:
        """
        Register task to run once after delay seconds.

        Negative or zero delays run as soon as the worker gets to them.

        Raises:
            ValueError: If delay is NaN or infinite
        """
        delay = float(delay)
        if not math.isfinite(delay):
            raise ValueError(f"Delay must be finite, got {delay}")
        fire_time = self._clock() + max(0.0, delay)
        with self._cond:
            if self._stopped:
                logger.warning("Lifetime scheduler is shut down, dropping task")
                return
            heapq.heappush(self._queue, (fire_time, next(self._seq), task))
            self._start_locked()
            self._cond.notify()

    def pending(self) -> int:
        """Number of tasks waiting to fire."""
        with self._cond:
            return len(self._queue)

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker; pending tasks are discarded and the scheduler cannot be restarted."""
        with self._cond:
            self._running = False
            self._stopped = True
            self._queue.clear()
            self._cond.notify_all()
            thread = self._thread
            self._thread = None
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        logger.debug("Lifetime scheduler stopped")

    def _run(self) -> None:
        """Background thread: wait for the earliest task and execute it."""
        while True:
            with self._cond:
                while self._running:
                    if not self._queue:
                        self._cond.wait()
                        continue
                    wait_time = self._queue[0][0] - self._clock()
                    if wait_time <= 0:
                        break
                    self._cond.wait(timeout=min(wait_time, MAX_WAIT))
                if not self._running:
                    return
                _, _, task = heapq.heappop(self._queue)

            # Run outside the condition so tasks may register new tasks
            try:
                task()
            except Exception:
                logger.exception("Scheduled task failed")
