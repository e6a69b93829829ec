"""Threading helpers: worker sizing for read-only fan-out and deferred callbacks."""

import os
import sys
import threading
from typing import Callable, Optional


def is_free_threading_enabled() -> bool:
    """Detect if Python is running with the GIL disabled (3.13+ free-threading build)."""
    try:
        return hasattr(sys, "_is_gil_enabled") and not sys._is_gil_enabled()
    except Exception:
        return False


def get_optimal_worker_count(user_specified: Optional[int] = None, cap: int = 16) -> int:
    """Calculate a worker count for I/O-bound git lookups.

    Args:
        user_specified: User-specified worker count, if provided
        cap: Upper bound; each worker spawns git processes

    Returns:
        Number of workers for parallel lookups
    """
    if user_specified is not None and user_specified > 0:
        return user_specified

    cpu_count = os.cpu_count() or 1

    if is_free_threading_enabled():
        return min(cap, cpu_count * 2)

    # CPU_count + 4 is the usual heuristic for subprocess-bound work
    return min(cap, cpu_count + 4)


class _TimerHandle:
    """Cancellable handle returned by ThreadingScheduler."""

    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler:
    """Run a callback once after a delay on a daemon timer thread."""

    def __call__(self, delay: float, callback: Callable[[], None]) -> _TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return _TimerHandle(timer)
