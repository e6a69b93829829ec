"""Utility functions for git-housekeeper."""

from .threading import (
    is_free_threading_enabled,
    get_optimal_worker_count,
    ThreadingScheduler,
)

__all__ = [
    "is_free_threading_enabled",
    "get_optimal_worker_count",
    "ThreadingScheduler",
]
