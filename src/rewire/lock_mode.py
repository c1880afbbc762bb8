from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for resolver table writes.

    Shared-cache stores and scalar memoization are the only writes performed
    during resolution. Build stacks are always kept per thread, so the lock
    never serializes whole resolutions.
    """

    THREAD = "thread"
    """Guard shared-cache and scalar writes with a ``threading.RLock``."""

    NONE = "none"
    """Disable locking for single-threaded applications."""
