from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for resolution cache population.

    Cache reads never take a lock. The mode only decides whether a cache miss is
    computed inside an exclusive section that re-checks the cache before writing.
    """

    THREAD = "thread"
    """Guard cache misses with ``threading.RLock`` and double-checked re-reads."""

    NONE = "none"
    """Disable locking; concurrent misses may compute the same entry twice."""
