from __future__ import annotations

import threading
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from typing import Generic, TypeVar

from typelocator.lock_mode import LockMode

K = TypeVar("K")
V = TypeVar("V")


class ResolutionCache(Generic[K, V]):
    """Write-once mapping populated with double-checked locking.

    Reads are lock-free. A miss enters one exclusive section per cache, re-checks
    the entry and only then computes and stores it, so each key is computed at
    most once under ``LockMode.THREAD``. The section is reentrant: a compute may
    populate other entries of the same cache. Entries are never evicted. A failing
    compute stores nothing.
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self, lock_mode: LockMode = LockMode.THREAD) -> None:
        self._entries: dict[K, V] = {}
        self._lock: AbstractContextManager[object] = (
            threading.RLock() if lock_mode is LockMode.THREAD else nullcontext()
        )

    def get_or_create(self, key: K, create: Callable[[K], V]) -> V:
        entry = self._entries.get(key, _MISSING)
        if entry is not _MISSING:
            return entry  # type: ignore[return-value]

        with self._lock:
            entry = self._entries.get(key, _MISSING)
            if entry is not _MISSING:  # pragma: no cover - race timing dependent
                return entry  # type: ignore[return-value]
            value = create(key)
            # first writer wins when locking is disabled
            return self._entries.setdefault(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


_MISSING = object()


__all__ = ["ResolutionCache"]
