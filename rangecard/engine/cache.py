# rangecard/engine/cache.py
"""Run-scoped memo of computed tables, keyed by shell fingerprint."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from ..errors import CacheConflictError

logger = logging.getLogger("rangecard.engine")

T = TypeVar("T")


@dataclass(frozen=True)
class CacheStats:
    entries: int
    computations: int
    hits: int
    waits: int


class TableCache(Generic[T]):
    """Thread-safe, write-once table cache.

    At most one computation runs per key. Callers asking for a key that is being
    computed block until the builder finishes and then read its result. If the
    builder raises, waiters wake up and retry as builders.
    """

    def __init__(self) -> None:
        self._tables: dict[str, T] = {}
        self._lock = threading.Lock()
        self._building: dict[str, threading.Event] = {}
        self._computations = 0
        self._hits = 0
        self._waits = 0

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        while True:
            with self._lock:
                if key in self._tables:
                    self._hits += 1
                    logger.debug(f"Cache hit {key[:12]}")
                    return self._tables[key]
                event = self._building.get(key)
                if event is None:
                    # No builder yet: this caller builds, later callers wait on the event
                    event = threading.Event()
                    self._building[key] = event
                    break
                self._waits += 1
            event.wait()

        try:
            # Integration runs outside the lock
            value = compute_fn()
            with self._lock:
                self._commit(key, value)
                self._computations += 1
            logger.debug(f"Computed table {key[:12]}")
            return value
        finally:
            with self._lock:
                self._building.pop(key, None)
            event.set()

    def _commit(self, key: str, value: T) -> None:
        existing = self._tables.get(key)
        if existing is not None and existing != value:
            raise CacheConflictError(f"conflicting tables committed for {key}")
        self._tables[key] = value

    def put(self, key: str, value: T) -> None:
        """Store a precomputed table. A differing second value is a defect."""
        with self._lock:
            self._commit(key, value)

    def get(self, key: str) -> T | None:
        with self._lock:
            return self._tables.get(key)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                entries=len(self._tables),
                computations=self._computations,
                hits=self._hits,
                waits=self._waits,
            )

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._tables

    def __len__(self) -> int:
        with self._lock:
            return len(self._tables)
