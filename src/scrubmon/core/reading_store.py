from __future__ import annotations

"""
Identity-keyed, time-bounded reading storage.

:func:`merge` is the pure merge-and-prune step; :class:`ReadingStore` holds
the current :class:`RetainedSet` for a single writer while readers take
snapshots.
"""

import logging
import threading
from collections.abc import Iterable, Iterator
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .models import Reading

logger = logging.getLogger(__name__)


def _sort_key(reading: Reading) -> Tuple[int, str]:
    return (reading.timestamp, reading.identity)


class RetainedSet:
    """
    Immutable set of readings ordered by ``(timestamp, identity)``.

    Keeps an identity index for dedup and an ``int64`` timestamp column so
    window queries are a pair of binary searches.
    """

    __slots__ = ("_readings", "_index", "_times")

    def __init__(self, readings: Iterable[Reading] = ()) -> None:
        index: Dict[str, Reading] = {}
        for reading in readings:
            index[reading.identity] = reading
        self._index = index
        self._readings: Tuple[Reading, ...] = tuple(sorted(index.values(), key=_sort_key))
        self._times = np.fromiter(
            (r.timestamp for r in self._readings),
            dtype=np.int64,
            count=len(self._readings),
        )

    @classmethod
    def empty(cls) -> "RetainedSet":
        return cls(())

    def __len__(self) -> int:
        return len(self._readings)

    def __iter__(self) -> Iterator[Reading]:
        return iter(self._readings)

    def __contains__(self, identity: object) -> bool:
        return identity in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RetainedSet):
            return NotImplemented
        return self._readings == other._readings

    def __repr__(self) -> str:
        return f"RetainedSet({len(self)} readings)"

    def get(self, identity: str) -> Optional[Reading]:
        return self._index.get(identity)

    @property
    def readings(self) -> Tuple[Reading, ...]:
        return self._readings

    def window(self, start: int, end: int) -> Tuple[Reading, ...]:
        """Return readings with ``start <= timestamp <= end`` in stored order."""
        if end < start or not self._readings:
            return ()
        lo = int(np.searchsorted(self._times, start, side="left"))
        hi = int(np.searchsorted(self._times, end, side="right"))
        return self._readings[lo:hi]

    def oldest_timestamp(self) -> Optional[int]:
        if not self._readings:
            return None
        return int(self._times[0])

    def latest_timestamp(self) -> Optional[int]:
        if not self._readings:
            return None
        return int(self._times[-1])


def merge(existing: Iterable[Reading], incoming: Sequence[Reading], cutoff: int) -> RetainedSet:
    """
    Merge ``incoming`` into ``existing`` and drop readings older than ``cutoff``.

    Readings are keyed by :attr:`Reading.identity`. On a collision the
    incoming reading replaces the retained one regardless of its timestamp,
    and within one batch the later reading wins: arrival order is the
    tie-break. Applying the same batch twice yields the same set.
    """
    combined: Dict[str, Reading] = {}
    for reading in existing:
        combined[reading.identity] = reading
    for reading in incoming:
        combined[reading.identity] = reading
    return RetainedSet(r for r in combined.values() if r.timestamp >= cutoff)


class ReadingStore:
    """Current :class:`RetainedSet` plus lock.

    Only one thread is expected to call :meth:`apply`/:meth:`replace`;
    :meth:`snapshot` is safe from any thread and returns an immutable set.
    """

    def __init__(self, initial: Optional[RetainedSet] = None) -> None:
        self._current = initial if initial is not None else RetainedSet.empty()
        self._lock = threading.RLock()

    def snapshot(self) -> RetainedSet:
        with self._lock:
            return self._current

    def apply(self, incoming: Sequence[Reading], cutoff: int) -> RetainedSet:
        """Merge a batch and prune, returning the new set."""
        with self._lock:
            before = len(self._current)
            self._current = merge(self._current, incoming, cutoff)
            logger.debug(
                "Merged %d readings (cutoff=%d): %d -> %d retained, span %s..%s",
                len(incoming),
                cutoff,
                before,
                len(self._current),
                self._current.oldest_timestamp(),
                self._current.latest_timestamp(),
            )
            return self._current

    def replace(self, readings: Sequence[Reading], cutoff: int) -> RetainedSet:
        """Discard the retained set and rebuild it from ``readings``."""
        with self._lock:
            self._current = merge((), readings, cutoff)
            return self._current

    def prune(self, cutoff: int) -> RetainedSet:
        return self.apply((), cutoff)

    def __len__(self) -> int:
        with self._lock:
            return len(self._current)
