from __future__ import annotations

import bisect
import threading
from dataclasses import dataclass
from typing import List, Tuple

from .errors import EmptyWindow


@dataclass(frozen=True)
class Sample:
    value: float
    timestamp: float


def _sample_value(sample: Sample) -> float:
    return sample.value


class SlidingWindow:
    """Fixed-capacity window of samples for one metric stream.

    Keeps two views of the same samples: slots in insertion order, overwritten
    round-robin once full, and a list sorted ascending by value. Equal values
    keep insertion order in the sorted view.

    Callers serialize access to a window with its ``lock``.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity: int = capacity
        self._slots: List[Sample] = []
        self._by_value: List[Sample] = []
        self._cursor: int = 0
        self.lock = threading.RLock()

    def insert(self, value: float, timestamp: float) -> None:
        sample = Sample(value=value, timestamp=timestamp)
        with self.lock:
            if len(self._slots) < self._capacity:
                self._slots.append(sample)
            else:
                evicted = self._slots[self._cursor]
                self._slots[self._cursor] = sample
                self._cursor = (self._cursor + 1) % self._capacity
                self._discard_sorted(evicted)
            bisect.insort_right(self._by_value, sample, key=_sample_value)

    def _discard_sorted(self, sample: Sample) -> None:
        idx = bisect.bisect_left(self._by_value, sample.value, key=_sample_value)
        while self._by_value[idx] is not sample:
            idx += 1
        del self._by_value[idx]

    def size(self) -> int:
        with self.lock:
            return len(self._slots)

    def capacity(self) -> int:
        return self._capacity

    def is_full(self) -> bool:
        with self.lock:
            return len(self._slots) == self._capacity

    def snapshot(self) -> List[Sample]:
        """Samples in insertion order, oldest first."""
        with self.lock:
            return self._slots[self._cursor:] + self._slots[: self._cursor]

    def ordered_by_value(self) -> List[Sample]:
        with self.lock:
            return list(self._by_value)

    def values(self) -> List[float]:
        with self.lock:
            return [s.value for s in self._by_value]

    def nth(self, k: int) -> float:
        """k-th smallest value, 0-based."""
        with self.lock:
            if not 0 <= k < len(self._by_value):
                raise IndexError(f"rank {k} out of range for window of size {len(self._by_value)}")
            return self._by_value[k].value

    def minimum(self) -> float:
        with self.lock:
            if not self._by_value:
                raise EmptyWindow()
            return self._by_value[0].value

    def maximum(self) -> float:
        with self.lock:
            if not self._by_value:
                raise EmptyWindow()
            return self._by_value[-1].value

    def oldest(self) -> Sample:
        with self.lock:
            if not self._slots:
                raise EmptyWindow()
            return self._slots[self._cursor]

    def newest(self) -> Sample:
        with self.lock:
            if not self._slots:
                raise EmptyWindow()
            return self._slots[(self._cursor - 1) % len(self._slots)]

    def time_span(self) -> Tuple[float, float]:
        with self.lock:
            return self.oldest().timestamp, self.newest().timestamp

    def duration(self) -> float:
        start, stop = self.time_span()
        return stop - start

    def __len__(self) -> int:
        return self.size()

    def __repr__(self) -> str:
        return f"SlidingWindow(capacity={self._capacity}, size={self.size()})"
