"""Summary-field aggregation of observed values."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace


@dataclass
class Aggregator:
    """Running count/sum/min/max/last of a series of values."""

    count: int = 0
    sum: float = 0.0
    min: float = 0.0
    max: float = 0.0
    last: float = 0.0

    def update_value(self, val: float) -> None:
        """Record one observed value."""
        if self.count == 0:
            self.min = val
            self.max = val
        else:
            if val < self.min:
                self.min = val
            if val > self.max:
                self.max = val
        self.count += 1
        self.sum += val
        self.last = val

    def update(self, other: Aggregator) -> None:
        """Merge another aggregator into this one."""
        if self.count == 0:
            self.count = other.count
            self.sum = other.sum
            self.min = other.min
            self.max = other.max
            self.last = other.last
            return
        self.count += other.count
        self.sum += other.sum
        if other.min < self.min:
            self.min = other.min
        if other.max > self.max:
            self.max = other.max
        self.last = other.last


class SynchronizedAggregator:
    """An Aggregator guarded by a lock for use from several threads."""

    def __init__(self) -> None:
        self._aggregator = Aggregator()
        self._lock = threading.Lock()

    def update_value(self, val: float) -> None:
        """Thread-safe form of Aggregator.update_value."""
        with self._lock:
            self._aggregator.update_value(val)

    def update(self, other: Aggregator) -> None:
        """Thread-safe form of Aggregator.update."""
        with self._lock:
            self._aggregator.update(other)

    def snapshot(self) -> Aggregator:
        """Return a copy of the current state."""
        with self._lock:
            return replace(self._aggregator)

    def reset(self) -> Aggregator:
        """Return the current state and start again from zero."""
        with self._lock:
            current = self._aggregator
            self._aggregator = Aggregator()
            return current