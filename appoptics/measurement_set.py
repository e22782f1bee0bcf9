"""Collections of named counters and aggregators."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Mapping

from .aggregator import Aggregator, SynchronizedAggregator
from .counter import SynchronizedCounter
from .tags import metric_with_tags


@dataclass
class MeasurementSetReport:
    """A snapshot of the non-zero counters and aggregators of a set."""

    counts: dict[str, int] = field(default_factory=dict)
    aggregators: dict[str, Aggregator] = field(default_factory=dict)


class MeasurementSet:
    """Named counters and aggregators, safe for concurrent use."""

    def __init__(self) -> None:
        self._counters: dict[str, SynchronizedCounter] = {}
        self._aggregators: dict[str, SynchronizedAggregator] = {}
        self._counters_lock = threading.Lock()
        self._aggregators_lock = threading.Lock()

    def get_counter(self, key: str) -> SynchronizedCounter:
        """Return the counter for key, creating it if needed."""
        with self._counters_lock:
            counter = self._counters.get(key)
            if counter is None:
                counter = self._counters[key] = SynchronizedCounter()
            return counter

    def get_aggregator(self, key: str) -> SynchronizedAggregator:
        """Return the aggregator for key, creating it if needed."""
        with self._aggregators_lock:
            agg = self._aggregators.get(key)
            if agg is None:
                agg = self._aggregators[key] = SynchronizedAggregator()
            return agg

    def incr(self, key: str) -> None:
        """Add 1 to the counter for key."""
        self.get_counter(key).incr()

    def add(self, key: str, delta: int) -> None:
        """Add delta to the counter for key."""
        self.get_counter(key).add(delta)

    def update_aggregator_value(self, key: str, val: float) -> None:
        """Record a value in the aggregator for key."""
        self.get_aggregator(key).update_value(val)

    def update_aggregator(self, key: str, other: Aggregator) -> None:
        """Merge an aggregator into the aggregator for key."""
        self.get_aggregator(key).update(other)

    def merge(self, report: MeasurementSetReport) -> None:
        """Merge every counter and aggregator of a report into this set."""
        for key, value in report.counts.items():
            self.get_counter(key).add(value)
        for key, agg in report.aggregators.items():
            self.get_aggregator(key).update(agg)

    def reset(self) -> MeasurementSetReport:
        """Report the non-zero state and reset everything to zero.

        Counters and aggregators are kept, only their values are cleared.
        """
        report = MeasurementSetReport()
        with self._counters_lock:
            for key, counter in self._counters.items():
                value = counter.reset()
                if value != 0:
                    report.counts[key] = value
        with self._aggregators_lock:
            for key, sync_agg in self._aggregators.items():
                agg = sync_agg.reset()
                if agg.count != 0:
                    report.aggregators[key] = agg
        return report


class TaggedMeasurementSet:
    """A view of a MeasurementSet that applies a fixed set of tags to every key."""

    def __init__(
        self, measurement_set: MeasurementSet, tags: Mapping[str, Any] | None = None
    ) -> None:
        self.measurement_set = measurement_set
        self.tags = tags

    def get_counter(self, key: str) -> SynchronizedCounter:
        """Return the counter for key with this set's tags."""
        return self.measurement_set.get_counter(metric_with_tags(key, self.tags))

    def get_aggregator(self, key: str) -> SynchronizedAggregator:
        """Return the aggregator for key with this set's tags."""
        return self.measurement_set.get_aggregator(metric_with_tags(key, self.tags))

    def incr(self, key: str) -> None:
        """Add 1 to the tagged counter for key."""
        self.get_counter(key).incr()

    def add(self, key: str, delta: int) -> None:
        """Add delta to the tagged counter for key."""
        self.get_counter(key).add(delta)

    def update_aggregator_value(self, key: str, val: float) -> None:
        """Record a value in the tagged aggregator for key."""
        self.get_aggregator(key).update_value(val)

    def update_aggregator(self, key: str, other: Aggregator) -> None:
        """Merge an aggregator into the tagged aggregator for key."""
        self.get_aggregator(key).update(other)

    def merge(self, report: MeasurementSetReport) -> None:
        """Merge a report into the underlying set, tagging every key."""
        for key, value in report.counts.items():
            self.get_counter(key).add(value)
        for key, agg in report.aggregators.items():
            self.get_aggregator(key).update(agg)

    def reset(self) -> MeasurementSetReport:
        """Reset the underlying set and return its report."""
        return self.measurement_set.reset()


DEFAULT_SINK = MeasurementSet()