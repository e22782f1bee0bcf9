"""Periodic reporting of a MeasurementSet to the measurements API."""

from __future__ import annotations

import logging
import os
import queue
import random
import socket
import threading
import time
from typing import Any, Callable, Mapping

from .client import ILLEGAL_NAME_CHARS
from .measurement_set import MeasurementSet, MeasurementSetReport
from .measurements import Measurement, MeasurementsBatch
from .tags import parse_measurement_key

OUTPUT_MEASUREMENTS_INTERVAL_SECONDS = 15
MAX_RETRIES = 3
MAX_MEASUREMENTS_PER_BATCH = 1000
_BATCH_QUEUE_SIZE = 100
_POLL_SECONDS = 0.2

log = logging.getLogger(__name__)


def _hostname() -> str:
    try:
        name = socket.gethostname()
    except OSError:
        name = "na"
    return name + os.environ.get("HOST_SUFFIX", "")


def _flush_forever(
    stop: threading.Event,
    measurement_set: MeasurementSet,
    flush: Callable[[MeasurementSetReport], None],
) -> None:
    interval = OUTPUT_MEASUREMENTS_INTERVAL_SECONDS
    # A random initial delay spreads the output cycles of different processes.
    if stop.wait(random.uniform(0, interval)):
        return
    flush(measurement_set.reset())
    next_tick = time.monotonic() + interval
    while not stop.wait(max(0.0, next_tick - time.monotonic())):
        flush(measurement_set.reset())
        next_tick += interval


class Reporter:
    """Sends the counters and aggregators of a MeasurementSet at a regular interval."""

    def __init__(
        self, measurement_set: MeasurementSet, communicator: Any, prefix: str = ""
    ) -> None:
        self.measurement_set = measurement_set
        self.communicator = communicator
        self.prefix = prefix
        self.global_tags: dict[str, str] = {"hostname": _hostname()}
        self._batches: queue.Queue[MeasurementsBatch] = queue.Queue(maxsize=_BATCH_QUEUE_SIZE)
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        """Start posting batches and flushing the measurement set periodically."""
        self._start_posting()
        self._spawn(lambda: _flush_forever(self._stop, self.measurement_set, self.flush_report))

    def stop(self) -> None:
        """Stop the background threads and wait for them to finish."""
        self._stop.set()
        for thread in self._threads:
            thread.join()
        self._threads = []
        self._stop = threading.Event()

    def _spawn(self, target: Callable[[], None]) -> None:
        thread = threading.Thread(target=target, daemon=True)
        thread.start()
        self._threads.append(thread)

    def _start_posting(self) -> None:
        self._spawn(self._post_forever)

    def _post_forever(self) -> None:
        stop = self._stop
        while not stop.is_set():
            try:
                batch = self._batches.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                continue
            self._post(batch)

    def _post(self, batch: MeasurementsBatch) -> bool:
        for attempt in range(1, MAX_RETRIES + 1):
            log.debug(
                "Uploading AppOptics measurements batch: time=%s measurements=%d tags=%s",
                batch.time,
                len(batch.measurements),
                self.global_tags,
            )
            try:
                self.communicator.create(batch)
            except Exception as exc:  # noqa: BLE001 - retried, then given up
                aborting = attempt == MAX_RETRIES
                log.error(
                    "Error uploading AppOptics measurements batch: %s (try %d, aborting=%s)",
                    exc,
                    attempt,
                    aborting,
                )
                continue
            return True
        return False

    def post_pending(self) -> int:
        """Post every queued batch now; return how many were posted successfully."""
        posted = 0
        while True:
            try:
                batch = self._batches.get_nowait()
            except queue.Empty:
                return posted
            if self._post(batch):
                posted += 1

    def flush_report(self, report: MeasurementSetReport) -> None:
        """Turn a report into measurement batches and queue them for posting.

        A "num_measurements" counter is added to the report first.
        """
        batch_time = (int(time.time()) // OUTPUT_MEASUREMENTS_INTERVAL_SECONDS) * (
            OUTPUT_MEASUREMENTS_INTERVAL_SECONDS
        )

        def new_batch() -> MeasurementsBatch:
            return MeasurementsBatch(time=batch_time, period=OUTPUT_MEASUREMENTS_INTERVAL_SECONDS)

        batch = new_batch()

        def add(measurement: Measurement) -> None:
            nonlocal batch
            batch.measurements.append(measurement)
            if len(batch.measurements) >= MAX_MEASUREMENTS_PER_BATCH:
                self._batches.put(batch)
                batch = new_batch()

        report.counts["num_measurements"] = len(report.counts) + len(report.aggregators) + 1

        for key, value in report.counts.items():
            add(
                Measurement(
                    **self._identity(key),
                    value=float(value) if value != 0 else None,
                )
            )
        for key, agg in report.aggregators.items():
            add(
                Measurement(
                    **self._identity(key),
                    sum=agg.sum if agg.sum != 0 else None,
                    count=agg.count if agg.count != 0 else None,
                    min=agg.min if agg.min != 0 else None,
                    max=agg.max if agg.max != 0 else None,
                    last=agg.last if agg.last != 0 else None,
                )
            )
        if batch.measurements:
            self._batches.put(batch)

    def _identity(self, key: str) -> dict[str, Any]:
        metric_name, tags = parse_measurement_key(key)
        return {
            "name": self.prefix + ILLEGAL_NAME_CHARS.sub("_", metric_name),
            "tags": self.merge_global_tags(tags),
        }

    def merge_global_tags(self, tags: Mapping[str, str] | None) -> dict[str, str]:
        """Combine the per-measurement tags with the reporter's global tags."""
        if tags is None:
            return dict(self.global_tags or {})
        merged = dict(tags)
        if not self.global_tags:
            return merged
        for key, value in self.global_tags.items():
            if value not in merged:
                merged[key] = value
        return merged


class MultiReporter:
    """Flushes one MeasurementSet to several reporters on a shared schedule."""

    def __init__(self, measurement_set: MeasurementSet, reporters: list[Reporter]) -> None:
        self.measurement_set = measurement_set
        self.reporters = list(reporters)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start every reporter's poster and the shared flushing thread."""
        for reporter in self.reporters:
            reporter._start_posting()
        stop = self._stop
        self._thread = threading.Thread(
            target=lambda: _flush_forever(stop, self.measurement_set, self.flush_report),
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop flushing and stop every reporter."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self._stop = threading.Event()
        for reporter in self.reporters:
            reporter.stop()

    def flush_report(self, report: MeasurementSetReport) -> None:
        """Hand the report to every reporter."""
        for reporter in self.reporters:
            reporter.flush_report(report)