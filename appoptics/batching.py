"""Batching of measurements and their persistence under an error limit."""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Any, Iterable

from .client import DEFAULT_PERSISTENCE_ERROR_LIMIT, MEASUREMENT_POST_MAX_BATCH_SIZE
from .measurements import Measurement, MeasurementsBatch

log = logging.getLogger(__name__)

_STOP = object()


class BatchPersister:
    """Packs submitted measurements into API-sized batches and persists them.

    Measurements are pushed as soon as a full batch of
    MEASUREMENT_POST_MAX_BATCH_SIZE has accumulated, and otherwise every
    ``maximum_push_interval`` milliseconds. Persistence errors are counted;
    once ``error_limit`` of them have been seen, batching stops.
    """

    def __init__(self, communicator: Any, send_stats: bool = True) -> None:
        self.communicator = communicator
        self.send_stats = send_stats
        self.error_limit = DEFAULT_PERSISTENCE_ERROR_LIMIT
        self.maximum_push_interval = 2000
        self.persist_interval = 0.5
        self.errors: list[BaseException] = []
        self._prep: queue.Queue[Any] = queue.Queue()
        self._batches: queue.Queue[Any] = queue.Queue(maxsize=1)
        self._error_queue: queue.Queue[Any] = queue.Queue()
        self._errors_lock = threading.Lock()
        self._threads: list[threading.Thread] = []

    def submit(self, measurements: Iterable[Measurement]) -> None:
        """Queue measurements for batching; ignored once batching has stopped."""
        self._prep.put(list(measurements))

    def report_error(self, error: BaseException) -> None:
        """Count a persistence error towards the error limit."""
        self._error_queue.put(error)

    def stop_batching(self) -> None:
        """Flush what has accumulated and stop batching and persisting."""
        self._prep.put(_STOP)

    def start(self) -> None:
        """Start the batching, persisting and error-tracking threads."""
        if self._threads:
            raise RuntimeError("batch persister already started")
        for target in (self._batch_loop, self._persist_loop, self._error_loop):
            thread = threading.Thread(target=target, daemon=True)
            thread.start()
            self._threads.append(thread)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the threads to finish; return True if all of them did."""
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in self._threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)
        return not any(thread.is_alive() for thread in self._threads)

    def _push(self, measurements: list[Measurement]) -> None:
        self._batches.put(MeasurementsBatch(measurements=measurements))

    def _batch_loop(self) -> None:
        current: list[Measurement] = []
        interval = self.maximum_push_interval / 1000.0
        next_tick = time.monotonic() + interval
        while True:
            timeout = max(0.0, next_tick - time.monotonic())
            try:
                item = self._prep.get(timeout=timeout)
            except queue.Empty:
                next_tick = time.monotonic() + interval
                if current:
                    self._push(current[:MEASUREMENT_POST_MAX_BATCH_SIZE])
                    current = current[MEASUREMENT_POST_MAX_BATCH_SIZE:]
                continue
            if item is _STOP:
                with self._errors_lock:
                    below_limit = len(self.errors) < self.error_limit
                if current and below_limit:
                    self._push(current[:MEASUREMENT_POST_MAX_BATCH_SIZE])
                self._batches.put(_STOP)
                self._error_queue.put(_STOP)
                return
            current.extend(item)
            if len(current) >= MEASUREMENT_POST_MAX_BATCH_SIZE:
                self._push(current[:MEASUREMENT_POST_MAX_BATCH_SIZE])
                current = current[MEASUREMENT_POST_MAX_BATCH_SIZE:]

    def _persist_loop(self) -> None:
        while True:
            batch = self._batches.get()
            if batch is _STOP:
                return
            try:
                self._persist_batch(batch)
            except Exception as exc:  # noqa: BLE001 - every failure counts as an error
                self.report_error(exc)
            if self.persist_interval > 0:
                time.sleep(self.persist_interval)

    def _error_loop(self) -> None:
        while True:
            error = self._error_queue.get()
            if error is _STOP:
                return
            with self._errors_lock:
                self.errors.append(error)
                count = len(self.errors)
            if count == self.error_limit:
                self.stop_batching()
                return

    def _persist_batch(self, batch: MeasurementsBatch) -> None:
        if not self.send_stats:
            log.info("received %d Measurements for persistence", len(batch.measurements))
            return
        log.info("persisting %d Measurements to AppOptics", len(batch.measurements))
        response = self.communicator.create(batch)
        if response is not None:
            log.debug("response status: %s", getattr(response, "status_code", None))