import threading
import time

from appoptics.batching import BatchPersister
from appoptics.client import DEFAULT_PERSISTENCE_ERROR_LIMIT, MEASUREMENT_POST_MAX_BATCH_SIZE
from appoptics.measurements import Measurement


class RecordingCommunicator:
    def __init__(self, fail=False):
        self.batches = []
        self.fail = fail
        self._lock = threading.Lock()

    def create(self, batch):
        with self._lock:
            self.batches.append(batch)
        if self.fail:
            raise RuntimeError("upload failed")
        return None


def _wait_for(condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


def _measurement():
    return Measurement(value=3.14, time=int(time.time()))


def test_creates_maximal_batches():
    comm = RecordingCommunicator()
    bp = BatchPersister(comm, True)
    bp.persist_interval = 0
    bp.start()
    for _ in range(MEASUREMENT_POST_MAX_BATCH_SIZE * 2):
        bp.submit([_measurement()])
    assert _wait_for(lambda: len(comm.batches) == 2)
    bp.stop_batching()
    assert bp.join(5)
    assert [len(b.measurements) for b in comm.batches] == [
        MEASUREMENT_POST_MAX_BATCH_SIZE,
        MEASUREMENT_POST_MAX_BATCH_SIZE,
    ]


def test_respects_push_interval():
    comm = RecordingCommunicator()
    bp = BatchPersister(comm, True)
    bp.persist_interval = 0
    bp.maximum_push_interval = 100
    bp.start()
    bp.submit([_measurement() for _ in range(5)])
    assert _wait_for(lambda: len(comm.batches) == 1)
    bp.stop_batching()
    assert bp.join(5)
    assert len(comm.batches[0].measurements) == 5


def test_stop_flushes_accumulated_measurements():
    comm = RecordingCommunicator()
    bp = BatchPersister(comm, True)
    bp.persist_interval = 0
    bp.start()
    bp.submit([_measurement() for _ in range(5)])
    bp.stop_batching()
    assert bp.join(5)
    assert [len(b.measurements) for b in comm.batches] == [5]


def test_errors_accumulate_and_stop_batching_at_limit():
    bp = BatchPersister(RecordingCommunicator(), False)
    bp.start()
    errors = [RuntimeError("some error") for _ in range(bp.error_limit)]
    for error in errors:
        bp.report_error(error)
    assert bp.join(5)
    assert bp.errors == errors
    assert len(bp.errors) == DEFAULT_PERSISTENCE_ERROR_LIMIT


def test_failing_uploads_stop_the_persister():
    comm = RecordingCommunicator(fail=True)
    bp = BatchPersister(comm, True)
    bp.persist_interval = 0
    bp.maximum_push_interval = 20
    bp.start()
    bp.submit([_measurement() for _ in range(MEASUREMENT_POST_MAX_BATCH_SIZE * 8)])
    assert bp.join(5)
    assert len(bp.errors) == bp.error_limit
    assert all(isinstance(e, RuntimeError) for e in bp.errors)


def test_without_send_stats_nothing_is_uploaded():
    comm = RecordingCommunicator()
    bp = BatchPersister(comm, False)
    bp.persist_interval = 0
    bp.maximum_push_interval = 50
    bp.start()
    bp.submit([_measurement() for _ in range(5)])
    time.sleep(0.3)
    bp.stop_batching()
    assert bp.join(5)
    assert comm.batches == []
    assert bp.errors == []