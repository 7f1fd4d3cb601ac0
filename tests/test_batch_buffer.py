"""Tests for the attempt-counted batch buffer."""

from batch_buffer import BatchBuffer
from conftest import make_record
from models import BatchResult


class RecordingStore:
    def __init__(self, fail=False):
        self.batches = []
        self.fail = fail

    def save_batch(self, records):
        self.batches.append(list(records))
        if self.fail:
            raise RuntimeError("database unreachable")
        return BatchResult(success=len(records))


class TestThreshold:

    def test_counts_successes_and_failures(self):
        buffer = BatchBuffer(threshold=3)
        buffer.on_fetch_success(make_record("1/20"))
        buffer.on_fetch_failure()

        assert buffer.attempts == 2
        assert len(buffer) == 1
        assert not buffer.should_flush()

        buffer.on_fetch_failure()
        assert buffer.should_flush()

    def test_maybe_flush_below_threshold_does_nothing(self):
        store = RecordingStore()
        buffer = BatchBuffer(threshold=2)
        buffer.on_fetch_success(make_record("1/20"))

        result = buffer.maybe_flush(store)

        assert (result.success, result.failed) == (0, 0)
        assert store.batches == []
        assert len(buffer) == 1

    def test_maybe_flush_at_threshold_writes_and_resets(self):
        store = RecordingStore()
        buffer = BatchBuffer(threshold=2)
        first, second = make_record("1/20"), make_record("2/20")
        buffer.on_fetch_success(first)
        buffer.on_fetch_success(second)

        result = buffer.maybe_flush(store)

        assert result.success == 2
        assert store.batches == [[first, second]]
        assert buffer.attempts == 0
        assert len(buffer) == 0


class TestFlush:

    def test_empty_flush_skips_store(self):
        store = RecordingStore()
        buffer = BatchBuffer(threshold=1)
        buffer.on_fetch_failure()

        result = buffer.flush(store)

        assert (result.success, result.failed) == (0, 0)
        assert store.batches == []
        assert buffer.attempts == 0

    def test_buffer_cleared_when_store_raises(self):
        store = RecordingStore(fail=True)
        buffer = BatchBuffer(threshold=10)
        buffer.on_fetch_success(make_record("1/20"))
        buffer.on_fetch_success(make_record("2/20"))

        result = buffer.flush(store)

        assert (result.success, result.failed) == (0, 2)
        assert len(buffer) == 0
        assert buffer.attempts == 0

    def test_flush_against_real_store(self, store):
        buffer = BatchBuffer(threshold=1)
        buffer.on_fetch_success(make_record("1/20"))

        result = buffer.maybe_flush(store)

        assert (result.success, result.failed) == (1, 0)
