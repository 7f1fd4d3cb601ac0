#!/usr/bin/env python3
"""
Batch buffer
Collects fetched cases and hands them to the store every N fetch attempts
"""

import logging
from typing import List

from config import BATCH_FLUSH_ATTEMPTS
from models import BatchResult, CaseRecord

logger = logging.getLogger(__name__)


class BatchBuffer:
    """
    Buffered records plus an attempt counter

    The counter counts fetch attempts (found or not), so flushes happen at a
    steady pace even through long runs of missing cases.
    """

    def __init__(self, threshold: int = BATCH_FLUSH_ATTEMPTS):
        self.threshold = threshold
        self.records: List[CaseRecord] = []
        self.attempts = 0

    def on_fetch_success(self, record: CaseRecord):
        self.records.append(record)
        self.attempts += 1
        logger.debug(f"📦 Added to queue ({len(self.records)} cases | {self.attempts}/{self.threshold} attempts)")

    def on_fetch_failure(self):
        self.attempts += 1

    def should_flush(self) -> bool:
        return self.attempts >= self.threshold

    def maybe_flush(self, store) -> BatchResult:
        if not self.should_flush():
            return BatchResult()
        return self.flush(store)

    def flush(self, store) -> BatchResult:
        """
        Write every buffered record and reset the buffer

        The buffer is cleared even if the write fails; a failed batch is logged and
        dropped rather than re-queued.
        """
        records = self.records
        self.records = []
        self.attempts = 0

        if not records:
            logger.debug("ℹ️ No cases to write in this batch")
            return BatchResult()

        logger.info("=" * 60)
        logger.info(f"🚀 Writing batch of {len(records)} cases...")

        try:
            result = store.save_batch(records)
        except Exception as e:
            logger.error(f"❌ Batch of {len(records)} cases could not be written: {e}")
            result = BatchResult(failed=len(records))

        logger.info(f"✅ Batch complete: {result.success} saved, {result.failed} errors")
        logger.info("=" * 60)
        return result

    def __len__(self) -> int:
        return len(self.records)
