#!/usr/bin/env python3
"""
Case store
Writes fetched cases through a storage transport: batched bulk loads with a
record-by-record fallback, single-record saves and not-found marking
"""

import logging
from typing import List, Optional

from config import STORAGE_BACKEND, SQLITE_PATH
from errors import FatalConfigurationError, PersistenceError
from models import BatchResult, CaseRecord, Statement
from rep_cache import RepresentativeCache
from statement_builder import StatementBuilder

logger = logging.getLogger(__name__)


def create_transport(backend: str = STORAGE_BACKEND):
    """Build the transport named by STORAGE_BACKEND"""
    if backend == "sqlite":
        from sqlite_client import SQLiteTransport
        return SQLiteTransport(SQLITE_PATH)
    if backend == "d1":
        from d1_client import D1Transport
        return D1Transport()
    raise FatalConfigurationError(f"Unknown STORAGE_BACKEND '{backend}' (expected 'sqlite' or 'd1')")


class CaseStore:
    """
    Persists case records

    The transport must provide execute(statement) -> rows and
    bulk_load(statements) -> bool, both raising on failure.
    """

    def __init__(self, transport, builder: Optional[StatementBuilder] = None,
                 rep_cache: Optional[RepresentativeCache] = None):
        self.transport = transport
        self.builder = builder or StatementBuilder()
        self.rep_cache = rep_cache if rep_cache is not None else RepresentativeCache()

    def find_or_create_representative(self, name: str) -> int:
        """Return the representative id for a name, creating the row if needed"""
        cached_id = self.rep_cache.get(name)
        if cached_id is not None:
            logger.debug(f"💾 Representative found in cache: {name} (ID: {cached_id})")
            return cached_id

        handler = self.builder.representative_handler
        rows = self.transport.execute(handler.build_lookup(name))
        if not rows:
            logger.debug(f"👤 Creating representative: {name}")
            self.transport.execute(handler.build_insert(name))
            rows = self.transport.execute(handler.build_lookup(name))

        if not rows:
            raise PersistenceError(f"Failed to get representative ID for {name}")

        representative_id = int(rows[0]["id"])
        self.rep_cache.put(name, representative_id)
        return representative_id

    def save_application(self, record: CaseRecord) -> bool:
        """
        Save one case with its events, one statement at a time

        Returns:
            True if every statement succeeded
        """
        logger.debug(f"💾 Saving: {record.application_number}")

        try:
            name = self.builder.representative_handler.extract_representative(record)
            representative_id = self.find_or_create_representative(name) if name else None

            for statement in self.builder.build_single(record, representative_id):
                self.transport.execute(statement)

        except Exception as e:
            error = e if isinstance(e, PersistenceError) else PersistenceError(str(e))
            logger.error(f"❌ Failed to save {record.application_number}: {error}")
            return False

        logger.debug(f"✅ Saved {record.application_number} ({len(record.major_events)} events)")
        return True

    def save_batch(self, records: List[CaseRecord]) -> BatchResult:
        """
        Save a batch through the bulk path, falling back to single saves

        The fallback is not transactional: some records may be saved and others not.
        success + failed always equals len(records).
        """
        if not records:
            return BatchResult()

        logger.info(f"🚀 Batch saving {len(records)} cases...")

        try:
            statements = self.builder.build_batch(records)
            skipped = self.builder.skipped
            self.transport.bulk_load(statements)
            logger.info(f"✅ Batch complete: {len(records) - skipped} cases saved via bulk load")
            return BatchResult(success=len(records) - skipped, failed=skipped)

        except Exception as e:
            logger.error(f"❌ Bulk load failed: {e}")
            logger.info("🔄 Falling back to individual saves...")

        result = BatchResult()
        for record in records:
            if self.save_application(record):
                result.success += 1
            else:
                result.failed += 1

        logger.info(f"✅ Fallback complete: {result.success} saved, {result.failed} failed")
        return result

    def mark_not_found(self, number: int, year: int) -> bool:
        """Increment not_found_count for a case that is no longer on the site"""
        statement = self.builder.build_not_found(number, year)
        try:
            self.transport.execute(statement)
        except Exception as e:
            logger.error(f"❌ Failed to mark {number}/{year:02d} as not found: {e}")
            return False

        logger.debug(f"⚠️ Marked as not found: {number}/{year:02d}")
        return True

    def get_active_subscriptions(self) -> List[dict]:
        """Subscribed cases that are still open and not flagged for skipping"""
        sql = """SELECT DISTINCT
  s.case_id,
  s.application_number,
  a.last_major_event AS current_event
FROM subscriptions s
INNER JOIN applications a ON s.case_id = a.id
WHERE s.is_active = 1
  AND a.is_closed = 0
  AND a.skip_scraping = 0
ORDER BY s.application_number"""
        return self.transport.execute(Statement(sql))
