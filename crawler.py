#!/usr/bin/env python3
"""
Monthly crawler
Walks application numbers year by year until too many consecutive numbers are missing
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from batch_buffer import BatchBuffer
from errors import RecordNotFound
from models import BatchResult, CaseRecord, CrawlConfig, CrawlState, CrawlStats

logger = logging.getLogger(__name__)

FetchFunc = Callable[[int, int], Awaitable[Optional[CaseRecord]]]


class MonthlyCrawler:
    """
    Bulk crawl across an identifier space

    fetch(number, year) returns a CaseRecord, returns None (or raises RecordNotFound)
    when no case exists, and raises anything else on failure. Failures and misses
    both count towards the consecutive-skip limit that ends a year.
    """

    def __init__(self, fetch: FetchFunc, store, config: Optional[CrawlConfig] = None,
                 sleep: Callable[[float], Awaitable] = asyncio.sleep):
        self.fetch = fetch
        self.store = store
        self.config = (config or CrawlConfig()).validate()
        self.sleep = sleep
        self.buffer = BatchBuffer(self.config.batch_flush_attempts)
        self.stats = CrawlStats()
        self.state = CrawlState(year=self.config.start_year, number=self.config.start_number)
        self.stop_requested = False

    def stop(self):
        """Finish the current attempt, flush, and exit"""
        self.stop_requested = True

    async def run(self) -> CrawlStats:
        """Main crawl loop"""
        config = self.config
        state = self.state

        logger.info("🚀 Starting ECHR monthly crawl")
        logger.info("=" * 60)
        logger.info(f"Year range: {config.start_year:02d} to {config.max_year:02d}")
        logger.info(f"Max consecutive skips: {config.max_consecutive_skips}")
        logger.info(f"Flush every {config.batch_flush_attempts} attempts")
        logger.info("=" * 60)

        while state.year <= config.max_year and not self.stop_requested:
            logger.info(f"📅 Processing year: 20{state.year:02d} from number {state.number}")

            while not state.segment_done(config.max_consecutive_skips) and not self.stop_requested:
                await self.attempt(state)
                self._record_flush(self.buffer.maybe_flush(self.store))

                await self.sleep(config.politeness_delay_ms / 1000)

                if self.stats.total_checked % config.progress_every == 0:
                    self.print_progress()

            # Flush any remaining cases before moving to the next year
            self._record_flush(self.buffer.flush(self.store))
            if self.stop_requested:
                break

            logger.info(f"⏭️ Max consecutive skips reached for year {state.year:02d}, moving to next year...")
            state.next_year(config.start_number)

        self._record_flush(self.buffer.flush(self.store))
        self.store.rep_cache.clear()
        self.print_final_stats()
        return self.stats

    async def attempt(self, state: CrawlState):
        """Fetch one number and route the outcome to the buffer"""
        number, year = state.number, state.year
        self.stats.total_checked += 1
        logger.debug(f"[Check #{self.stats.total_checked}] {state.application_number}")

        try:
            record = await self.fetch(number, year)
        except RecordNotFound:
            record = None
        except Exception as e:
            logger.warning(f"❌ Error fetching {state.application_number}: {e}")
            self.stats.errors += 1
            self.buffer.on_fetch_failure()
            state.record_miss()
            logger.debug(f"⚠️ Skips: {state.consecutive_skips}/{self.config.max_consecutive_skips}")
            return

        if record is not None:
            self.stats.found += 1
            self.buffer.on_fetch_success(record)
            state.record_found()
            return

        self.stats.not_found += 1
        self.buffer.on_fetch_failure()
        self.store.mark_not_found(number, year)
        state.record_miss()
        logger.debug(f"⚠️ Skips: {state.consecutive_skips}/{self.config.max_consecutive_skips}")

    def _record_flush(self, result: BatchResult):
        if result.success or result.failed:
            self.stats.flushes += 1
            self.stats.saved += result.success
            self.stats.save_failed += result.failed

    def print_progress(self):
        logger.info("=" * 60)
        logger.info("📊 PROGRESS UPDATE")
        logger.info(f"Position: {self.state.application_number}")
        logger.info(f"Total checked: {self.stats.total_checked}")
        logger.info(f"✅ Found: {self.stats.found}")
        logger.info(f"❌ Not found: {self.stats.not_found}")
        logger.info(f"⚠️ Errors: {self.stats.errors}")
        logger.info("=" * 60)

    def print_final_stats(self):
        logger.info("=" * 60)
        logger.info("🎉 SCRAPING COMPLETE" if not self.stop_requested else "🛑 SCRAPING STOPPED")
        logger.info("=" * 60)
        logger.info(f"Total checked: {self.stats.total_checked}")
        logger.info(f"✅ Found: {self.stats.found}")
        logger.info(f"❌ Not found: {self.stats.not_found}")
        logger.info(f"⚠️ Errors: {self.stats.errors}")
        logger.info(f"💾 Saved: {self.stats.saved} ({self.stats.save_failed} failed, {self.stats.flushes} batches)")
        logger.info(f"📈 Success rate: {self.stats.success_rate}%")
        logger.info("=" * 60)
