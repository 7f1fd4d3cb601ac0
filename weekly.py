#!/usr/bin/env python3
"""
Weekly checker
Re-fetches only subscribed, still-open cases and records whether their latest event moved
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict

from config import WEEKLY_DELAY_MS
from errors import RecordNotFound

logger = logging.getLogger(__name__)


class WeeklyChecker:

    def __init__(self, fetch: Callable[[int, int], Awaitable], store,
                 delay_ms: int = WEEKLY_DELAY_MS,
                 sleep: Callable[[float], Awaitable] = asyncio.sleep):
        self.fetch = fetch
        self.store = store
        self.delay_ms = delay_ms
        self.sleep = sleep
        self.stats = {
            "total": 0,
            "updated": 0,
            "unchanged": 0,
            "not_found": 0,
            "errors": 0
        }

    async def run(self) -> Dict[str, int]:
        logger.info("🚀 Starting ECHR weekly check")
        subscribed = self.store.get_active_subscriptions()
        self.stats["total"] = len(subscribed)

        if not subscribed:
            logger.info("⚠️ No subscribed cases found. Nothing to check.")
            return self.stats

        logger.info(f"📊 Processing {len(subscribed)} cases...")

        for i, case in enumerate(subscribed, 1):
            application_number = case["application_number"]
            current_event = case.get("current_event")
            logger.info(f"[{i}/{len(subscribed)}] Checking: {application_number}")

            try:
                number, year = (int(part) for part in application_number.split("/"))
                try:
                    record = await self.fetch(number, year)
                except RecordNotFound:
                    record = None

                if record is None:
                    logger.info("   ⚠️ Not found on ECHR website")
                    self.stats["not_found"] += 1
                    self.store.mark_not_found(number, year)
                else:
                    if record.last_major_event != current_event:
                        logger.info(f"   🔔 EVENT CHANGED: {current_event} -> {record.last_major_event}")
                        self.stats["updated"] += 1
                    else:
                        logger.debug("   ✓ No change")
                        self.stats["unchanged"] += 1

                    # Always saved so last_checked_date moves and not_found_count resets
                    if not self.store.save_application(record):
                        self.stats["errors"] += 1

            except Exception as e:
                logger.error(f"   ❌ Error checking {application_number}: {e}")
                self.stats["errors"] += 1

            await self.sleep(self.delay_ms / 1000)

        self.print_stats()
        return self.stats

    def print_stats(self):
        logger.info("=" * 60)
        logger.info("🎉 WEEKLY CHECK COMPLETE")
        logger.info("=" * 60)
        logger.info(f"Total cases checked: {self.stats['total']}")
        logger.info(f"✅ Updated (changed): {self.stats['updated']}")
        logger.info(f"✓ Unchanged: {self.stats['unchanged']}")
        logger.info(f"⚠️ Not found: {self.stats['not_found']}")
        logger.info(f"❌ Errors: {self.stats['errors']}")
        logger.info("=" * 60)
