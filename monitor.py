#!/usr/bin/env python3
"""
Crawl runners
Wire the fetcher, store and crawlers together; shared by the API and the command line
"""

import logging
from datetime import datetime
from typing import Dict, Optional

from case_store import CaseStore, create_transport
from crawler import MonthlyCrawler
from fetcher import EchrFetcher
from models import CrawlConfig, CrawlStats, monitor_state
from schema import apply_schema
from weekly import WeeklyChecker

logger = logging.getLogger(__name__)


def open_store() -> CaseStore:
    """Connect to the configured storage backend and make sure the tables exist"""
    transport = create_transport()
    if not apply_schema(transport, retry=True):
        raise RuntimeError("Failed to apply schema after retries")
    return CaseStore(transport)


async def run_monthly_crawl(config: Optional[CrawlConfig] = None) -> CrawlStats:
    """Run one full monthly crawl, tracked in monitor_state"""
    config = (config or CrawlConfig()).validate()

    monitor_state["is_running"] = True
    monitor_state["started_at"] = datetime.utcnow().isoformat()
    monitor_state["finished_at"] = None

    try:
        store = open_store()
        async with EchrFetcher() as fetcher:
            crawler = MonthlyCrawler(fetcher.fetch, store, config)
            monitor_state["crawler"] = crawler
            return await crawler.run()

    except Exception as e:
        logger.error(f"Error in monthly crawl: {e}")
        monitor_state["errors"].append({
            "timestamp": datetime.utcnow().isoformat(),
            "error": str(e)
        })
        # Keep only last 10 errors
        monitor_state["errors"] = monitor_state["errors"][-10:]
        raise

    finally:
        monitor_state["is_running"] = False
        monitor_state["finished_at"] = datetime.utcnow().isoformat()


async def run_weekly_check() -> Dict[str, int]:
    """Re-check every subscribed case once"""
    store = open_store()

    async with EchrFetcher() as fetcher:
        stats = await WeeklyChecker(fetcher.fetch, store).run()

    monitor_state["last_weekly"] = {
        "finished_at": datetime.utcnow().isoformat(),
        "stats": stats
    }
    return stats
