#!/usr/bin/env python3
"""
FastAPI route handlers
"""

import logging
from typing import Optional

from fastapi import BackgroundTasks, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import API_TITLE, API_VERSION
from errors import FatalConfigurationError
from models import CrawlConfig, monitor_state
from monitor import run_monthly_crawl, run_weekly_check

logger = logging.getLogger(__name__)


class CrawlRequest(BaseModel):
    start_year: Optional[int] = None
    max_year: Optional[int] = None
    max_consecutive_skips: Optional[int] = None
    start_number: Optional[int] = None
    batch_flush_attempts: Optional[int] = None
    politeness_delay_ms: Optional[int] = None


async def root():
    """Root endpoint with API information"""
    return {
        "message": API_TITLE,
        "version": API_VERSION,
        "endpoints": {
            "/status": "Get current crawl status",
            "/start": "Start a monthly crawl",
            "/stop": "Stop the running crawl after flushing its buffer",
            "/weekly": "Re-check subscribed cases now",
            "/stats": "Get crawl statistics"
        }
    }


async def get_status():
    """Get current crawl status"""
    crawler = monitor_state["crawler"]
    return {
        "is_running": monitor_state["is_running"],
        "started_at": monitor_state["started_at"],
        "finished_at": monitor_state["finished_at"],
        "position": crawler.state.application_number if crawler else None,
        "buffered_cases": len(crawler.buffer) if crawler else 0,
        "recent_errors": monitor_state["errors"][-5:]
    }


async def start_crawl(background_tasks: BackgroundTasks, request: Optional[CrawlRequest] = None):
    """Start a monthly crawl in the background"""
    if monitor_state["is_running"]:
        return JSONResponse(
            status_code=400,
            content={"error": "A crawl is already running"}
        )

    overrides = {k: v for k, v in (request.model_dump() if request else {}).items() if v is not None}
    try:
        config = CrawlConfig(**overrides).validate()
    except FatalConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # Mark as running now so a second request cannot slip in before the task starts
    monitor_state["is_running"] = True
    background_tasks.add_task(crawl_in_background, config)
    logger.info("✅ Monthly crawl scheduled")

    return {
        "message": "Monthly crawl started",
        "config": vars(config)
    }


async def crawl_in_background(config: CrawlConfig):
    """Background task wrapper; failures are already recorded in monitor_state"""
    try:
        await run_monthly_crawl(config)
    except Exception as e:
        logger.error(f"❌ Background crawl ended with error: {e}")


async def stop_crawl():
    """Stop the running crawl"""
    crawler = monitor_state["crawler"]
    if not monitor_state["is_running"] or crawler is None:
        return JSONResponse(
            status_code=400,
            content={"error": "No crawl is running"}
        )

    crawler.stop()
    logger.info("Crawl stop requested by user")

    return {
        "message": "Crawl will stop after the current case",
        "stats": crawler.stats.as_dict()
    }


async def weekly_check():
    """Run the subscription check immediately"""
    try:
        stats = await run_weekly_check()
    except Exception as e:
        logger.error(f"❌ Error in weekly check: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "message": "Weekly check completed",
        "stats": stats
    }


async def get_stats():
    """Get detailed statistics"""
    crawler = monitor_state["crawler"]
    return {
        "monthly": crawler.stats.as_dict() if crawler else None,
        "representative_cache": crawler.store.rep_cache.get_stats() if crawler else None,
        "weekly": monitor_state["last_weekly"]
    }
