#!/usr/bin/env python3
"""
Main FastAPI application - Entry point
"""

import logging
from fastapi import FastAPI

from config import API_HOST, API_PORT, API_TITLE, API_DESCRIPTION, API_VERSION, LOG_FILE, LOG_LEVEL, LOG_FORMAT
from config import STORAGE_BACKEND, START_YEAR, MAX_YEAR, MAX_CONSECUTIVE_SKIPS, BATCH_FLUSH_ATTEMPTS
from models import monitor_state
from api_endpoints import root, get_status, start_crawl, stop_crawl, weekly_check, get_stats

# === Setup Logging ===
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format=LOG_FORMAT,
    handlers=[
        logging.FileHandler(LOG_FILE),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

# === FastAPI App ===
app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION
)

# === Register Routes ===
app.add_api_route("/", root, methods=["GET"])
app.add_api_route("/status", get_status, methods=["GET"])
app.add_api_route("/start", start_crawl, methods=["POST"])
app.add_api_route("/stop", stop_crawl, methods=["POST"])
app.add_api_route("/weekly", weekly_check, methods=["POST"])
app.add_api_route("/stats", get_stats, methods=["GET"])


@app.on_event("startup")
async def startup_event():
    """Run on application startup"""
    logger.info("=" * 70)
    logger.info(f"🚀 {API_TITLE} Started")
    logger.info("=" * 70)
    logger.info(f"Storage: {STORAGE_BACKEND}")
    logger.info(f"Default years: {START_YEAR:02d} to {MAX_YEAR:02d}")
    logger.info(f"Max consecutive skips: {MAX_CONSECUTIVE_SKIPS}")
    logger.info(f"Flush every {BATCH_FLUSH_ATTEMPTS} attempts")
    logger.info("=" * 70)


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown"""
    crawler = monitor_state["crawler"]
    if crawler and monitor_state["is_running"]:
        crawler.stop()
    logger.info("=" * 70)
    logger.info(f"🛑 {API_TITLE} Stopped")
    if crawler:
        logger.info(f"Cases found in last crawl: {crawler.stats.found}")
    logger.info("=" * 70)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)
