#!/usr/bin/env python3
"""
Run a crawl from the command line

Usage:
    python3 run_scraper.py monthly
    python3 run_scraper.py monthly --start-year 19 --max-year 19 --start-number 37816
    python3 run_scraper.py weekly
"""

import argparse
import asyncio
import logging
import sys

from config import LOG_FILE, LOG_LEVEL, LOG_FORMAT
from errors import FatalConfigurationError
from models import CrawlConfig
from monitor import run_monthly_crawl, run_weekly_check

# Setup logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format=LOG_FORMAT,
    handlers=[
        logging.FileHandler(LOG_FILE),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


def build_config(args: argparse.Namespace) -> CrawlConfig:
    overrides = {
        "start_year": args.start_year,
        "max_year": args.max_year,
        "max_consecutive_skips": args.max_skips,
        "start_number": args.start_number,
        "batch_flush_attempts": args.flush_attempts,
        "politeness_delay_ms": args.delay_ms,
    }
    return CrawlConfig(**{k: v for k, v in overrides.items() if v is not None}).validate()


def main():
    parser = argparse.ArgumentParser(
        description='Crawl the ECHR application lookup into the case database'
    )
    parser.add_argument(
        'mode',
        choices=['monthly', 'weekly'],
        help='monthly: walk every number of every year; weekly: re-check subscribed cases'
    )
    parser.add_argument('--start-year', type=int, help='First year, two digits (e.g. 17)')
    parser.add_argument('--max-year', type=int, help='Last year, two digits (inclusive)')
    parser.add_argument('--max-skips', type=int, help='Consecutive misses before moving to the next year')
    parser.add_argument('--start-number', type=int, help='First application number of each year')
    parser.add_argument('--flush-attempts', type=int, help='Fetch attempts between batch writes')
    parser.add_argument('--delay-ms', type=int, help='Pause between fetches in milliseconds')

    args = parser.parse_args()

    try:
        if args.mode == 'monthly':
            config = build_config(args)
            logger.info("📋 Configuration:")
            logger.info(f"   Years: 20{config.start_year:02d} to 20{config.max_year:02d}")
            logger.info(f"   Max skips: {config.max_consecutive_skips}")
            logger.info(f"   Starting from case: {config.start_number}")
            asyncio.run(run_monthly_crawl(config))
        else:
            asyncio.run(run_weekly_check())

    except FatalConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("✋ Interrupted - unflushed cases in the current batch were not saved")
        sys.exit(130)
    except Exception as e:
        logger.error(f"❌ Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
