#!/usr/bin/env python3
"""
SQL Schema Definition
Tables for applications, their major events, representatives and subscriptions
"""

import logging
import time

from config import MAX_RETRIES, RETRY_DELAY
from models import Statement

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    '''
CREATE TABLE IF NOT EXISTS representatives (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL UNIQUE,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
)''',
    '''
CREATE TABLE IF NOT EXISTS applications (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  application_number TEXT NOT NULL UNIQUE,
  application_title TEXT NOT NULL,
  country TEXT,
  date_introduction TEXT,
  representative_id INTEGER REFERENCES representatives(id),
  representative_name TEXT,
  last_major_event TEXT,
  last_major_event_date TEXT,
  is_closed INTEGER NOT NULL DEFAULT 0,
  not_found_count INTEGER NOT NULL DEFAULT 0,
  skip_scraping INTEGER NOT NULL DEFAULT 0,
  last_checked_date TEXT,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  updated_at TEXT DEFAULT CURRENT_TIMESTAMP
)''',
    '''
CREATE TABLE IF NOT EXISTS events (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  application_id INTEGER NOT NULL REFERENCES applications(id) ON DELETE CASCADE,
  event_date TEXT,
  description TEXT NOT NULL,
  is_last_event INTEGER NOT NULL DEFAULT 0
)''',
    '''
CREATE TABLE IF NOT EXISTS subscriptions (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  case_id INTEGER NOT NULL REFERENCES applications(id) ON DELETE CASCADE,
  application_number TEXT NOT NULL,
  is_active INTEGER NOT NULL DEFAULT 1,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP
)''',
    "CREATE INDEX IF NOT EXISTS idx_events_application ON events(application_id)",
    "CREATE INDEX IF NOT EXISTS idx_subscriptions_active ON subscriptions(is_active)",
]


def apply_schema(transport, retry: bool = True) -> bool:
    """Create any missing tables, retrying with exponential backoff"""
    retries = 0
    delay = RETRY_DELAY

    while True:
        try:
            for sql in SCHEMA_STATEMENTS:
                transport.execute(Statement(sql.strip()))
            logger.info("✅ Schema applied successfully")
            return True

        except Exception as e:
            retries += 1
            if not retry or retries >= MAX_RETRIES:
                logger.error(f"❌ Error applying schema after {retries} attempts: {e}")
                return False

            logger.warning(f"⚠️ Failed to apply schema (attempt {retries}/{MAX_RETRIES}): {e}")
            logger.info(f"🔄 Retrying in {delay} seconds...")
            time.sleep(delay)
            delay *= 2  # Exponential backoff
