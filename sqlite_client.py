#!/usr/bin/env python3
"""
SQLite client operations
Local storage transport with the same execute / bulk_load surface as the D1 client
"""

import sqlite3
import logging
from typing import Dict, List, Any

from config import SQLITE_PATH
from errors import BulkLoadError
from models import Statement

logger = logging.getLogger(__name__)


class SQLiteTransport:
    """Runs statements against a SQLite file (or ":memory:")"""

    def __init__(self, path: str = SQLITE_PATH):
        self.path = path
        self.conn = sqlite3.connect(path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        logger.info(f"✅ Connected to SQLite database: {path}")

    def execute(self, statement: Statement) -> List[Dict[str, Any]]:
        """Execute one statement and commit; raises sqlite3.Error on failure"""
        try:
            cursor = self.conn.execute(statement.sql, statement.params)
            rows = [dict(row) for row in cursor.fetchall()]
            self.conn.commit()
            return rows
        except sqlite3.Error:
            self.conn.rollback()
            raise

    def bulk_load(self, statements: List[Statement]) -> bool:
        """Execute a whole script in one transaction"""
        logger.info(f"📤 Loading {len(statements)} statements into SQLite...")
        try:
            with self.conn:
                for statement in statements:
                    self.conn.execute(statement.sql, statement.params)
        except sqlite3.Error as e:
            raise BulkLoadError(f"SQLite bulk load failed: {e}") from e

        logger.info("✅ Bulk load complete")
        return True

    def close(self):
        self.conn.close()
