#!/usr/bin/env python3
"""
Representative Statement Handler
Handles: applications.representative_id --> representatives
"""

from typing import Dict, Optional
import logging

from models import CaseRecord, Statement

logger = logging.getLogger(__name__)

# Resolves a representative id by name at execution time
ID_BY_NAME_SUBQUERY = "(SELECT id FROM representatives WHERE name = ? LIMIT 1)"


class RepresentativeStatements:
    """
    Handles representative rows referenced by applications
    Representatives are deduplicated by name; rows are created lazily with INSERT OR IGNORE
    """

    def __init__(self):
        self.local_representatives = {}

    def reset(self):
        """Reset local tracking for new batch"""
        self.local_representatives = {}

    @staticmethod
    def extract_representative(record: CaseRecord) -> Optional[str]:
        """
        Extract the representative name from a fetched record

        Returns:
            Stripped name, or None when the case has no representative
        """
        name = (record.representative or '').strip()
        return name if name else None

    def track(self, name: Optional[str]):
        """Remember a name for the batch insert (first-seen order is kept)"""
        if name and name not in self.local_representatives:
            self.local_representatives[name] = len(self.local_representatives)

    def build_bulk_insert(self) -> Optional[Statement]:
        """
        Build one multi-row insert for every representative tracked in this batch

        Returns:
            Statement, or None when the batch has no representatives
        """
        names = list(self.local_representatives)
        if not names:
            return None

        values = ",\n  ".join("(?)" for _ in names)
        sql = f"INSERT OR IGNORE INTO representatives (name) VALUES\n  {values}"

        logger.debug(f"Built representative insert for {len(names)} names")
        return Statement(sql, tuple(names))

    @staticmethod
    def build_lookup(name: str) -> Statement:
        return Statement("SELECT id FROM representatives WHERE name = ?", (name,))

    @staticmethod
    def build_insert(name: str) -> Statement:
        return Statement("INSERT OR IGNORE INTO representatives (name) VALUES (?)", (name,))

    def get_stats(self) -> Dict[str, int]:
        """Get statistics about tracked representatives"""
        return {
            "total_representatives": len(self.local_representatives)
        }
