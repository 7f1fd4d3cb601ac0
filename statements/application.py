#!/usr/bin/env python3
"""
Application Statement Handler
Main row (one per application number) that events and representatives hang off
"""

from typing import Dict, Any, Optional
import logging

from config import NOT_FOUND_SKIP_THRESHOLD
from errors import InvalidRecordError
from models import CaseRecord, Statement
from normalizer import normalize_date, derive_jurisdiction, is_closed
from .representative import ID_BY_NAME_SUBQUERY, RepresentativeStatements

logger = logging.getLogger(__name__)

# Resolves an application id by number at execution time
ID_BY_NUMBER_SUBQUERY = "(SELECT id FROM applications WHERE application_number = ?)"

UPSERT_SQL = """INSERT INTO applications (
  application_number, application_title, country, date_introduction,
  representative_id, representative_name, last_major_event, last_major_event_date,
  is_closed, not_found_count, last_checked_date, updated_at
) VALUES (?, ?, ?, ?, {representative_id}, ?, ?, ?, ?, 0, DATE('now'), CURRENT_TIMESTAMP)
ON CONFLICT(application_number) DO UPDATE SET
  application_title = excluded.application_title,
  country = excluded.country,
  date_introduction = excluded.date_introduction,
  representative_id = excluded.representative_id,
  representative_name = excluded.representative_name,
  last_major_event = excluded.last_major_event,
  last_major_event_date = excluded.last_major_event_date,
  is_closed = excluded.is_closed,
  not_found_count = 0,
  last_checked_date = DATE('now'),
  updated_at = CURRENT_TIMESTAMP"""

NOT_FOUND_SQL = """UPDATE applications SET
  not_found_count = not_found_count + 1,
  last_checked_date = DATE('now'),
  skip_scraping = CASE WHEN not_found_count + 1 >= ? THEN 1 ELSE skip_scraping END,
  updated_at = CURRENT_TIMESTAMP
WHERE application_number = ?"""


class ApplicationStatements:
    """
    Handles the applications table
    Upserts overwrite every derived field and reset not_found_count; skip_scraping is never cleared
    """

    def __init__(self):
        self.processed_applications = {}

    def reset(self):
        """Reset local tracking for new batch"""
        self.processed_applications = {}

    def extract_application_data(self, record: CaseRecord) -> Dict[str, Any]:
        """
        Extract and normalize application fields from a fetched record

        Args:
            record: Fetched case record

        Returns:
            Dictionary of column values

        Raises:
            InvalidRecordError: application number or title missing
        """
        application_number = (record.application_number or '').strip()
        title = (record.application_title or '').strip()

        if not application_number:
            raise InvalidRecordError("Record has no application number")
        if not title:
            raise InvalidRecordError(f"Application {application_number} has no title")

        representative = RepresentativeStatements.extract_representative(record)
        last_event = record.last_major_event

        application_data = {
            'application_number': application_number,
            'application_title': title,
            'country': derive_jurisdiction(title),
            'date_introduction': normalize_date(record.date_introduction),
            'representative_name': representative,
            'last_major_event': last_event,
            'last_major_event_date': normalize_date(record.last_major_event_date),
            'is_closed': is_closed(last_event)
        }

        if application_data['is_closed']:
            logger.debug(f"🔒 {application_number} will be marked as closed")

        logger.debug(f"Extracted application: {application_number} ({application_data['country']})")
        return application_data

    def build_upsert(
        self,
        application_data: Dict[str, Any],
        representative_id: Optional[int] = None,
        resolve_representative_by_name: bool = False
    ) -> Statement:
        """
        Build the insert-or-update for one application

        Args:
            application_data: Output of extract_application_data
            representative_id: Known representative id (single-record path)
            resolve_representative_by_name: Look the id up by name inside the statement (batch path)

        Returns:
            Statement
        """
        name = application_data['representative_name']

        if resolve_representative_by_name and name:
            representative_expr = ID_BY_NAME_SUBQUERY
            representative_value = name
        else:
            representative_expr = "?"
            representative_value = representative_id

        sql = UPSERT_SQL.format(representative_id=representative_expr)
        params = (
            application_data['application_number'],
            application_data['application_title'],
            application_data['country'],
            application_data['date_introduction'],
            representative_value,
            name,
            application_data['last_major_event'],
            application_data['last_major_event_date'],
            1 if application_data['is_closed'] else 0,
        )

        self.processed_applications[application_data['application_number']] = True
        return Statement(sql, params)

    @staticmethod
    def build_not_found(application_number: str) -> Statement:
        """Increment not_found_count, flagging the case for skipping at the threshold"""
        return Statement(NOT_FOUND_SQL, (NOT_FOUND_SKIP_THRESHOLD, application_number))

    def get_stats(self) -> Dict[str, int]:
        """Get statistics about processed applications"""
        return {
            "total_applications": len(self.processed_applications)
        }
