#!/usr/bin/env python3
"""
Event Statement Handler
Handles: events --[application_id]--> applications
"""

from typing import Dict, List, Optional, Tuple
import logging

from config import EVENT_ROWS_PER_INSERT
from errors import InvalidRecordError
from models import CaseRecord, Statement
from normalizer import normalize_date
from .application import ID_BY_NUMBER_SUBQUERY

logger = logging.getLogger(__name__)


class EventStatements:
    """
    Handles the major events of an application
    Events are never patched: every refetch deletes them all and reinserts the fetched list
    """

    def __init__(self):
        self.event_sets = 0
        self.total_events = 0

    def reset(self):
        """Reset local tracking for new batch"""
        self.event_sets = 0
        self.total_events = 0

    @staticmethod
    def extract_events(record: CaseRecord) -> List[Tuple[Optional[str], str, int]]:
        """
        Extract events in page order

        Returns:
            List of (event_date, description, is_last_event)

        Raises:
            InvalidRecordError: an event has no description
        """
        events = []
        count = len(record.major_events)

        for i, event in enumerate(record.major_events):
            description = (event.description or '').strip()
            if not description:
                raise InvalidRecordError(
                    f"Event {i + 1} of {record.application_number} has no description"
                )
            is_last_event = 1 if i == count - 1 else 0
            events.append((normalize_date(event.event_date), description, is_last_event))

        logger.debug(f"Extracted {len(events)} events for {record.application_number}")
        return events

    @staticmethod
    def build_delete(application_number: str) -> Statement:
        sql = f"DELETE FROM events WHERE application_id = {ID_BY_NUMBER_SUBQUERY}"
        return Statement(sql, (application_number,))

    def build_inserts(
        self,
        application_number: str,
        events: List[Tuple[Optional[str], str, int]]
    ) -> List[Statement]:
        """
        Build multi-row inserts for all events of an application, in page order

        Each insert carries at most EVENT_ROWS_PER_INSERT rows.

        Returns:
            List of statements, empty when the case has no events
        """
        self.event_sets += 1
        statements = []

        for start in range(0, len(events), EVENT_ROWS_PER_INSERT):
            chunk = events[start:start + EVENT_ROWS_PER_INSERT]
            row = f"({ID_BY_NUMBER_SUBQUERY}, ?, ?, ?)"
            values = ",\n  ".join(row for _ in chunk)
            sql = f"INSERT INTO events (application_id, event_date, description, is_last_event) VALUES\n  {values}"

            params = []
            for event_date, description, is_last_event in chunk:
                params.extend([application_number, event_date, description, is_last_event])
            statements.append(Statement(sql, tuple(params)))

        self.total_events += len(events)
        return statements

    def build_replace(
        self,
        application_number: str,
        events: List[Tuple[Optional[str], str, int]]
    ) -> List[Statement]:
        """Delete-then-insert statements mirroring the fetched event list"""
        statements = [self.build_delete(application_number)]
        statements.extend(self.build_inserts(application_number, events))
        return statements

    def get_stats(self) -> Dict[str, int]:
        """Get statistics about processed events"""
        return {
            "total_event_sets": self.event_sets,
            "total_events": self.total_events
        }
