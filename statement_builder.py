#!/usr/bin/env python3
"""
Statement Builder
Orchestrates the table handlers to build idempotent upsert scripts for fetched cases
"""

from typing import Dict, List, Any, Optional
import logging

from errors import InvalidRecordError
from models import CaseRecord, Statement
from statements import ApplicationStatements, EventStatements, RepresentativeStatements

logger = logging.getLogger(__name__)


class StatementBuilder:
    """
    Builds parameterized SQL for case records using one handler per table
    Re-running any built script leaves the database in the same state
    """

    def __init__(self):
        self.application_handler = ApplicationStatements()
        self.event_handler = EventStatements()
        self.representative_handler = RepresentativeStatements()
        self.skipped = 0

    def reset(self):
        self.application_handler.reset()
        self.event_handler.reset()
        self.representative_handler.reset()
        self.skipped = 0

    def build_single(self, record: CaseRecord, representative_id: Optional[int] = None) -> List[Statement]:
        """
        Build statements for one record with an already resolved representative id

        Args:
            record: Fetched case record
            representative_id: Id of the record's representative, if any

        Returns:
            [application upsert, event delete, event inserts (when events exist)]

        Raises:
            InvalidRecordError: record is missing a required field
        """
        application_data = self.application_handler.extract_application_data(record)
        events = self.event_handler.extract_events(record)

        statements = [self.application_handler.build_upsert(application_data, representative_id)]
        statements.extend(
            self.event_handler.build_replace(application_data['application_number'], events)
        )
        return statements

    def build_batch(self, records: List[CaseRecord]) -> List[Statement]:
        """
        Build one script for a whole batch

        Order: representative insert, all application upserts, all event delete/insert pairs.
        Upserts find representatives by name and events find applications by number,
        so each stage only depends on the ones before it.

        Args:
            records: Buffered case records, in fetch order

        Returns:
            List of statements
        """
        logger.info(f"Building statements for {len(records)} cases...")
        self.reset()

        application_statements = []
        event_statements = []

        for record in records:
            try:
                application_data = self.application_handler.extract_application_data(record)
                events = self.event_handler.extract_events(record)
            except InvalidRecordError as e:
                self.skipped += 1
                logger.warning(f"⚠️ Skipping case {record.application_number} in batch: {e}")
                continue

            self.representative_handler.track(application_data['representative_name'])
            application_statements.append(
                self.application_handler.build_upsert(application_data, resolve_representative_by_name=True)
            )
            event_statements.extend(
                self.event_handler.build_replace(application_data['application_number'], events)
            )

        statements = []
        representative_insert = self.representative_handler.build_bulk_insert()
        if representative_insert:
            statements.append(representative_insert)
        statements.extend(application_statements)
        statements.extend(event_statements)

        stats = self.get_stats()
        logger.info(f"📝 Built SQL batch:")
        logger.info(f"   👥 Representatives: {stats['representatives']}")
        logger.info(f"   📁 Applications: {stats['applications']}")
        logger.info(f"   📋 Event sets: {stats['event_sets']} ({stats['events']} events)")
        if self.skipped:
            logger.info(f"   ⚠️ Skipped: {self.skipped}")

        return statements

    def build_not_found(self, number: int, year: int) -> Statement:
        return self.application_handler.build_not_found(f"{number}/{year:02d}")

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics from all handlers for the last built batch

        Returns:
            Dictionary with statistics from each handler
        """
        event_stats = self.event_handler.get_stats()
        return {
            "representatives": self.representative_handler.get_stats()['total_representatives'],
            "applications": self.application_handler.get_stats()['total_applications'],
            "event_sets": event_stats['total_event_sets'],
            "events": event_stats['total_events'],
            "skipped": self.skipped
        }


def sql_literal(value: Any) -> str:
    """Render one bound value as a SQLite literal"""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return repr(value)
    text = str(value).replace("'", "''")
    return f"'{text}'"


def render_statement(statement: Statement) -> str:
    """Inline the bound values of a statement, left to right"""
    parts = statement.sql.split("?")
    if len(parts) - 1 != len(statement.params):
        raise ValueError(
            f"Statement expects {len(parts) - 1} values, got {len(statement.params)}"
        )

    rendered = [parts[0]]
    for value, part in zip(statement.params, parts[1:]):
        rendered.append(sql_literal(value))
        rendered.append(part)
    return "".join(rendered)


def render_script(statements: List[Statement]) -> str:
    """
    Render statements into a SQL file for bulk import
    Only the import path needs literal SQL; everything else executes with bound values
    """
    return "\n".join(render_statement(s).rstrip().rstrip(";") + ";" for s in statements)

