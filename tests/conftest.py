import os
import sys

import pytest

# Ensure the project root is on sys.path so the top-level modules import
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from case_store import CaseStore  # noqa: E402
from models import CaseRecord, MajorEvent  # noqa: E402
from schema import apply_schema  # noqa: E402
from sqlite_client import SQLiteTransport  # noqa: E402


def make_record(number="152/18", title="Zhukov v. Russia", representative="Ivan Petrov",
                events=None, date_introduction="03/01/2018"):
    if events is None:
        events = [
            ("Application lodged", "03/01/2018"),
            ("Communicated to the Government", "14/05/2019"),
            ("Judgment finished", "2/2/2021"),
        ]
    return CaseRecord(
        application_number=number,
        application_title=title,
        date_introduction=date_introduction,
        representative=representative,
        major_events=[MajorEvent(description=d, event_date=dt) for d, dt in events],
    )


@pytest.fixture
def transport():
    t = SQLiteTransport(":memory:")
    assert apply_schema(t, retry=False)
    yield t
    t.close()


@pytest.fixture
def store(transport):
    return CaseStore(transport)


def fetch_one(transport, sql, params=()):
    cursor = transport.conn.execute(sql, params)
    row = cursor.fetchone()
    return dict(row) if row else None


def fetch_all(transport, sql, params=()):
    return [dict(row) for row in transport.conn.execute(sql, params).fetchall()]
