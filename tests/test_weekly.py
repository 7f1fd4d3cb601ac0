"""Tests for the weekly re-check of subscribed cases."""

import asyncio

from conftest import make_record, fetch_one
from errors import FetchError
from weekly import WeeklyChecker

OPEN_EVENTS = [("Application lodged", "03/01/2020")]
MOVED_EVENTS = OPEN_EVENTS + [("Communicated to the Government", "10/02/2021")]


def subscribe(transport, number, active=1):
    transport.conn.execute(
        "INSERT INTO subscriptions (case_id, application_number, is_active) "
        "SELECT id, application_number, ? FROM applications WHERE application_number = ?",
        (active, number),
    )
    transport.conn.commit()


def application(transport, number):
    return fetch_one(transport, "SELECT * FROM applications WHERE application_number = ?", (number,))


class FakeFetch:
    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls = []

    async def __call__(self, number, year):
        self.calls.append((number, year))
        outcome = self.outcomes.get((number, year))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


async def no_sleep(seconds):
    return None


def run_check(fetch, store):
    return asyncio.run(WeeklyChecker(fetch, store, delay_ms=0, sleep=no_sleep).run())


class TestWeeklyCheck:

    def setup_cases(self, store, transport):
        for number in ("1/20", "2/20", "3/20", "4/20", "6/20"):
            store.save_application(make_record(number, events=OPEN_EVENTS))
        store.save_application(make_record("5/20"))  # closed

        for number in ("1/20", "2/20", "3/20", "4/20", "5/20"):
            subscribe(transport, number)
        subscribe(transport, "6/20", active=0)

    def test_outcomes_are_counted(self, store, transport):
        self.setup_cases(store, transport)
        fetch = FakeFetch({
            (1, 20): make_record("1/20", events=MOVED_EVENTS),
            (2, 20): make_record("2/20", events=OPEN_EVENTS),
            (3, 20): None,
            (4, 20): FetchError("page timeout"),
        })

        stats = run_check(fetch, store)

        assert stats == {"total": 4, "updated": 1, "unchanged": 1, "not_found": 1, "errors": 1}
        assert sorted(fetch.calls) == [(1, 20), (2, 20), (3, 20), (4, 20)]

    def test_changes_are_persisted(self, store, transport):
        self.setup_cases(store, transport)
        fetch = FakeFetch({
            (1, 20): make_record("1/20", events=MOVED_EVENTS),
            (2, 20): make_record("2/20", events=OPEN_EVENTS),
            (3, 20): None,
        })

        run_check(fetch, store)

        assert application(transport, "1/20")["last_major_event"] == "Communicated to the Government"
        assert application(transport, "3/20")["not_found_count"] == 1
        assert application(transport, "2/20")["last_checked_date"] is not None

    def test_skipped_cases_are_not_checked(self, store, transport):
        store.save_application(make_record("1/20", events=OPEN_EVENTS))
        subscribe(transport, "1/20")
        for _ in range(60):
            store.mark_not_found(1, 20)

        fetch = FakeFetch({})
        stats = run_check(fetch, store)

        assert stats["total"] == 0
        assert fetch.calls == []

    def test_no_subscriptions(self, store):
        stats = run_check(FakeFetch({}), store)
        assert stats == {"total": 0, "updated": 0, "unchanged": 0, "not_found": 0, "errors": 0}
