"""Tests for persistence against an in-memory SQLite database."""

import sqlite3

import pytest

from case_store import CaseStore, create_transport
from conftest import make_record, fetch_one, fetch_all
from errors import BulkLoadError, FatalConfigurationError
from models import CaseRecord, Statement

APPLICATION_COLUMNS = (
    "application_number, application_title, country, date_introduction, representative_id, "
    "representative_name, last_major_event, last_major_event_date, is_closed, not_found_count, skip_scraping"
)


def application_row(transport, number):
    return fetch_one(transport, f"SELECT {APPLICATION_COLUMNS} FROM applications WHERE application_number = ?", (number,))


def event_rows(transport, number):
    return fetch_all(
        transport,
        "SELECT e.event_date, e.description, e.is_last_event FROM events e "
        "JOIN applications a ON a.id = e.application_id WHERE a.application_number = ? ORDER BY e.id",
        (number,),
    )


class FailingBulkTransport:
    """Real SQLite execution, but the bulk path always fails"""

    def __init__(self, inner):
        self.inner = inner
        self.bulk_calls = 0

    def execute(self, statement):
        return self.inner.execute(statement)

    def bulk_load(self, statements):
        self.bulk_calls += 1
        raise BulkLoadError("import API unavailable")


class TestSaveApplication:

    def test_saves_case_events_and_representative(self, store, transport):
        assert store.save_application(make_record())

        row = application_row(transport, "152/18")
        assert row["country"] == "Russia"
        assert row["date_introduction"] == "2018-01-03"
        assert row["representative_name"] == "Ivan Petrov"
        assert row["last_major_event"] == "Judgment finished"
        assert row["last_major_event_date"] == "2021-02-02"
        assert row["is_closed"] == 1
        assert row["not_found_count"] == 0

        rep = fetch_one(transport, "SELECT id FROM representatives WHERE name = ?", ("Ivan Petrov",))
        assert row["representative_id"] == rep["id"]

        assert event_rows(transport, "152/18") == [
            {"event_date": "2018-01-03", "description": "Application lodged", "is_last_event": 0},
            {"event_date": "2019-05-14", "description": "Communicated to the Government", "is_last_event": 0},
            {"event_date": "2021-02-02", "description": "Judgment finished", "is_last_event": 1},
        ]

    def test_upsert_is_idempotent(self, store, transport):
        record = make_record()
        store.save_application(record)
        first_app, first_events = application_row(transport, "152/18"), event_rows(transport, "152/18")

        store.save_application(record)

        assert application_row(transport, "152/18") == first_app
        assert event_rows(transport, "152/18") == first_events
        assert fetch_one(transport, "SELECT COUNT(*) AS n FROM applications")["n"] == 1
        assert fetch_one(transport, "SELECT COUNT(*) AS n FROM representatives")["n"] == 1

    def test_refetch_mirrors_new_event_list(self, store, transport):
        store.save_application(make_record())
        store.save_application(make_record(events=[("Application lodged", "03/01/2018")]))

        assert event_rows(transport, "152/18") == [
            {"event_date": "2018-01-03", "description": "Application lodged", "is_last_event": 1},
        ]
        row = application_row(transport, "152/18")
        assert row["last_major_event"] == "Application lodged"
        assert row["is_closed"] == 0

    def test_refetch_with_no_events_clears_them(self, store, transport):
        store.save_application(make_record())
        store.save_application(make_record(events=[]))

        assert event_rows(transport, "152/18") == []
        row = application_row(transport, "152/18")
        assert row["last_major_event"] is None
        assert row["last_major_event_date"] is None

    def test_long_event_list_is_stored_in_order(self, store, transport):
        events = [(f"Event {i}", "01/02/2020") for i in range(30)]

        assert store.save_application(make_record(events=events))

        rows = event_rows(transport, "152/18")
        assert [r["description"] for r in rows] == [f"Event {i}" for i in range(30)]
        assert [r["is_last_event"] for r in rows] == [0] * 29 + [1]

    def test_representative_removed_on_refetch(self, store, transport):
        store.save_application(make_record())
        store.save_application(make_record(representative=None))

        row = application_row(transport, "152/18")
        assert row["representative_id"] is None
        assert row["representative_name"] is None

    def test_representative_cache_is_used(self, store, transport):
        store.save_application(make_record("1/20"))
        store.save_application(make_record("2/20"))

        assert "Ivan Petrov" in store.rep_cache
        assert store.rep_cache.get_stats()["hits"] >= 1

    def test_invalid_record_reports_failure(self, store, transport):
        assert store.save_application(CaseRecord(application_number="9/20", application_title="")) is False
        assert application_row(transport, "9/20") is None


class TestNotFound:

    def test_counter_increments_and_resets(self, store, transport):
        store.save_application(make_record())

        for expected in (1, 2, 3):
            assert store.mark_not_found(152, 18)
            assert application_row(transport, "152/18")["not_found_count"] == expected

        store.save_application(make_record())
        assert application_row(transport, "152/18")["not_found_count"] == 0

    def test_skip_flag_set_at_threshold_and_never_cleared(self, store, transport):
        store.save_application(make_record())

        for _ in range(59):
            store.mark_not_found(152, 18)
        assert application_row(transport, "152/18")["skip_scraping"] == 0

        store.mark_not_found(152, 18)
        row = application_row(transport, "152/18")
        assert row["not_found_count"] == 60
        assert row["skip_scraping"] == 1

        store.save_application(make_record())
        row = application_row(transport, "152/18")
        assert row["not_found_count"] == 0
        assert row["skip_scraping"] == 1

        store.mark_not_found(152, 18)
        assert application_row(transport, "152/18")["skip_scraping"] == 1

    def test_unknown_case_is_a_no_op(self, store, transport):
        assert store.mark_not_found(1, 25)
        assert application_row(transport, "1/25") is None

    def test_execution_failure_returns_false(self, transport):
        transport.conn.execute("DROP TABLE events")
        transport.conn.execute("DROP TABLE subscriptions")
        transport.conn.execute("DROP TABLE applications")
        assert CaseStore(transport).mark_not_found(1, 20) is False


class TestSaveBatch:

    def test_bulk_path(self, store, transport):
        records = [make_record("1/20", representative="A"), make_record("2/20", representative="A")]

        result = store.save_batch(records)

        assert (result.success, result.failed) == (2, 0)
        assert fetch_one(transport, "SELECT COUNT(*) AS n FROM representatives")["n"] == 1
        rep_ids = {application_row(transport, n)["representative_id"] for n in ("1/20", "2/20")}
        assert len(rep_ids) == 1 and None not in rep_ids
        assert len(event_rows(transport, "2/20")) == 3

    def test_bulk_path_is_idempotent(self, store, transport):
        records = [make_record("1/20"), make_record("2/20", events=[])]
        store.save_batch(records)
        before = [application_row(transport, "1/20"), event_rows(transport, "1/20")]

        store.save_batch(records)

        assert [application_row(transport, "1/20"), event_rows(transport, "1/20")] == before
        assert fetch_one(transport, "SELECT COUNT(*) AS n FROM events")["n"] == 3

    def test_bulk_path_resets_not_found_count(self, store, transport):
        store.save_batch([make_record("1/20")])
        store.mark_not_found(1, 20)

        store.save_batch([make_record("1/20")])

        assert application_row(transport, "1/20")["not_found_count"] == 0

    def test_malformed_record_counted_as_failed(self, store, transport):
        records = [make_record("1/20"), CaseRecord(application_number="2/20", application_title="")]

        result = store.save_batch(records)

        assert (result.success, result.failed) == (1, 1)
        assert application_row(transport, "1/20") is not None

    def test_empty_batch(self, store):
        result = store.save_batch([])
        assert (result.success, result.failed) == (0, 0)

    def test_fallback_attempts_every_record(self, transport):
        failing = FailingBulkTransport(transport)
        store = CaseStore(failing)
        records = [
            make_record("1/20"),
            CaseRecord(application_number="2/20", application_title=""),
            make_record("3/20", representative="Other"),
        ]

        result = store.save_batch(records)

        assert failing.bulk_calls == 1
        assert (result.success, result.failed) == (2, 1)
        assert result.success + result.failed == len(records)
        assert application_row(transport, "1/20") is not None
        assert application_row(transport, "3/20")["representative_name"] == "Other"

    def test_failed_bulk_load_rolls_back(self, store, transport):
        statements = store.builder.build_batch([make_record("1/20")])
        statements.append(Statement("INSERT INTO missing_table VALUES (1)"))

        with pytest.raises(BulkLoadError):
            transport.bulk_load(statements)

        assert application_row(transport, "1/20") is None


class TestCreateTransport:

    def test_unknown_backend(self):
        with pytest.raises(FatalConfigurationError):
            create_transport("postgres")

    def test_sqlite_backend(self, tmp_path, monkeypatch):
        import case_store
        monkeypatch.setattr(case_store, "SQLITE_PATH", str(tmp_path / "echr.db"))

        transport = create_transport("sqlite")

        assert transport.execute(Statement("SELECT 1 AS one")) == [{"one": 1}]
        transport.close()


def test_sqlite_errors_propagate_from_execute(transport):
    with pytest.raises(sqlite3.Error):
        transport.execute(Statement("SELECT * FROM nowhere"))
