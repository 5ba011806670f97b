from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from safe_ledger.domains.safe.service import SafeService
from safe_ledger.errors import TransientStoreError, ValidationError
from safe_ledger.ledger.audit import AuditQuery


@pytest.fixture
def five_drops(store, clock):
    safe = SafeService(store)
    for amount in ("10.00", "20.00", "30.00", "40.00", "50.00"):
        safe.record_drop("alice", amount)
        clock.advance(minutes=1)


def test_every_append_writes_an_insert_entry(store, session, clock):
    drop = SafeService(store).record_drop("alice", "500.00", notes="Evening drop")
    query = AuditQuery(session, clock)

    entries = list(query.iter_entries(query.filters()))

    assert len(entries) == 1
    entry = entries[0]
    assert entry.table_name == "safe_drops"
    assert entry.record_id == str(drop.id)
    assert entry.action == "insert"
    assert entry.actor_id == "alice"
    assert entry.old_value is None
    assert entry.new_value["amount"] == "500.00"
    assert entry.new_value["receipt_number"] == drop.receipt_number


def test_pages_are_newest_first_and_restartable(session, clock, test_settings, five_drops):
    query = AuditQuery(session, clock, test_settings)
    filters = query.filters()

    first = query.page(filters, limit=2)
    second = query.page(filters, after_id=first.next_cursor, limit=2)
    last = query.page(filters, after_id=second.next_cursor, limit=2)

    amounts = [entry.new_value["amount"] for entry in first.entries + second.entries + last.entries]
    assert amounts == ["50.00", "40.00", "30.00", "20.00", "10.00"]
    assert last.next_cursor is None


def test_iter_entries_walks_every_page_lazily(session, clock, test_settings, five_drops):
    test_settings.audit_page_size = 2
    query = AuditQuery(session, clock, test_settings)
    filters = query.filters()

    walker = query.iter_entries(filters)
    head = next(walker)
    rest = list(walker)

    assert head.new_value["amount"] == "50.00"
    assert len(rest) == 4
    resumed = list(query.iter_entries(filters, after_id=rest[1].id))
    assert [entry.new_value["amount"] for entry in resumed] == ["20.00", "10.00"]


def test_filters_narrow_results(store, session, clock, five_drops):
    SafeService(store).record_withdrawal("manager-1", "15.00", "Change")
    query = AuditQuery(session, clock)

    withdrawals = list(query.iter_entries(query.filters(table_name="withdrawals")))
    by_manager = list(query.iter_entries(query.filters(actor_id="manager-1")))
    updates = list(query.iter_entries(query.filters(action="update")))

    assert [entry.table_name for entry in withdrawals] == ["withdrawals"]
    assert len(by_manager) == 1
    assert updates == []


def test_time_window_bounds_results(session, clock, five_drops):
    query = AuditQuery(session, clock)
    now = clock.now()

    later = query.filters(changed_from=now + timedelta(hours=1), changed_to=now + timedelta(hours=2))
    assert list(query.iter_entries(later)) == []
    early = query.filters(changed_from=datetime(2024, 1, 10, 12, 0), changed_to=datetime(2024, 1, 10, 12, 1))
    assert len(list(query.iter_entries(early))) == 2


def test_default_window_excludes_old_entries(session, clock, five_drops):
    clock.advance(days=45)
    query = AuditQuery(session, clock)

    assert list(query.iter_entries(query.filters())) == []


def test_bad_filters_rejected(session, clock):
    query = AuditQuery(session, clock)

    with pytest.raises(ValidationError):
        query.filters(changed_from=datetime(2024, 2, 1), changed_to=datetime(2024, 1, 1))
    with pytest.raises(ValidationError):
        query.filters(action="truncate")
    with pytest.raises(ValidationError):
        query.page(query.filters(), limit=10_000)


def test_transient_audit_read_is_retried_once(session, clock, test_settings, five_drops, monkeypatch):
    query = AuditQuery(session, clock, test_settings)
    real_query = session.query
    failures = {"left": 1}

    def flaky_query(*entities, **kwargs):
        if failures["left"]:
            failures["left"] -= 1
            raise OperationalError("SELECT", {}, Exception("database is locked"))
        return real_query(*entities, **kwargs)

    monkeypatch.setattr(session, "query", flaky_query)

    assert len(query.page(query.filters(), limit=5).entries) == 5
    assert failures["left"] == 0


def test_persistent_audit_read_failure_is_transient_error(session, clock, test_settings, monkeypatch):
    query = AuditQuery(session, clock, test_settings)

    def broken_query(*entities, **kwargs):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "query", broken_query)

    with pytest.raises(TransientStoreError) as excinfo:
        query.page(query.filters())
    assert excinfo.value.status_code == 503
