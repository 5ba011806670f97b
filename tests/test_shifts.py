from datetime import date
from decimal import Decimal

import pytest

from safe_ledger.core.identity import Role
from safe_ledger.domains.expenses.service import ExpenseService
from safe_ledger.domains.safe.service import SafeService
from safe_ledger.domains.shifts.service import ShiftService
from safe_ledger.errors import NotFound, PermissionDenied, ShiftAlreadyClosed, ShiftAlreadyOpen, ValidationError
from safe_ledger.models import AuditEntry, Shift


def test_close_shift_reports_short_drawer(store, clock):
    shifts = ShiftService(store)
    shift = shifts.open_shift("alice", "200.00")
    clock.advance(hours=1)
    SafeService(store).record_drop("alice", "150.00")
    clock.advance(hours=2)

    summary = shifts.close_shift(shift.id, "45.00", "alice")

    assert summary.starting_cash == Decimal("200.00")
    assert summary.total_drops == Decimal("150.00")
    assert summary.expected_ending == Decimal("50.00")
    assert summary.variance == Decimal("-5.00")


def test_closed_shift_fields_reproduce_variance(store, session, clock):
    shifts = ShiftService(store)
    shift = shifts.open_shift("alice", "300.00")
    SafeService(store).record_drop("alice", "120.00")
    clock.advance(hours=6)
    shifts.close_shift(shift.id, "181.25", "alice")

    stored = session.get(Shift, shift.id)
    assert stored.end_time is not None
    assert stored.variance == stored.ending_drawer_cash - (stored.starting_drawer_cash - stored.total_drops)
    assert stored.variance == Decimal("1.25")


def test_second_close_is_rejected(store, clock):
    shifts = ShiftService(store)
    shift = shifts.open_shift("alice", "100.00")
    clock.advance(hours=1)
    shifts.close_shift(shift.id, "100.00", "alice")

    with pytest.raises(ShiftAlreadyClosed):
        shifts.close_shift(shift.id, "90.00", "alice")


def test_close_compare_and_set_guards_stale_reads(store, session, clock):
    shifts = ShiftService(store)
    shift = shifts.open_shift("alice", "100.00")
    clock.advance(hours=1)

    with store.transaction("first_close"):
        assert store.close_once(shift, {"end_time": store.now(), "ending_drawer_cash": Decimal("1.00")}, "alice")
    with store.transaction("stale_close"):
        assert not store.close_once(shift, {"end_time": store.now(), "ending_drawer_cash": Decimal("2.00")}, "alice")

    assert session.get(Shift, shift.id).ending_drawer_cash == Decimal("1.00")


def test_only_own_drops_in_shift_window_count(store, clock):
    shifts = ShiftService(store)
    safe = SafeService(store)
    safe.record_drop("alice", "999.00")  # before the shift opened
    clock.advance(minutes=5)
    shift = shifts.open_shift("alice", "200.00")
    safe.record_drop("alice", "100.00")
    safe.record_drop("bob", "40.00")
    clock.advance(hours=1)

    summary = shifts.close_shift(shift.id, "100.00", "alice")

    assert summary.total_drops == Decimal("100.00")
    assert summary.variance == Decimal("0.00")


def test_overnight_shift_uses_its_own_window(store, clock, vendor):
    clock.advance(hours=10)  # 22:00 on the 10th
    shifts = ShiftService(store)
    shift = shifts.open_shift("alice", "200.00")
    clock.advance(hours=3)  # 01:00 on the 11th
    SafeService(store).record_drop("alice", "80.00")
    ExpenseService(store).record_expense("alice", vendor.id, "15.00", "cash", date(2024, 1, 11))
    clock.advance(hours=1)

    summary = shifts.close_shift(shift.id, "120.00", "alice")

    assert summary.total_drops == Decimal("80.00")
    assert summary.total_expenses == Decimal("15.00")
    assert summary.expected_ending == Decimal("120.00")
    assert summary.variance == Decimal("0.00")


def test_cash_expenses_are_reported_but_not_subtracted(store, clock, vendor):
    shifts = ShiftService(store)
    shift = shifts.open_shift("alice", "200.00")
    ExpenseService(store).record_expense("alice", vendor.id, "25.00", "cash", date(2024, 1, 10))
    ExpenseService(store).record_expense("alice", vendor.id, "60.00", "check", date(2024, 1, 10))
    clock.advance(hours=1)

    summary = shifts.close_shift(shift.id, "175.00", "alice")

    assert summary.total_expenses == Decimal("25.00")
    assert summary.expected_ending == Decimal("200.00")
    assert summary.variance == Decimal("-25.00")


def test_one_open_shift_per_actor(store):
    shifts = ShiftService(store)
    first = shifts.open_shift("alice", "100.00")

    with pytest.raises(ShiftAlreadyOpen) as excinfo:
        shifts.open_shift("alice", "50.00")

    assert excinfo.value.context["shift_id"] == first.id
    assert shifts.open_shift("bob", "50.00").id != first.id


def test_close_current_shift_finds_actor_shift(store, clock):
    shifts = ShiftService(store)
    shifts.open_shift("alice", "100.00")
    clock.advance(hours=1)

    summary = shifts.close_current_shift("alice", "100.00")

    assert summary.variance == Decimal("0.00")
    with pytest.raises(NotFound):
        shifts.close_current_shift("alice", "100.00")


def test_negative_cash_rejected_before_store_access(store, session):
    shifts = ShiftService(store)

    with pytest.raises(ValidationError):
        shifts.open_shift("alice", "-1.00")
    with pytest.raises(ValidationError):
        shifts.close_shift(12345, "-0.01", "alice")
    assert session.query(Shift).count() == 0


def test_close_is_audited_with_old_value(store, session, clock):
    shifts = ShiftService(store)
    shift = shifts.open_shift("alice", "100.00")
    clock.advance(hours=1)
    shifts.close_shift(shift.id, "80.00", "manager-1", role=Role.MANAGER)

    update = (
        session.query(AuditEntry)
        .filter(AuditEntry.table_name == "shifts", AuditEntry.action == "update")
        .one()
    )
    assert update.record_id == str(shift.id)
    assert update.actor_id == "manager-1"
    assert update.old_value["end_time"] is None
    assert update.new_value["variance"] == "-20.00"


def test_cashier_cannot_close_colleagues_shift(store, session, clock):
    shifts = ShiftService(store)
    shift = shifts.open_shift("alice", "200.00")
    clock.advance(hours=1)

    with pytest.raises(PermissionDenied):
        shifts.close_shift(shift.id, "0.00", "bob")

    session.expire_all()
    assert session.get(Shift, shift.id).end_time is None
    assert shifts.close_shift(shift.id, "200.00", "alice").variance == Decimal("0.00")


def test_manager_may_close_any_shift(store, clock):
    shifts = ShiftService(store)
    shift = shifts.open_shift("alice", "200.00")
    SafeService(store).record_drop("alice", "50.00")
    clock.advance(hours=1)

    summary = shifts.close_shift(shift.id, "150.00", "manager-1", role=Role.MANAGER)

    assert summary.total_drops == Decimal("50.00")
    assert summary.variance == Decimal("0.00")


def test_close_totals_are_read_inside_the_close_transaction(store, clock, monkeypatch):
    shifts = ShiftService(store)
    shift = shifts.open_shift("alice", "100.00")
    clock.advance(hours=1)
    real_drops = store.confirmed_drop_amounts
    seen = []

    def watched_drops(*args, **kwargs):
        seen.append(store.in_write)
        return real_drops(*args, **kwargs)

    monkeypatch.setattr(store, "confirmed_drop_amounts", watched_drops)
    shifts.close_shift(shift.id, "100.00", "alice")

    assert seen == [True]
