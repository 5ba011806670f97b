from datetime import date
from decimal import Decimal

import pytest

from safe_ledger.domains.expenses.service import ExpenseService
from safe_ledger.domains.safe.service import SafeService
from safe_ledger.domains.sales.service import SalesService
from safe_ledger.errors import ValidationError
from safe_ledger.models import AuditEntry, DailySales

DAY = date(2024, 1, 10)


@pytest.fixture
def day_of_trading(store, clock, vendor):
    safe = SafeService(store)
    safe.record_drop("alice", "200.00")
    clock.advance(hours=2)
    safe.record_drop("bob", "100.00")
    ExpenseService(store).record_expense("alice", vendor.id, "20.00", "cash", DAY)
    ExpenseService(store).record_expense("alice", vendor.id, "70.00", "check", DAY)


def test_derive_cash_sales_adds_drops_and_cash_expenses(store, day_of_trading):
    assert SalesService(store).derive_cash_sales(DAY) == Decimal("320.00")


def test_derive_cash_sales_is_idempotent(store, day_of_trading):
    sales = SalesService(store)
    assert sales.derive_cash_sales(DAY) == sales.derive_cash_sales(DAY)


def test_other_days_are_excluded(store, clock, day_of_trading):
    clock.advance(days=1)
    SafeService(store).record_drop("alice", "55.00")

    sales = SalesService(store)
    assert sales.derive_cash_sales(DAY) == Decimal("320.00")
    assert sales.derive_cash_sales(date(2024, 1, 11)) == Decimal("55.00")
    assert sales.derive_cash_sales(date(2024, 1, 12)) == Decimal("0.00")


def test_close_daily_sales_matches_derived_cash(store, day_of_trading):
    sales = SalesService(store)
    derived = sales.derive_cash_sales(DAY)

    row = sales.close_daily_sales(DAY, "500.00", "alice", expected_total="810.00")

    assert row.cash_sales == derived
    assert row.card_sales == Decimal("500.00")
    assert row.total_sales == Decimal("820.00")
    assert row.variance == Decimal("10.00")
    assert row.closed_by_actor_id == "alice"


def test_second_close_updates_the_single_row(store, session, clock, day_of_trading):
    sales = SalesService(store)
    first = sales.close_daily_sales(DAY, "500.00", "alice")
    SafeService(store).record_drop("alice", "30.00")
    clock.advance(minutes=30)

    second = sales.close_daily_sales(DAY, "600.00", "manager-1", notes="Late card batch")

    assert second.id == first.id
    assert session.query(DailySales).count() == 1
    assert second.cash_sales == Decimal("350.00")
    assert second.total_sales == Decimal("950.00")

    actions = [
        entry.action
        for entry in session.query(AuditEntry).filter(AuditEntry.table_name == "daily_sales").order_by(AuditEntry.id)
    ]
    assert actions == ["insert", "update"]
    update = session.query(AuditEntry).filter(AuditEntry.action == "update").one()
    assert update.old_value["card_sales"] == "500.00"
    assert update.new_value["card_sales"] == "600.00"
    assert update.actor_id == "manager-1"


def test_negative_card_sales_rejected(store, session):
    with pytest.raises(ValidationError) as excinfo:
        SalesService(store).close_daily_sales(DAY, "-1.00", "alice")

    assert excinfo.value.field == "card_sales"
    assert session.query(DailySales).count() == 0


def test_list_daily_sales_range(store, day_of_trading):
    sales = SalesService(store)
    sales.close_daily_sales(DAY, "500.00", "alice")
    sales.close_daily_sales(date(2024, 1, 11), "10.00", "alice")

    rows = sales.list_daily_sales(date(2024, 1, 10), date(2024, 1, 10))

    assert [row.date for row in rows] == [DAY]
    with pytest.raises(ValidationError):
        sales.list_daily_sales(date(2024, 1, 11), date(2024, 1, 10))
