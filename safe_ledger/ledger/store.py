"""Typed access to the ledger fact streams.

The store is the only component that talks to the database and the only one
that owns transaction boundaries. Facts can be appended; shifts and time
entries can be closed exactly once; daily sales can be upserted under the
``daily_sales`` lock. Nothing here updates or deletes an appended fact, and
every write is paired with an audit entry in the same transaction.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterator, TypeVar

from sqlalchemy import update
from sqlalchemy.orm import Session

from safe_ledger.core.clock import Clock, to_storage
from safe_ledger.core.config import Settings, settings as default_settings
from safe_ledger.core.logging import get_logger
from safe_ledger.core.observability import store_failures, tracer
from safe_ledger.errors import LedgerError, TransientStoreError
from safe_ledger.models import (
    DailySales,
    Deposit,
    Employee,
    EmployeeExpense,
    Expense,
    LedgerLock,
    Paycheck,
    SafeDrop,
    Shift,
    TimeEntry,
    Vendor,
    Withdrawal,
)
from safe_ledger.models.expense import CASH, CHECK

from .audit import AuditRecorder, snapshot
from .business_day import Window
from .retry import TRANSIENT_ERRORS, transient_retry

logger = get_logger(__name__)

T = TypeVar("T")


class LedgerStore:
    def __init__(self, session: Session, clock: Clock, config: Settings | None = None):
        self.session = session
        self.clock = clock
        self.settings = config or default_settings
        self.audit = AuditRecorder(session, clock)
        self._depth = 0

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    @property
    def in_write(self) -> bool:
        return self._depth > 0

    def now(self) -> datetime:
        return to_storage(self.clock.now())

    @contextmanager
    def transaction(self, operation: str) -> Iterator["LedgerStore"]:
        self._depth += 1
        try:
            with tracer.start_as_current_span(f"ledger.{operation}"):
                yield self
                if self._depth == 1:
                    self.session.commit()
        except TRANSIENT_ERRORS as exc:
            self.session.rollback()
            logger.error("store_write_failed", operation=operation)
            store_failures.add(1, {"operation": operation})
            raise TransientStoreError(operation, exc) from exc
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._depth -= 1

    def lock(self, name: str) -> None:
        """Serialize writers on ``name`` until the surrounding transaction ends."""
        if not self.in_write:
            raise LedgerError(f"lock({name}) requires an open transaction")
        result = self.session.execute(
            update(LedgerLock)
            .where(LedgerLock.name == name)
            .values(version=LedgerLock.version + 1, touched_at=self.now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.session.add(LedgerLock(name=name, version=1, touched_at=self.now()))
            self.session.flush()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def append(self, row: T, actor_id: str) -> T:
        if hasattr(row, "created_at") and row.created_at is None:
            row.created_at = self.now()
        self.session.add(row)
        self.session.flush()
        self.audit.inserted(row, actor_id)
        return row

    def update(self, row: T, values: dict[str, Any], actor_id: str) -> T:
        """Audited in-place update; only reference rows and daily sales use this."""
        before = snapshot(row)
        for key, value in values.items():
            setattr(row, key, value)
        self.session.flush()
        self.audit.updated(row, before, actor_id)
        return row

    def close_once(self, row: T, values: dict[str, Any], actor_id: str) -> bool:
        """Compare-and-set close: applies ``values`` only while the row is still open."""
        model = type(row)
        marker = getattr(model, model.__closed_by__)
        before = snapshot(row)
        result = self.session.execute(
            update(model)
            .where(model.id == row.id, marker.is_(None))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        self.session.refresh(row)
        self.audit.updated(row, before, actor_id)
        return True

    # ------------------------------------------------------------------
    # Safe
    # ------------------------------------------------------------------
    @transient_retry
    def confirmed_drop_amounts(self, window: Window | None = None, actor_id: str | None = None) -> list[Decimal]:
        query = self.session.query(SafeDrop.amount).filter(SafeDrop.confirmed.is_(True))
        if window is not None:
            query = query.filter(SafeDrop.timestamp >= window.start, SafeDrop.timestamp < window.end)
        if actor_id is not None:
            query = query.filter(SafeDrop.actor_id == actor_id)
        return [amount for (amount,) in query.all()]

    @transient_retry
    def withdrawal_amounts(self, window: Window | None = None) -> list[Decimal]:
        query = self.session.query(Withdrawal.amount)
        if window is not None:
            query = query.filter(Withdrawal.timestamp >= window.start, Withdrawal.timestamp < window.end)
        return [amount for (amount,) in query.all()]

    @transient_retry
    def drops(self, window: Window | None = None) -> list[SafeDrop]:
        query = self.session.query(SafeDrop)
        if window is not None:
            query = query.filter(SafeDrop.timestamp >= window.start, SafeDrop.timestamp < window.end)
        return query.order_by(SafeDrop.timestamp.desc(), SafeDrop.id.desc()).all()

    @transient_retry
    def withdrawals(self, window: Window | None = None) -> list[Withdrawal]:
        query = self.session.query(Withdrawal)
        if window is not None:
            query = query.filter(Withdrawal.timestamp >= window.start, Withdrawal.timestamp < window.end)
        return query.order_by(Withdrawal.timestamp.desc(), Withdrawal.id.desc()).all()

    @transient_retry
    def receipt_number_taken(self, number: str) -> bool:
        return self.session.query(SafeDrop.id).filter(SafeDrop.receipt_number == number).first() is not None

    @transient_retry
    def withdrawal_number_taken(self, number: str) -> bool:
        return (
            self.session.query(Withdrawal.id).filter(Withdrawal.withdrawal_number == number).first()
            is not None
        )

    # ------------------------------------------------------------------
    # Expenses, deposits, sales
    # ------------------------------------------------------------------
    @transient_retry
    def expense_amounts(
        self,
        first: date,
        last: date,
        payment_type: str,
        actor_id: str | None = None,
    ) -> list[Decimal]:
        query = self.session.query(Expense.amount).filter(
            Expense.payment_type == payment_type,
            Expense.date >= first,
            Expense.date <= last,
        )
        if actor_id is not None:
            query = query.filter(Expense.actor_id == actor_id)
        return [amount for (amount,) in query.all()]

    def cash_expense_amounts(self, first: date, last: date, actor_id: str | None = None) -> list[Decimal]:
        return self.expense_amounts(first, last, CASH, actor_id)

    def check_expense_amounts(self, first: date, last: date) -> list[Decimal]:
        return self.expense_amounts(first, last, CHECK)

    @transient_retry
    def expenses(self, first: date | None = None, last: date | None = None) -> list[Expense]:
        query = self.session.query(Expense)
        if first is not None:
            query = query.filter(Expense.date >= first)
        if last is not None:
            query = query.filter(Expense.date <= last)
        return query.order_by(Expense.date.desc(), Expense.id.desc()).all()

    @transient_retry
    def deposit_amounts(self, first: date, last: date) -> list[Decimal]:
        query = self.session.query(Deposit.amount).filter(Deposit.date >= first, Deposit.date <= last)
        return [amount for (amount,) in query.all()]

    @transient_retry
    def deposits(self, first: date | None = None, last: date | None = None) -> list[Deposit]:
        query = self.session.query(Deposit)
        if first is not None:
            query = query.filter(Deposit.date >= first)
        if last is not None:
            query = query.filter(Deposit.date <= last)
        return query.order_by(Deposit.date.desc(), Deposit.id.desc()).all()

    @transient_retry
    def card_sales_amounts(self, first: date, last: date) -> list[Decimal]:
        query = self.session.query(DailySales.card_sales).filter(DailySales.date >= first, DailySales.date <= last)
        return [amount for (amount,) in query.all()]

    @transient_retry
    def daily_sales_for(self, day: date) -> DailySales | None:
        return self.session.query(DailySales).filter(DailySales.date == day).one_or_none()

    @transient_retry
    def daily_sales(self, first: date, last: date) -> list[DailySales]:
        return (
            self.session.query(DailySales)
            .filter(DailySales.date >= first, DailySales.date <= last)
            .order_by(DailySales.date.desc())
            .all()
        )

    # ------------------------------------------------------------------
    # Shifts
    # ------------------------------------------------------------------
    @transient_retry
    def shift(self, shift_id: int) -> Shift | None:
        return self.session.get(Shift, shift_id)

    @transient_retry
    def open_shift_for(self, actor_id: str) -> Shift | None:
        return (
            self.session.query(Shift)
            .filter(Shift.actor_id == actor_id, Shift.end_time.is_(None))
            .order_by(Shift.start_time.desc(), Shift.id.desc())
            .first()
        )

    @transient_retry
    def shifts(self, window: Window | None = None, actor_id: str | None = None) -> list[Shift]:
        query = self.session.query(Shift)
        if window is not None:
            query = query.filter(Shift.start_time >= window.start, Shift.start_time < window.end)
        if actor_id is not None:
            query = query.filter(Shift.actor_id == actor_id)
        return query.order_by(Shift.start_time.desc(), Shift.id.desc()).all()

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------
    @transient_retry
    def employee(self, employee_id: int) -> Employee | None:
        return self.session.get(Employee, employee_id)

    @transient_retry
    def employees(self, active_only: bool = True) -> list[Employee]:
        query = self.session.query(Employee)
        if active_only:
            query = query.filter(Employee.active.is_(True))
        return query.order_by(Employee.name.asc(), Employee.id.asc()).all()

    @transient_retry
    def vendor(self, vendor_id: int) -> Vendor | None:
        return self.session.get(Vendor, vendor_id)

    @transient_retry
    def vendors(self, vendor_type: str | None = None, active_only: bool = True) -> list[Vendor]:
        query = self.session.query(Vendor)
        if active_only:
            query = query.filter(Vendor.active.is_(True))
        if vendor_type:
            query = query.filter(Vendor.type == vendor_type)
        return query.order_by(Vendor.name.asc(), Vendor.id.asc()).all()

    # ------------------------------------------------------------------
    # Time and pay
    # ------------------------------------------------------------------
    @transient_retry
    def time_entries(self, window: Window, employee_id: int | None = None) -> list[TimeEntry]:
        query = self.session.query(TimeEntry).filter(
            TimeEntry.clock_in >= window.start,
            TimeEntry.clock_in < window.end,
        )
        if employee_id is not None:
            query = query.filter(TimeEntry.employee_id == employee_id)
        return query.order_by(TimeEntry.clock_in.asc(), TimeEntry.id.asc()).all()

    @transient_retry
    def recent_time_entries(self, employee_id: int, limit: int = 50) -> list[TimeEntry]:
        return (
            self.session.query(TimeEntry)
            .filter(TimeEntry.employee_id == employee_id)
            .order_by(TimeEntry.clock_in.desc(), TimeEntry.id.desc())
            .limit(limit)
            .all()
        )

    @transient_retry
    def open_time_entry(self, employee_id: int) -> TimeEntry | None:
        return (
            self.session.query(TimeEntry)
            .filter(TimeEntry.employee_id == employee_id, TimeEntry.clock_out.is_(None))
            .order_by(TimeEntry.clock_in.desc(), TimeEntry.id.desc())
            .first()
        )

    @transient_retry
    def employee_expenses(self, window: Window, employee_id: int | None = None) -> list[EmployeeExpense]:
        query = self.session.query(EmployeeExpense).filter(
            EmployeeExpense.timestamp >= window.start,
            EmployeeExpense.timestamp < window.end,
        )
        if employee_id is not None:
            query = query.filter(EmployeeExpense.employee_id == employee_id)
        return query.order_by(EmployeeExpense.timestamp.desc(), EmployeeExpense.id.desc()).all()

    @transient_retry
    def paycheck_for(self, employee_id: int, week_start: date, week_end: date) -> Paycheck | None:
        return (
            self.session.query(Paycheck)
            .filter(
                Paycheck.employee_id == employee_id,
                Paycheck.week_start == week_start,
                Paycheck.week_end == week_end,
            )
            .one_or_none()
        )

    @transient_retry
    def paychecks_for_week(self, week_start: date, week_end: date) -> list[Paycheck]:
        return (
            self.session.query(Paycheck)
            .filter(Paycheck.week_start == week_start, Paycheck.week_end == week_end)
            .all()
        )

    @transient_retry
    def paychecks(self, first: date | None = None, last: date | None = None) -> list[Paycheck]:
        query = self.session.query(Paycheck)
        if first is not None:
            query = query.filter(Paycheck.week_start >= first)
        if last is not None:
            query = query.filter(Paycheck.week_end <= last)
        return query.order_by(Paycheck.created_at.desc(), Paycheck.id.desc()).all()
