"""Weekly payroll over time entries and employee expenses.

Hours come only from closed time entries whose clock-in falls inside the
business days ``week_start`` through ``week_end``. A paycheck is written at
most once per ``(employee, week_start, week_end)``.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from safe_ledger.core.logging import get_logger
from safe_ledger.errors import DuplicatePayment, NotFound, ValidationError
from safe_ledger.ledger.business_day import BusinessCalendar
from safe_ledger.ledger.calculations import pay_figures, total_hours
from safe_ledger.ledger.money import non_negative_amount
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import Paycheck

logger = get_logger(__name__)


@dataclass(frozen=True)
class PayrollRow:
    employee_id: int
    name: str
    hourly_rate: Decimal
    total_hours: Decimal
    open_entries: int
    expenses_total: Decimal
    estimated_gross: Decimal
    estimated_net: Decimal
    paid: bool
    paid_at: datetime | None
    paycheck_id: int | None


def _check_week(week_start: date, week_end: date) -> None:
    if week_start > week_end:
        raise ValidationError("week_start must not be after week_end", field="week_start")


class PayrollService:
    def __init__(self, store: LedgerStore, calendar: BusinessCalendar | None = None):
        self.store = store
        self.calendar = calendar or BusinessCalendar.from_settings(store.settings)

    def compute_weekly_payroll(self, week_start: date, week_end: date) -> list[PayrollRow]:
        _check_week(week_start, week_end)
        window = self.calendar.range_window(week_start, week_end)

        entries = defaultdict(list)
        for entry in self.store.time_entries(window):
            entries[entry.employee_id].append(entry)
        expenses = defaultdict(list)
        for expense in self.store.employee_expenses(window):
            expenses[expense.employee_id].append(expense.amount)
        paychecks = {check.employee_id: check for check in self.store.paychecks_for_week(week_start, week_end)}

        # Inactive employees still appear for a week they have activity in.
        active_in_week = set(entries) | set(expenses) | set(paychecks)
        staff = [
            employee
            for employee in self.store.employees(active_only=False)
            if employee.active or employee.id in active_in_week
        ]

        rows = []
        for employee in staff:
            worked = entries.get(employee.id, [])
            figures = pay_figures(
                total_hours((entry.clock_in, entry.clock_out) for entry in worked),
                Decimal(employee.hourly_rate),
                expenses.get(employee.id, []),
            )
            paycheck = paychecks.get(employee.id)
            rows.append(
                PayrollRow(
                    employee_id=employee.id,
                    name=employee.name,
                    hourly_rate=figures.hourly_rate,
                    total_hours=figures.hours,
                    open_entries=sum(1 for entry in worked if entry.clock_out is None),
                    expenses_total=figures.expenses_total,
                    estimated_gross=figures.gross_pay,
                    estimated_net=figures.net_pay,
                    paid=paycheck is not None,
                    paid_at=paycheck.created_at if paycheck else None,
                    paycheck_id=paycheck.id if paycheck else None,
                )
            )
        return rows

    def record_pay(
        self,
        employee_id: int,
        week_start: date,
        week_end: date,
        hours: object,
        actor_id: str,
        hourly_rate: object | None = None,
    ) -> Paycheck:
        _check_week(week_start, week_end)
        hours = non_negative_amount(hours, "hours")
        rate = non_negative_amount(hourly_rate, "hourly_rate") if hourly_rate is not None else None

        employee = self.store.employee(employee_id)
        if employee is None:
            raise NotFound("employee", employee_id)
        if rate is None:
            rate = Decimal(employee.hourly_rate)

        existing = self.store.paycheck_for(employee_id, week_start, week_end)
        if existing is not None:
            raise self._duplicate(employee_id, week_start, week_end, existing)

        window = self.calendar.range_window(week_start, week_end)
        expenses = [expense.amount for expense in self.store.employee_expenses(window, employee_id)]
        figures = pay_figures(hours, rate, expenses)

        try:
            with self.store.transaction("record_pay"):
                paycheck = self.store.append(
                    Paycheck(
                        employee_id=employee_id,
                        week_start=week_start,
                        week_end=week_end,
                        hours=figures.hours,
                        hourly_rate=figures.hourly_rate,
                        gross_pay=figures.gross_pay,
                        expenses_total=figures.expenses_total,
                        net_pay=figures.net_pay,
                    ),
                    actor_id,
                )
        except IntegrityError:
            # Lost the race to a concurrent writer for the same week.
            raise self._duplicate(
                employee_id, week_start, week_end, self.store.paycheck_for(employee_id, week_start, week_end)
            ) from None

        logger.info(
            "paycheck_recorded",
            paycheck_id=paycheck.id,
            employee_id=employee_id,
            gross_pay=str(paycheck.gross_pay),
            net_pay=str(paycheck.net_pay),
        )
        return paycheck

    def _duplicate(self, employee_id: int, week_start: date, week_end: date, existing: Paycheck | None) -> DuplicatePayment:
        logger.warning("paycheck_duplicate_rejected", employee_id=employee_id, week_start=week_start.isoformat())
        return DuplicatePayment(
            employee_id,
            week_start,
            week_end,
            paycheck_id=existing.id if existing else None,
            paid_at=existing.created_at if existing else None,
        )

    def paycheck_history(self, start: date | None = None, end: date | None = None) -> list[Paycheck]:
        if start and end:
            _check_week(start, end)
        return self.store.paychecks(start, end)
