from __future__ import annotations

from datetime import date

from safe_ledger.core.logging import get_logger
from safe_ledger.errors import AlreadyClockedIn, NotClockedIn, NotFound, ValidationError
from safe_ledger.ledger.business_day import BusinessCalendar
from safe_ledger.ledger.money import positive_amount
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import Employee, EmployeeExpense, TimeEntry
from safe_ledger.models.ledger_lock import TIME_CLOCK

logger = get_logger(__name__)

DEFAULT_ENTRY_LIMIT = 50


class TimeClockService:
    """Clock-in/clock-out and the expenses staff charge against their pay."""

    def __init__(self, store: LedgerStore, calendar: BusinessCalendar | None = None):
        self.store = store
        self.calendar = calendar or BusinessCalendar.from_settings(store.settings)

    def _active_employee(self, employee_id: int) -> Employee:
        employee = self.store.employee(employee_id)
        if employee is None:
            raise NotFound("employee", employee_id)
        if not employee.active:
            raise ValidationError(f"Employee {employee_id} is inactive", field="employee_id")
        return employee

    def clock_in(self, employee_id: int, actor_id: str, notes: str | None = None) -> TimeEntry:
        self._active_employee(employee_id)
        with self.store.transaction("clock_in"):
            self.store.lock(TIME_CLOCK)
            if self.store.open_time_entry(employee_id) is not None:
                raise AlreadyClockedIn(employee_id)
            entry = self.store.append(
                TimeEntry(employee_id=employee_id, clock_in=self.store.now(), notes=notes),
                actor_id,
            )
        logger.info("clocked_in", employee_id=employee_id, entry_id=entry.id)
        return entry

    def clock_out(self, employee_id: int, actor_id: str) -> TimeEntry:
        entry = self.store.open_time_entry(employee_id)
        if entry is None:
            raise NotClockedIn(employee_id)
        with self.store.transaction("clock_out"):
            if not self.store.close_once(entry, {"clock_out": self.store.now()}, actor_id):
                raise NotClockedIn(employee_id)
        logger.info("clocked_out", employee_id=employee_id, entry_id=entry.id)
        return entry

    def list_time_entries(self, employee_id: int, limit: int = DEFAULT_ENTRY_LIMIT) -> list[TimeEntry]:
        if limit < 1:
            raise ValidationError("limit must be positive", field="limit")
        return self.store.recent_time_entries(employee_id, limit)

    def log_employee_expense(self, employee_id: int, amount: object, description: str | None, actor_id: str) -> EmployeeExpense:
        amount = positive_amount(amount)
        description = (description or "").strip()
        if not description:
            raise ValidationError("description is required", field="description")

        self._active_employee(employee_id)
        with self.store.transaction("log_employee_expense"):
            expense = self.store.append(
                EmployeeExpense(
                    employee_id=employee_id,
                    amount=amount,
                    description=description,
                    timestamp=self.store.now(),
                ),
                actor_id,
            )
        logger.info("employee_expense_logged", employee_id=employee_id, amount=str(amount))
        return expense

    def list_employee_expenses(self, employee_id: int, start: date, end: date) -> list[EmployeeExpense]:
        if start > end:
            raise ValidationError("start must not be after end", field="start")
        return self.store.employee_expenses(self.calendar.range_window(start, end), employee_id)
