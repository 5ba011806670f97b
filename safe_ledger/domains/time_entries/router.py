from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from safe_ledger.api.deps import get_store, require_role
from safe_ledger.core.identity import Actor, Role
from safe_ledger.ledger.calculations import worked_hours
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import EmployeeExpense, TimeEntry

from .service import DEFAULT_ENTRY_LIMIT, TimeClockService

router = APIRouter(prefix="/time", tags=["time"])


def get_service(store: LedgerStore = Depends(get_store)) -> TimeClockService:
    return TimeClockService(store)


class ClockRequest(BaseModel):
    employee_id: int
    notes: str | None = None


class TimeEntryOut(BaseModel):
    id: int
    employee_id: int
    clock_in: datetime
    clock_out: datetime | None = None
    hours: Decimal


class EmployeeExpenseCreate(BaseModel):
    employee_id: int
    amount: Decimal
    description: str = Field(..., max_length=255)


class EmployeeExpenseOut(EmployeeExpenseCreate):
    id: int
    timestamp: datetime


def _entry_out(row: TimeEntry) -> TimeEntryOut:
    return TimeEntryOut(
        id=row.id,
        employee_id=row.employee_id,
        clock_in=row.clock_in,
        clock_out=row.clock_out,
        hours=worked_hours(row.clock_in, row.clock_out).quantize(Decimal("0.01")),
    )


def _expense_out(row: EmployeeExpense) -> EmployeeExpenseOut:
    return EmployeeExpenseOut(
        id=row.id,
        employee_id=row.employee_id,
        amount=row.amount,
        description=row.description,
        timestamp=row.timestamp,
    )


@router.post("/clock-in", response_model=TimeEntryOut, status_code=201)
def clock_in(
    payload: ClockRequest,
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: TimeClockService = Depends(get_service),
) -> TimeEntryOut:
    return _entry_out(service.clock_in(payload.employee_id, actor.id, payload.notes))


@router.post("/clock-out", response_model=TimeEntryOut)
def clock_out(
    payload: ClockRequest,
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: TimeClockService = Depends(get_service),
) -> TimeEntryOut:
    return _entry_out(service.clock_out(payload.employee_id, actor.id))


@router.get("/entries/{employee_id}", response_model=list[TimeEntryOut])
def list_entries(
    employee_id: int,
    limit: int = Query(default=DEFAULT_ENTRY_LIMIT, ge=1, le=500),
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: TimeClockService = Depends(get_service),
) -> list[TimeEntryOut]:
    return [_entry_out(row) for row in service.list_time_entries(employee_id, limit)]


@router.post("/expenses", response_model=EmployeeExpenseOut, status_code=201)
def log_expense(
    payload: EmployeeExpenseCreate,
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: TimeClockService = Depends(get_service),
) -> EmployeeExpenseOut:
    row = service.log_employee_expense(payload.employee_id, payload.amount, payload.description, actor.id)
    return _expense_out(row)


@router.get("/expenses/{employee_id}", response_model=list[EmployeeExpenseOut])
def list_expenses(
    employee_id: int,
    start: date,
    end: date,
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: TimeClockService = Depends(get_service),
) -> list[EmployeeExpenseOut]:
    return [_expense_out(row) for row in service.list_employee_expenses(employee_id, start, end)]
