from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from safe_ledger.api.deps import get_store, require_role
from safe_ledger.core.identity import Actor, Role
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import Paycheck

from .service import PayrollService

router = APIRouter(prefix="/payroll", tags=["payroll"])


def get_service(store: LedgerStore = Depends(get_store)) -> PayrollService:
    return PayrollService(store)


class PayrollRowOut(BaseModel):
    employee_id: int
    name: str
    hourly_rate: Decimal
    total_hours: Decimal
    open_entries: int
    expenses_total: Decimal
    estimated_gross: Decimal
    estimated_net: Decimal
    paid: bool
    paid_at: datetime | None = None
    paycheck_id: int | None = None


class PaycheckCreate(BaseModel):
    employee_id: int
    week_start: date
    week_end: date
    hours: Decimal
    hourly_rate: Decimal | None = None


class PaycheckOut(BaseModel):
    id: int
    employee_id: int
    week_start: date
    week_end: date
    hours: Decimal
    hourly_rate: Decimal
    gross_pay: Decimal
    expenses_total: Decimal
    net_pay: Decimal
    created_at: datetime


def _paycheck_out(row: Paycheck) -> PaycheckOut:
    return PaycheckOut(
        id=row.id,
        employee_id=row.employee_id,
        week_start=row.week_start,
        week_end=row.week_end,
        hours=row.hours,
        hourly_rate=row.hourly_rate,
        gross_pay=row.gross_pay,
        expenses_total=row.expenses_total,
        net_pay=row.net_pay,
        created_at=row.created_at,
    )


@router.get("/weekly", response_model=list[PayrollRowOut])
def weekly_payroll(
    start: date,
    end: date,
    actor: Actor = Depends(require_role(Role.ADMIN)),
    service: PayrollService = Depends(get_service),
) -> list[PayrollRowOut]:
    return [PayrollRowOut(**row.__dict__) for row in service.compute_weekly_payroll(start, end)]


@router.get("/paychecks", response_model=list[PaycheckOut])
def paycheck_history(
    start: date | None = None,
    end: date | None = None,
    actor: Actor = Depends(require_role(Role.ADMIN)),
    service: PayrollService = Depends(get_service),
) -> list[PaycheckOut]:
    return [_paycheck_out(row) for row in service.paycheck_history(start, end)]


@router.post("/paychecks", response_model=PaycheckOut, status_code=201)
def record_paycheck(
    payload: PaycheckCreate,
    actor: Actor = Depends(require_role(Role.ADMIN)),
    service: PayrollService = Depends(get_service),
) -> PaycheckOut:
    row = service.record_pay(
        payload.employee_id,
        payload.week_start,
        payload.week_end,
        payload.hours,
        actor.id,
        hourly_rate=payload.hourly_rate,
    )
    return _paycheck_out(row)
