from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from safe_ledger.api.deps import get_store, require_role
from safe_ledger.core.identity import Actor, Role
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import Shift

from .service import ShiftService, ShiftSummary

router = APIRouter(prefix="/shifts", tags=["shifts"])


def get_service(store: LedgerStore = Depends(get_store)) -> ShiftService:
    return ShiftService(store)


class ShiftOpen(BaseModel):
    starting_drawer_cash: Decimal


class ShiftClose(BaseModel):
    ending_drawer_cash: Decimal
    notes: str | None = None


class ShiftOut(BaseModel):
    id: int
    actor_id: str
    start_time: datetime
    end_time: datetime | None = None
    starting_drawer_cash: Decimal
    ending_drawer_cash: Decimal | None = None
    total_drops: Decimal
    total_expenses: Decimal
    variance: Decimal
    notes: str | None = None


class ShiftSummaryOut(BaseModel):
    shift_id: int
    starting_cash: Decimal
    ending_cash: Decimal
    total_drops: Decimal
    total_expenses: Decimal
    expected_ending: Decimal
    variance: Decimal
    status: str


def _shift_out(row: Shift) -> ShiftOut:
    return ShiftOut(
        id=row.id,
        actor_id=row.actor_id,
        start_time=row.start_time,
        end_time=row.end_time,
        starting_drawer_cash=row.starting_drawer_cash,
        ending_drawer_cash=row.ending_drawer_cash,
        total_drops=row.total_drops,
        total_expenses=row.total_expenses,
        variance=row.variance,
        notes=row.notes,
    )


def _summary_out(summary: ShiftSummary) -> ShiftSummaryOut:
    if summary.variance == 0:
        status = "balanced"
    else:
        status = "over" if summary.variance > 0 else "short"
    return ShiftSummaryOut(**summary.__dict__, status=status)


@router.get("", response_model=list[ShiftOut])
def list_shifts(
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: ShiftService = Depends(get_service),
) -> list[ShiftOut]:
    # Cashiers only see their own drawer history.
    actor_filter = None if actor.has_permission(Role.MANAGER) else actor.id
    return [_shift_out(row) for row in service.list_shifts(actor_filter)]


@router.post("", response_model=ShiftOut, status_code=201)
def open_shift(
    payload: ShiftOpen,
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: ShiftService = Depends(get_service),
) -> ShiftOut:
    return _shift_out(service.open_shift(actor.id, payload.starting_drawer_cash))


@router.post("/current/close", response_model=ShiftSummaryOut)
def close_current_shift(
    payload: ShiftClose,
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: ShiftService = Depends(get_service),
) -> ShiftSummaryOut:
    return _summary_out(service.close_current_shift(actor.id, payload.ending_drawer_cash, payload.notes))


@router.post("/{shift_id}/close", response_model=ShiftSummaryOut)
def close_shift(
    shift_id: int,
    payload: ShiftClose,
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: ShiftService = Depends(get_service),
) -> ShiftSummaryOut:
    summary = service.close_shift(shift_id, payload.ending_drawer_cash, actor.id, payload.notes, role=actor.role)
    return _summary_out(summary)
