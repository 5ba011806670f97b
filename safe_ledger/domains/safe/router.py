from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from safe_ledger.api.deps import get_store, require_role
from safe_ledger.core.identity import Actor, Role
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import SafeDrop, Withdrawal

from .service import SafeService

router = APIRouter(prefix="/safe", tags=["safe"])


def get_service(store: LedgerStore = Depends(get_store)) -> SafeService:
    return SafeService(store)


class BalanceOut(BaseModel):
    balance: Decimal


class DropCreate(BaseModel):
    amount: Decimal
    notes: str | None = None


class DropOut(BaseModel):
    id: int
    receipt_number: str
    actor_id: str
    amount: Decimal
    timestamp: datetime
    confirmed: bool
    shift_id: int | None = None
    notes: str | None = None


class WithdrawalCreate(BaseModel):
    amount: Decimal
    reason: str = Field(..., max_length=255)
    notes: str | None = None


class WithdrawalOut(BaseModel):
    id: int
    withdrawal_number: str
    actor_id: str
    approver_id: str
    amount: Decimal
    reason: str
    timestamp: datetime
    notes: str | None = None


class CountCreate(BaseModel):
    actual_amount: Decimal
    notes: str | None = None


class CountOut(BaseModel):
    id: int
    expected: Decimal
    actual: Decimal
    variance: Decimal
    timestamp: datetime


class HistoryOut(BaseModel):
    drops: list[DropOut]
    withdrawals: list[WithdrawalOut]


def _drop_out(row: SafeDrop) -> DropOut:
    return DropOut(
        id=row.id,
        receipt_number=row.receipt_number,
        actor_id=row.actor_id,
        amount=row.amount,
        timestamp=row.timestamp,
        confirmed=row.confirmed,
        shift_id=row.shift_id,
        notes=row.notes,
    )


def _withdrawal_out(row: Withdrawal) -> WithdrawalOut:
    return WithdrawalOut(
        id=row.id,
        withdrawal_number=row.withdrawal_number,
        actor_id=row.actor_id,
        approver_id=row.approver_id,
        amount=row.amount,
        reason=row.reason,
        timestamp=row.timestamp,
        notes=row.notes,
    )


@router.get("/balance", response_model=BalanceOut)
def get_balance(
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: SafeService = Depends(get_service),
) -> BalanceOut:
    return BalanceOut(balance=service.compute_safe_balance())


@router.post("/drops", response_model=DropOut, status_code=201)
def record_drop(
    payload: DropCreate,
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: SafeService = Depends(get_service),
) -> DropOut:
    return _drop_out(service.record_drop(actor.id, payload.amount, payload.notes))


@router.post("/withdrawals", response_model=WithdrawalOut, status_code=201)
def record_withdrawal(
    payload: WithdrawalCreate,
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: SafeService = Depends(get_service),
) -> WithdrawalOut:
    return _withdrawal_out(service.record_withdrawal(actor.id, payload.amount, payload.reason, payload.notes))


@router.post("/counts", response_model=CountOut, status_code=201)
def record_count(
    payload: CountCreate,
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: SafeService = Depends(get_service),
) -> CountOut:
    row = service.record_manual_count(actor.id, payload.actual_amount, payload.notes)
    return CountOut(
        id=row.id,
        expected=row.expected_amount,
        actual=row.actual_amount,
        variance=row.variance,
        timestamp=row.timestamp,
    )


@router.get("/history", response_model=HistoryOut)
def history(
    start: date | None = None,
    end: date | None = None,
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: SafeService = Depends(get_service),
) -> HistoryOut:
    result = service.history(start, end)
    return HistoryOut(
        drops=[_drop_out(row) for row in result.drops],
        withdrawals=[_withdrawal_out(row) for row in result.withdrawals],
    )
