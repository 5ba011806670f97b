from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from safe_ledger.api.deps import get_store, require_role
from safe_ledger.core.identity import Actor, Role
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import Deposit, Expense, Vendor

from .service import ExpenseService

router = APIRouter(prefix="/expenses", tags=["expenses"])
deposits_router = APIRouter(prefix="/deposits", tags=["deposits"])
vendors_router = APIRouter(prefix="/vendors", tags=["vendors"])


def get_service(store: LedgerStore = Depends(get_store)) -> ExpenseService:
    return ExpenseService(store)


class ExpenseCreate(BaseModel):
    vendor_id: int
    amount: Decimal
    payment_type: Literal["cash", "check"]
    date: dt.date
    notes: str | None = None
    receipt_ref: str | None = Field(default=None, max_length=255)


class ExpenseOut(ExpenseCreate):
    id: int
    actor_id: str


class DepositCreate(BaseModel):
    vendor_id: int
    amount: Decimal
    date: dt.date
    notes: str | None = None


class DepositOut(DepositCreate):
    id: int
    actor_id: str


class VendorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: Literal["vendor", "deposit_source"] = "vendor"


class VendorUpdate(BaseModel):
    active: bool


class VendorOut(VendorCreate):
    id: int
    active: bool


def _expense_out(row: Expense) -> ExpenseOut:
    return ExpenseOut(
        id=row.id,
        actor_id=row.actor_id,
        vendor_id=row.vendor_id,
        amount=row.amount,
        payment_type=row.payment_type,
        date=row.date,
        notes=row.notes,
        receipt_ref=row.receipt_ref,
    )


def _deposit_out(row: Deposit) -> DepositOut:
    return DepositOut(
        id=row.id,
        actor_id=row.actor_id,
        vendor_id=row.vendor_id,
        amount=row.amount,
        date=row.date,
        notes=row.notes,
    )


def _vendor_out(row: Vendor) -> VendorOut:
    return VendorOut(id=row.id, name=row.name, type=row.type, active=row.active)


@router.get("", response_model=list[ExpenseOut])
def list_expenses(
    start: dt.date | None = None,
    end: dt.date | None = None,
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: ExpenseService = Depends(get_service),
) -> list[ExpenseOut]:
    return [_expense_out(row) for row in service.list_expenses(start, end)]


@router.post("", response_model=ExpenseOut, status_code=201)
def record_expense(
    payload: ExpenseCreate,
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: ExpenseService = Depends(get_service),
) -> ExpenseOut:
    row = service.record_expense(
        actor.id,
        payload.vendor_id,
        payload.amount,
        payload.payment_type,
        payload.date,
        notes=payload.notes,
        receipt_ref=payload.receipt_ref,
    )
    return _expense_out(row)


@deposits_router.get("", response_model=list[DepositOut])
def list_deposits(
    start: dt.date | None = None,
    end: dt.date | None = None,
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: ExpenseService = Depends(get_service),
) -> list[DepositOut]:
    return [_deposit_out(row) for row in service.list_deposits(start, end)]


@deposits_router.post("", response_model=DepositOut, status_code=201)
def record_deposit(
    payload: DepositCreate,
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: ExpenseService = Depends(get_service),
) -> DepositOut:
    row = service.record_deposit(actor.id, payload.vendor_id, payload.amount, payload.date, notes=payload.notes)
    return _deposit_out(row)


@vendors_router.get("", response_model=list[VendorOut])
def list_vendors(
    type: Literal["vendor", "deposit_source"] | None = None,
    include_inactive: bool = False,
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: ExpenseService = Depends(get_service),
) -> list[VendorOut]:
    return [_vendor_out(row) for row in service.list_vendors(type, include_inactive)]


@vendors_router.post("", response_model=VendorOut, status_code=201)
def create_vendor(
    payload: VendorCreate,
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: ExpenseService = Depends(get_service),
) -> VendorOut:
    return _vendor_out(service.create_vendor(actor.id, payload.name, payload.type))


@vendors_router.patch("/{vendor_id}", response_model=VendorOut)
def update_vendor(
    vendor_id: int,
    payload: VendorUpdate,
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: ExpenseService = Depends(get_service),
) -> VendorOut:
    return _vendor_out(service.set_vendor_active(actor.id, vendor_id, payload.active))
