from __future__ import annotations

import datetime as dt
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from safe_ledger.api.deps import get_store, require_role
from safe_ledger.core.identity import Actor, Role
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import DailySales

from .service import SalesService

router = APIRouter(prefix="/sales", tags=["sales"])


def get_service(store: LedgerStore = Depends(get_store)) -> SalesService:
    return SalesService(store)


class CashSalesOut(BaseModel):
    date: dt.date
    cash_sales: Decimal


class DailySalesClose(BaseModel):
    card_sales: Decimal
    expected_total: Decimal | None = None
    notes: str | None = None


class DailySalesOut(BaseModel):
    id: int
    date: dt.date
    card_sales: Decimal
    cash_sales: Decimal
    total_sales: Decimal
    variance: Decimal
    closed_by_actor_id: str
    notes: str | None = None
    updated_at: dt.datetime


def _sales_out(row: DailySales) -> DailySalesOut:
    return DailySalesOut(
        id=row.id,
        date=row.date,
        card_sales=row.card_sales,
        cash_sales=row.cash_sales,
        total_sales=row.total_sales,
        variance=row.variance,
        closed_by_actor_id=row.closed_by_actor_id,
        notes=row.notes,
        updated_at=row.updated_at,
    )


@router.get("/cash", response_model=CashSalesOut)
def derive_cash_sales(
    date: dt.date,
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: SalesService = Depends(get_service),
) -> CashSalesOut:
    return CashSalesOut(date=date, cash_sales=service.derive_cash_sales(date))


@router.get("", response_model=list[DailySalesOut])
def list_daily_sales(
    start: dt.date,
    end: dt.date,
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: SalesService = Depends(get_service),
) -> list[DailySalesOut]:
    return [_sales_out(row) for row in service.list_daily_sales(start, end)]


@router.put("/{day}", response_model=DailySalesOut)
def close_daily_sales(
    day: dt.date,
    payload: DailySalesClose,
    actor: Actor = Depends(require_role(Role.CASHIER)),
    service: SalesService = Depends(get_service),
) -> DailySalesOut:
    row = service.close_daily_sales(
        day,
        payload.card_sales,
        actor.id,
        notes=payload.notes,
        expected_total=payload.expected_total,
    )
    return _sales_out(row)
