from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from safe_ledger.api.deps import get_store, require_role
from safe_ledger.core.identity import Actor, Role
from safe_ledger.ledger.store import LedgerStore

from .service import ReconciliationService

router = APIRouter(prefix="/reconciliation", tags=["reconciliation"])


def get_service(store: LedgerStore = Depends(get_store)) -> ReconciliationService:
    return ReconciliationService(store)


class ReconciliationOut(BaseModel):
    start: date
    end: date
    expected_deposits: Decimal
    actual_deposits: Decimal
    variance: Decimal
    status: Literal["balanced", "over", "short"]


@router.get("", response_model=ReconciliationOut)
def reconcile(
    start: date,
    end: date,
    actor: Actor = Depends(require_role(Role.ADMIN)),
    service: ReconciliationService = Depends(get_service),
) -> ReconciliationOut:
    result = service.reconcile(start, end)
    return ReconciliationOut(
        start=start,
        end=end,
        expected_deposits=result.expected_deposits,
        actual_deposits=result.actual_deposits,
        variance=result.variance,
        status=result.status,
    )
