from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from safe_ledger.api.deps import get_store, require_role
from safe_ledger.core.identity import Actor, Role
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import Employee

from .service import EmployeeService

router = APIRouter(prefix="/employees", tags=["employees"])


def get_service(store: LedgerStore = Depends(get_store)) -> EmployeeService:
    return EmployeeService(store)


class EmployeeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    hourly_rate: Decimal = Decimal("0")


class EmployeeUpdate(BaseModel):
    hourly_rate: Decimal | None = None
    active: bool | None = None


class EmployeeOut(BaseModel):
    id: int
    name: str
    hourly_rate: Decimal
    active: bool


def _employee_out(row: Employee) -> EmployeeOut:
    return EmployeeOut(id=row.id, name=row.name, hourly_rate=row.hourly_rate, active=row.active)


@router.get("", response_model=list[EmployeeOut])
def list_employees(
    include_inactive: bool = False,
    actor: Actor = Depends(require_role(Role.MANAGER)),
    service: EmployeeService = Depends(get_service),
) -> list[EmployeeOut]:
    return [_employee_out(row) for row in service.list_employees(include_inactive)]


@router.post("", response_model=EmployeeOut, status_code=201)
def create_employee(
    payload: EmployeeCreate,
    actor: Actor = Depends(require_role(Role.ADMIN)),
    service: EmployeeService = Depends(get_service),
) -> EmployeeOut:
    return _employee_out(service.create_employee(actor.id, payload.name, payload.hourly_rate))


@router.patch("/{employee_id}", response_model=EmployeeOut)
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    actor: Actor = Depends(require_role(Role.ADMIN)),
    service: EmployeeService = Depends(get_service),
) -> EmployeeOut:
    row = service.update_employee(actor.id, employee_id, payload.hourly_rate, payload.active)
    return _employee_out(row)
