from __future__ import annotations

from safe_ledger.core.logging import get_logger
from safe_ledger.errors import NotFound, ValidationError
from safe_ledger.ledger.money import non_negative_amount
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import Employee

logger = get_logger(__name__)


class EmployeeService:
    def __init__(self, store: LedgerStore):
        self.store = store

    def create_employee(self, actor_id: str, name: str, hourly_rate: object) -> Employee:
        name = (name or "").strip()
        if not name:
            raise ValidationError("name is required", field="name")
        rate = non_negative_amount(hourly_rate, "hourly_rate")
        with self.store.transaction("create_employee"):
            employee = self.store.append(Employee(name=name, hourly_rate=rate, active=True), actor_id)
        logger.info("employee_created", employee_id=employee.id)
        return employee

    def update_employee(
        self,
        actor_id: str,
        employee_id: int,
        hourly_rate: object | None = None,
        active: bool | None = None,
    ) -> Employee:
        values: dict[str, object] = {}
        if hourly_rate is not None:
            values["hourly_rate"] = non_negative_amount(hourly_rate, "hourly_rate")
        if active is not None:
            values["active"] = active
        if not values:
            raise ValidationError("nothing to update")

        with self.store.transaction("update_employee"):
            employee = self.store.employee(employee_id)
            if employee is None:
                raise NotFound("employee", employee_id)
            self.store.update(employee, values, actor_id)
        logger.info("employee_updated", employee_id=employee_id, fields=sorted(values))
        return employee

    def list_employees(self, include_inactive: bool = False) -> list[Employee]:
        return self.store.employees(active_only=not include_inactive)
