from decimal import Decimal

from safe_ledger.domains.employees.service import EmployeeService
from safe_ledger.domains.expenses.service import ExpenseService
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models.vendor import DEPOSIT_SOURCE, VENDOR

SEED_ACTOR = "seed"


def seed(store: LedgerStore) -> dict[str, int]:
    """Reference data a fresh install needs before the first shift."""
    if store.employees(active_only=False) or store.vendors(active_only=False):
        return {"employees": 0, "vendors": 0}

    employees = EmployeeService(store)
    vendors = ExpenseService(store)

    created_employees = [
        employees.create_employee(SEED_ACTOR, "Ada Lovelace", Decimal("18.50")),
        employees.create_employee(SEED_ACTOR, "Grace Hopper", Decimal("16.00")),
    ]
    created_vendors = [
        vendors.create_vendor(SEED_ACTOR, "Produce Supplier", VENDOR),
        vendors.create_vendor(SEED_ACTOR, "Linen Service", VENDOR),
        vendors.create_vendor(SEED_ACTOR, "Card Processor", DEPOSIT_SOURCE),
        vendors.create_vendor(SEED_ACTOR, "Branch Deposit", DEPOSIT_SOURCE),
    ]
    return {"employees": len(created_employees), "vendors": len(created_vendors)}
