from __future__ import annotations

from datetime import date

from safe_ledger.core.logging import get_logger
from safe_ledger.errors import NotFound, ValidationError
from safe_ledger.ledger.money import positive_amount
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import Deposit, Expense, Vendor
from safe_ledger.models.expense import PAYMENT_TYPES
from safe_ledger.models.vendor import DEPOSIT_SOURCE, VENDOR

logger = get_logger(__name__)

VENDOR_TYPES = (VENDOR, DEPOSIT_SOURCE)


class ExpenseService:
    """Vendor expenses, bank deposits and the vendors both point at."""

    def __init__(self, store: LedgerStore):
        self.store = store

    def _vendor(self, vendor_id: int, expected_type: str) -> Vendor:
        vendor = self.store.vendor(vendor_id)
        if vendor is None:
            raise NotFound("vendor", vendor_id)
        if not vendor.active:
            raise ValidationError(f"Vendor {vendor_id} is inactive", field="vendor_id")
        if vendor.type != expected_type:
            raise ValidationError(f"Vendor {vendor_id} is not a {expected_type}", field="vendor_id")
        return vendor

    def record_expense(
        self,
        actor_id: str,
        vendor_id: int,
        amount: object,
        payment_type: str,
        day: date,
        notes: str | None = None,
        receipt_ref: str | None = None,
    ) -> Expense:
        amount = positive_amount(amount)
        if payment_type not in PAYMENT_TYPES:
            raise ValidationError(f"payment_type must be one of {', '.join(PAYMENT_TYPES)}", field="payment_type")

        with self.store.transaction("record_expense"):
            self._vendor(vendor_id, VENDOR)
            expense = self.store.append(
                Expense(
                    vendor_id=vendor_id,
                    actor_id=actor_id,
                    amount=amount,
                    payment_type=payment_type,
                    date=day,
                    notes=notes,
                    receipt_ref=receipt_ref,
                ),
                actor_id,
            )
        logger.info("expense_recorded", expense_id=expense.id, amount=str(amount), payment_type=payment_type)
        return expense

    def record_deposit(
        self,
        actor_id: str,
        vendor_id: int,
        amount: object,
        day: date,
        notes: str | None = None,
    ) -> Deposit:
        amount = positive_amount(amount)
        with self.store.transaction("record_deposit"):
            self._vendor(vendor_id, DEPOSIT_SOURCE)
            deposit = self.store.append(
                Deposit(vendor_id=vendor_id, actor_id=actor_id, amount=amount, date=day, notes=notes),
                actor_id,
            )
        logger.info("deposit_recorded", deposit_id=deposit.id, amount=str(amount))
        return deposit

    def list_expenses(self, first: date | None = None, last: date | None = None) -> list[Expense]:
        return self.store.expenses(first, last)

    def list_deposits(self, first: date | None = None, last: date | None = None) -> list[Deposit]:
        return self.store.deposits(first, last)

    def create_vendor(self, actor_id: str, name: str, vendor_type: str = VENDOR) -> Vendor:
        name = (name or "").strip()
        if not name:
            raise ValidationError("name is required", field="name")
        if vendor_type not in VENDOR_TYPES:
            raise ValidationError(f"type must be one of {', '.join(VENDOR_TYPES)}", field="type")
        with self.store.transaction("create_vendor"):
            vendor = self.store.append(Vendor(name=name, type=vendor_type, active=True), actor_id)
        logger.info("vendor_created", vendor_id=vendor.id, type=vendor_type)
        return vendor

    def set_vendor_active(self, actor_id: str, vendor_id: int, active: bool) -> Vendor:
        with self.store.transaction("set_vendor_active"):
            vendor = self.store.vendor(vendor_id)
            if vendor is None:
                raise NotFound("vendor", vendor_id)
            self.store.update(vendor, {"active": active}, actor_id)
        logger.info("vendor_updated", vendor_id=vendor_id, active=active)
        return vendor

    def list_vendors(self, vendor_type: str | None = None, include_inactive: bool = False) -> list[Vendor]:
        if vendor_type is not None and vendor_type not in VENDOR_TYPES:
            raise ValidationError(f"type must be one of {', '.join(VENDOR_TYPES)}", field="type")
        return self.store.vendors(vendor_type, active_only=not include_inactive)
