from __future__ import annotations

from datetime import date

from safe_ledger.core.logging import get_logger
from safe_ledger.errors import ValidationError
from safe_ledger.ledger.calculations import BankVariance, bank_variance
from safe_ledger.ledger.store import LedgerStore

logger = get_logger(__name__)


class ReconciliationService:
    def __init__(self, store: LedgerStore):
        self.store = store

    def reconcile(self, start: date, end: date) -> BankVariance:
        """Deposits against card sales plus check expenses, both dates inclusive."""
        if start > end:
            raise ValidationError("start must not be after end", field="start")
        result = bank_variance(
            self.store.card_sales_amounts(start, end),
            self.store.check_expense_amounts(start, end),
            self.store.deposit_amounts(start, end),
        )
        logger.info(
            "bank_reconciled",
            start=start.isoformat(),
            end=end.isoformat(),
            variance=str(result.variance),
            status=result.status,
        )
        return result
