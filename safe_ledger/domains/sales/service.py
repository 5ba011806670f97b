from __future__ import annotations

from datetime import date
from decimal import Decimal

from safe_ledger.core.logging import get_logger
from safe_ledger.errors import ValidationError
from safe_ledger.ledger.business_day import BusinessCalendar
from safe_ledger.ledger.calculations import cash_sales, sales_figures
from safe_ledger.ledger.money import non_negative_amount
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import DailySales
from safe_ledger.models.ledger_lock import DAILY_SALES

logger = get_logger(__name__)


class SalesService:
    def __init__(self, store: LedgerStore, calendar: BusinessCalendar | None = None):
        self.store = store
        self.calendar = calendar or BusinessCalendar.from_settings(store.settings)

    def derive_cash_sales(self, day: date) -> Decimal:
        """Confirmed drops in the business day plus the cash expenses dated that day."""
        drops = self.store.confirmed_drop_amounts(self.calendar.day_window(day))
        expenses = self.store.cash_expense_amounts(day, day)
        return cash_sales(drops, expenses)

    def close_daily_sales(
        self,
        day: date,
        card_sales: object,
        actor_id: str,
        notes: str | None = None,
        expected_total: object | None = None,
    ) -> DailySales:
        """Write the one sales row for ``day``; a second close overwrites it with an audited update."""
        card = non_negative_amount(card_sales, "card_sales")
        expected = non_negative_amount(expected_total, "expected_total") if expected_total is not None else None

        with self.store.transaction("close_daily_sales"):
            self.store.lock(DAILY_SALES)
            figures = sales_figures(card, self.derive_cash_sales(day), expected)
            moment = self.store.now()
            values = {
                "card_sales": figures.card_sales,
                "cash_sales": figures.cash_sales,
                "total_sales": figures.total_sales,
                "variance": figures.variance,
                "closed_by_actor_id": actor_id,
                "notes": notes,
                "updated_at": moment,
            }
            existing = self.store.daily_sales_for(day)
            if existing is not None:
                row = self.store.update(existing, values, actor_id)
            else:
                row = self.store.append(DailySales(date=day, created_at=moment, **values), actor_id)

        logger.info(
            "daily_sales_closed",
            date=day.isoformat(),
            cash_sales=str(row.cash_sales),
            total_sales=str(row.total_sales),
            replaced=existing is not None,
        )
        return row

    def list_daily_sales(self, first: date, last: date) -> list[DailySales]:
        if first > last:
            raise ValidationError("start must not be after end", field="start")
        return self.store.daily_sales(first, last)
