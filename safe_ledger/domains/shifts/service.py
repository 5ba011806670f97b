from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from safe_ledger.core.identity import Actor, Role
from safe_ledger.core.logging import get_logger
from safe_ledger.errors import NotFound, PermissionDenied, ShiftAlreadyClosed, ShiftAlreadyOpen
from safe_ledger.ledger.business_day import BusinessCalendar, Window
from safe_ledger.ledger.calculations import ShiftFigures, shift_figures
from safe_ledger.ledger.money import non_negative_amount
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import Shift
from safe_ledger.models.ledger_lock import SHIFTS

logger = get_logger(__name__)

# Drops stamped at the closing instant still belong to the shift.
CLOSE_INCLUSIVE = timedelta(microseconds=1)


@dataclass(frozen=True)
class ShiftSummary:
    shift_id: int
    starting_cash: Decimal
    ending_cash: Decimal
    total_drops: Decimal
    total_expenses: Decimal
    expected_ending: Decimal
    variance: Decimal

    @classmethod
    def from_figures(cls, shift_id: int, figures: ShiftFigures) -> "ShiftSummary":
        return cls(
            shift_id=shift_id,
            starting_cash=figures.starting_cash,
            ending_cash=figures.ending_cash,
            total_drops=figures.total_drops,
            total_expenses=figures.total_expenses,
            expected_ending=figures.expected_ending,
            variance=figures.variance,
        )


class ShiftService:
    """Drawer shifts: ``open`` until closed once, then never again.

    A shift reconciles against the drops its cashier made between the shift's
    own start and close instants, and the cash expenses they logged on the
    business dates the shift spans.
    """

    def __init__(self, store: LedgerStore, calendar: BusinessCalendar | None = None):
        self.store = store
        self.calendar = calendar or BusinessCalendar.from_settings(store.settings)

    def open_shift(self, actor_id: str, starting_drawer_cash: object) -> Shift:
        starting = non_negative_amount(starting_drawer_cash, "starting_drawer_cash")
        with self.store.transaction("open_shift"):
            self.store.lock(SHIFTS)
            current = self.store.open_shift_for(actor_id)
            if current is not None:
                raise ShiftAlreadyOpen(actor_id, current.id)
            moment = self.store.now()
            shift = self.store.append(
                Shift(
                    actor_id=actor_id,
                    start_time=moment,
                    starting_drawer_cash=starting,
                    total_drops=0,
                    total_expenses=0,
                    variance=0,
                ),
                actor_id,
            )
        logger.info("shift_opened", shift_id=shift.id, starting_cash=str(starting))
        return shift

    def close_shift(
        self,
        shift_id: int,
        ending_drawer_cash: object,
        actor_id: str,
        notes: str | None = None,
        role: Role = Role.CASHIER,
    ) -> ShiftSummary:
        """Close a shift. Cashiers may only close their own; managers may close any."""
        ending = non_negative_amount(ending_drawer_cash, "ending_drawer_cash")
        shift = self.store.shift(shift_id)
        if shift is None:
            raise NotFound("shift", shift_id)
        if shift.actor_id != actor_id and not Actor(actor_id, Role(role)).has_permission(Role.MANAGER):
            logger.warning("shift_close_refused", shift_id=shift.id, owner_id=shift.actor_id)
            raise PermissionDenied(Role.MANAGER.value)
        return self._close(shift, ending, actor_id, notes)

    def close_current_shift(self, actor_id: str, ending_drawer_cash: object, notes: str | None = None) -> ShiftSummary:
        ending = non_negative_amount(ending_drawer_cash, "ending_drawer_cash")
        shift = self.store.open_shift_for(actor_id)
        if shift is None:
            raise NotFound("open shift for actor", actor_id)
        return self._close(shift, ending, actor_id, notes)

    def _close(self, shift: Shift, ending: Decimal, actor_id: str, notes: str | None) -> ShiftSummary:
        if not shift.is_open:
            raise ShiftAlreadyClosed(shift.id)

        with self.store.transaction("close_shift"):
            # Totals are read after the lock so no committed drop escapes the window.
            self.store.lock(SHIFTS)
            closed_at = self.store.now()
            window = Window(shift.start_time, closed_at + CLOSE_INCLUSIVE)
            drops = self.store.confirmed_drop_amounts(window, actor_id=shift.actor_id)
            expenses = self.store.cash_expense_amounts(
                self.calendar.business_date(shift.start_time),
                self.calendar.business_date(closed_at),
                actor_id=shift.actor_id,
            )
            figures = shift_figures(Decimal(shift.starting_drawer_cash), ending, drops, expenses)
            closed = self.store.close_once(
                shift,
                {
                    "end_time": closed_at,
                    "ending_drawer_cash": figures.ending_cash,
                    "total_drops": figures.total_drops,
                    "total_expenses": figures.total_expenses,
                    "variance": figures.variance,
                    "notes": notes,
                },
                actor_id,
            )
            if not closed:
                raise ShiftAlreadyClosed(shift.id)

        logger.info(
            "shift_closed",
            shift_id=shift.id,
            expected_ending=str(figures.expected_ending),
            variance=str(figures.variance),
        )
        return ShiftSummary.from_figures(shift.id, figures)

    def list_shifts(self, actor_id: str | None = None) -> list[Shift]:
        return self.store.shifts(actor_id=actor_id)
