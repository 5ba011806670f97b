from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from safe_ledger.core.logging import get_logger
from safe_ledger.core.observability import withdrawals_rejected
from safe_ledger.errors import InsufficientSafeBalance, ValidationError
from safe_ledger.ledger.business_day import BusinessCalendar
from safe_ledger.ledger.calculations import count_variance, safe_balance
from safe_ledger.ledger.identifiers import DROP_PREFIX, WITHDRAWAL_PREFIX, new_number, retry_on_number_collision
from safe_ledger.ledger.money import non_negative_amount, positive_amount
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import ManualSafeCount, SafeDrop, Withdrawal
from safe_ledger.models.ledger_lock import SAFE, SHIFTS

logger = get_logger(__name__)


@dataclass(frozen=True)
class SafeHistory:
    drops: list[SafeDrop]
    withdrawals: list[Withdrawal]


class SafeService:
    """Drops, withdrawals and counts against the one physical safe."""

    def __init__(self, store: LedgerStore, calendar: BusinessCalendar | None = None):
        self.store = store
        self.calendar = calendar or BusinessCalendar.from_settings(store.settings)

    def compute_safe_balance(self) -> Decimal:
        return safe_balance(self.store.confirmed_drop_amounts(), self.store.withdrawal_amounts())

    def compute_expected_safe_balance(self) -> Decimal:
        # Counts compare against the same figure the safe reports.
        return self.compute_safe_balance()

    def record_drop(self, actor_id: str, amount: object, notes: str | None = None) -> SafeDrop:
        amount = positive_amount(amount)
        drop = retry_on_number_collision("receipt_number", lambda: self._append_drop(actor_id, amount, notes))
        logger.info("drop_recorded", receipt_number=drop.receipt_number, amount=str(amount), shift_id=drop.shift_id)
        return drop

    def _append_drop(self, actor_id: str, amount: Decimal, notes: str | None) -> SafeDrop:
        with self.store.transaction("record_drop"):
            # Serialized with shift open/close so the drop lands in exactly one shift.
            self.store.lock(SHIFTS)
            moment = self.store.now()
            shift = self.store.open_shift_for(actor_id)
            return self.store.append(
                SafeDrop(
                    actor_id=actor_id,
                    amount=amount,
                    timestamp=moment,
                    receipt_number=new_number(DROP_PREFIX, moment, self.store.receipt_number_taken),
                    confirmed=True,
                    shift_id=shift.id if shift else None,
                    notes=notes,
                ),
                actor_id,
            )

    def record_withdrawal(
        self,
        actor_id: str,
        amount: object,
        reason: str | None,
        notes: str | None = None,
    ) -> Withdrawal:
        """Withdraw cash, never past the balance computed under the safe lock."""
        amount = positive_amount(amount)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("reason is required", field="reason")

        withdrawal, balance = retry_on_number_collision(
            "withdrawal_number", lambda: self._append_withdrawal(actor_id, amount, reason, notes)
        )
        logger.info(
            "withdrawal_recorded",
            withdrawal_number=withdrawal.withdrawal_number,
            amount=str(amount),
            balance_before=str(balance),
        )
        return withdrawal

    def _append_withdrawal(
        self, actor_id: str, amount: Decimal, reason: str, notes: str | None
    ) -> tuple[Withdrawal, Decimal]:
        with self.store.transaction("record_withdrawal"):
            self.store.lock(SAFE)
            balance = self.compute_safe_balance()
            if amount > balance:
                logger.warning("withdrawal_rejected", amount=str(amount), balance=str(balance))
                withdrawals_rejected.add(1)
                raise InsufficientSafeBalance(amount, balance)
            moment = self.store.now()
            withdrawal = self.store.append(
                Withdrawal(
                    withdrawal_number=new_number(WITHDRAWAL_PREFIX, moment, self.store.withdrawal_number_taken),
                    actor_id=actor_id,
                    approver_id=actor_id,
                    amount=amount,
                    reason=reason,
                    timestamp=moment,
                    notes=notes,
                ),
                actor_id,
            )
        return withdrawal, balance

    def record_manual_count(self, actor_id: str, actual_amount: object, notes: str | None = None) -> ManualSafeCount:
        actual = non_negative_amount(actual_amount, "actual_amount")
        with self.store.transaction("record_manual_count"):
            expected = self.compute_expected_safe_balance()
            count = self.store.append(
                ManualSafeCount(
                    actor_id=actor_id,
                    expected_amount=expected,
                    actual_amount=actual,
                    variance=count_variance(expected, actual),
                    timestamp=self.store.now(),
                    notes=notes,
                ),
                actor_id,
            )
        logger.info(
            "safe_counted",
            expected=str(count.expected_amount),
            actual=str(count.actual_amount),
            variance=str(count.variance),
        )
        return count

    def history(self, start: date | None = None, end: date | None = None) -> SafeHistory:
        if start and end and start > end:
            raise ValidationError("start must not be after end", field="start")
        window = self.calendar.bounded_window(start, end)
        return SafeHistory(drops=self.store.drops(window), withdrawals=self.store.withdrawals(window))
