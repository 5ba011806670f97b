from __future__ import annotations

from decimal import Decimal
from typing import Any


class LedgerError(Exception):
    """Base class for every error the ledger core reports to its caller."""

    code = "ledger_error"
    status_code = 500

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "detail": self.message}
        for key, value in self.context.items():
            payload[key] = str(value) if isinstance(value, Decimal) else value
        return payload


class ValidationError(LedgerError):
    code = "validation_error"
    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, field=field)
        self.field = field


class PermissionDenied(LedgerError):
    code = "permission_denied"
    status_code = 403

    def __init__(self, required_role: str):
        super().__init__(f"{required_role} role required", required_role=required_role)


class NotFound(LedgerError):
    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} {key} not found", entity=entity, key=str(key))


class ConflictError(LedgerError):
    code = "conflict"
    status_code = 409


class InsufficientSafeBalance(ConflictError):
    code = "insufficient_safe_balance"

    def __init__(self, requested: Decimal, balance: Decimal):
        super().__init__(
            f"Withdrawal of {requested} exceeds safe balance of {balance}",
            requested=requested,
            current_balance=balance,
        )
        self.requested = requested
        self.balance = balance


class DuplicatePayment(ConflictError):
    code = "duplicate_payment"

    def __init__(self, employee_id: int, week_start: Any, week_end: Any, paycheck_id: int | None = None, paid_at: Any = None):
        super().__init__(
            f"Employee {employee_id} already paid for {week_start} - {week_end}",
            employee_id=employee_id,
            week_start=str(week_start),
            week_end=str(week_end),
            paycheck_id=paycheck_id,
            paid_at=paid_at.isoformat() if paid_at is not None else None,
        )
        self.paycheck_id = paycheck_id
        self.paid_at = paid_at


class ShiftAlreadyClosed(ConflictError):
    code = "shift_already_closed"

    def __init__(self, shift_id: int):
        super().__init__(f"Shift {shift_id} is already closed", shift_id=shift_id)


class ShiftAlreadyOpen(ConflictError):
    code = "shift_already_open"

    def __init__(self, actor_id: str, shift_id: int):
        super().__init__(
            f"Actor {actor_id} already has open shift {shift_id}",
            actor_id=actor_id,
            shift_id=shift_id,
        )


class AlreadyClockedIn(ConflictError):
    code = "already_clocked_in"

    def __init__(self, employee_id: int):
        super().__init__(f"Employee {employee_id} is already clocked in", employee_id=employee_id)


class NotClockedIn(ConflictError):
    code = "not_clocked_in"

    def __init__(self, employee_id: int):
        super().__init__(f"Employee {employee_id} has no open time entry", employee_id=employee_id)


class ImmutabilityViolation(ConflictError):
    code = "immutability_violation"

    def __init__(self, table: str, record_id: Any, reason: str):
        super().__init__(reason, table=table, record_id=str(record_id))


class TransientStoreError(LedgerError):
    """The record store could not be reached; the operation is safe to retry."""

    code = "store_unavailable"
    status_code = 503

    def __init__(self, operation: str, cause: Exception | None = None):
        super().__init__(f"Store unavailable during {operation}", operation=operation)
        self.cause = cause
