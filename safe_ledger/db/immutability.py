"""ORM listeners that keep ledger facts append-only.

Models flagged ``__append_only__`` may never be updated or deleted. Models
with ``__closed_by__`` may be updated only while that column is still null
(the single open -> closed transition) and may never be deleted. Bulk
``UPDATE``/``DELETE`` statements aimed at append-only tables are rejected
before they reach the database.
"""

from __future__ import annotations

from sqlalchemy import event, inspect, select
from sqlalchemy.orm import Session

from safe_ledger.core.logging import get_logger
from safe_ledger.db.session import Base
from safe_ledger.errors import ImmutabilityViolation

logger = get_logger(__name__)


def _append_only_tables() -> set[str]:
    return {
        mapper.class_.__tablename__
        for mapper in Base.registry.mappers
        if getattr(mapper.class_, "__append_only__", False)
    }


def _blocked(target, operation: str, reason: str) -> ImmutabilityViolation:
    table = target.__tablename__
    logger.error("immutability_violation_blocked", table=table, record_id=target.id, operation=operation)
    return ImmutabilityViolation(table, target.id, reason)


def _check_update(mapper, connection, target) -> None:
    cls = type(target)
    if getattr(cls, "__append_only__", False):
        raise _blocked(target, "UPDATE", f"{cls.__tablename__} rows are append-only")

    marker = getattr(cls, "__closed_by__", None)
    if marker is None:
        return
    state = inspect(target)
    if marker in state.unloaded:
        # Expired after a commit; read what is stored, not what is cached.
        table = mapper.local_table
        previous = connection.execute(select(table.c[marker]).where(table.c.id == target.id)).scalar()
    else:
        history = state.attrs[marker].history
        values = history.deleted or history.unchanged
        previous = values[0] if values else None
    if previous is not None:
        raise _blocked(target, "UPDATE", f"{cls.__tablename__} row is closed and cannot change")


def _check_delete(mapper, connection, target) -> None:
    cls = type(target)
    if getattr(cls, "__append_only__", False) or getattr(cls, "__closed_by__", None):
        raise _blocked(target, "DELETE", f"{cls.__tablename__} rows cannot be deleted")


def _check_bulk(orm_execute_state) -> None:
    if not (orm_execute_state.is_update or orm_execute_state.is_delete):
        return
    table = getattr(orm_execute_state.statement, "table", None)
    if table is not None and table.name in _append_only_tables():
        operation = "UPDATE" if orm_execute_state.is_update else "DELETE"
        logger.error("immutability_violation_blocked", table=table.name, operation=operation, bulk=True)
        raise ImmutabilityViolation(table.name, "*", f"bulk {operation.lower()} of {table.name} is not allowed")


def register_immutability_listeners() -> None:
    """Install the listeners once; safe to call repeatedly."""
    from safe_ledger import models  # noqa: F401  ensure every mapper is configured

    if not event.contains(Base, "before_update", _check_update):
        event.listen(Base, "before_update", _check_update, propagate=True)
        event.listen(Base, "before_delete", _check_delete, propagate=True)
    if not event.contains(Session, "do_orm_execute", _check_bulk):
        event.listen(Session, "do_orm_execute", _check_bulk)
