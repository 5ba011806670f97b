from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from safe_ledger.api.deps import get_store, require_role
from safe_ledger.core.identity import Actor, Role
from safe_ledger.ledger.audit import AuditQuery
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.models import AuditEntry

router = APIRouter(prefix="/audit", tags=["audit"])


def get_query(store: LedgerStore = Depends(get_store)) -> AuditQuery:
    return AuditQuery(store.session, store.clock, store.settings)


class AuditEntryOut(BaseModel):
    id: int
    table_name: str
    record_id: str
    action: str
    old_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None
    actor_id: str
    changed_at: datetime


class AuditPageOut(BaseModel):
    entries: list[AuditEntryOut]
    next_cursor: int | None = None


def _entry_out(row: AuditEntry) -> AuditEntryOut:
    return AuditEntryOut(
        id=row.id,
        table_name=row.table_name,
        record_id=row.record_id,
        action=row.action,
        old_value=row.old_value,
        new_value=row.new_value,
        actor_id=row.actor_id,
        changed_at=row.changed_at,
    )


@router.get("", response_model=AuditPageOut)
def query_audit(
    table: str | None = None,
    action: Literal["insert", "update", "delete"] | None = None,
    actor_id: str | None = None,
    changed_from: datetime | None = None,
    changed_to: datetime | None = None,
    after_id: int | None = None,
    limit: int | None = None,
    actor: Actor = Depends(require_role(Role.ADMIN)),
    query: AuditQuery = Depends(get_query),
) -> AuditPageOut:
    filters = query.filters(changed_from, changed_to, table_name=table, action=action, actor_id=actor_id)
    page = query.page(filters, after_id=after_id, limit=limit)
    return AuditPageOut(entries=[_entry_out(row) for row in page.entries], next_cursor=page.next_cursor)
