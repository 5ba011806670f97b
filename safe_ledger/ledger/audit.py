"""Append-only audit trail.

``AuditRecorder`` can only append; ``AuditQuery`` can only read. Neither
offers an update or delete path, and the ORM listeners in
``safe_ledger.db.immutability`` reject any attempt made around them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Iterator

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from safe_ledger.core.clock import Clock, to_storage
from safe_ledger.core.config import Settings, settings as default_settings
from safe_ledger.core.observability import facts_appended
from safe_ledger.errors import ValidationError
from safe_ledger.models import AuditEntry
from safe_ledger.models.audit_entry import ACTIONS, INSERT, UPDATE

from .retry import transient_retry

Snapshot = dict[str, Any]


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def snapshot(row: Any) -> Snapshot:
    """Column values of a mapped row in a JSON-safe form."""
    mapper = inspect(type(row))
    return {column.key: _jsonable(getattr(row, column.key)) for column in mapper.column_attrs}


class AuditRecorder:
    def __init__(self, session: Session, clock: Clock):
        self.session = session
        self.clock = clock

    def append(
        self,
        table_name: str,
        record_id: Any,
        action: str,
        actor_id: str,
        old_value: Snapshot | None = None,
        new_value: Snapshot | None = None,
    ) -> AuditEntry:
        if action not in ACTIONS:
            raise ValidationError(f"Unknown audit action {action}", field="action")
        entry = AuditEntry(
            table_name=table_name,
            record_id=str(record_id),
            action=action,
            old_value=old_value if action == UPDATE else None,
            new_value=new_value,
            actor_id=actor_id,
            changed_at=to_storage(self.clock.now()),
        )
        self.session.add(entry)
        facts_appended.add(1, {"table": table_name, "action": action})
        return entry

    def inserted(self, row: Any, actor_id: str) -> AuditEntry:
        return self.append(row.__tablename__, row.id, INSERT, actor_id, new_value=snapshot(row))

    def updated(self, row: Any, before: Snapshot, actor_id: str) -> AuditEntry:
        return self.append(row.__tablename__, row.id, UPDATE, actor_id, old_value=before, new_value=snapshot(row))


@dataclass(frozen=True)
class AuditFilters:
    changed_from: datetime
    changed_to: datetime
    table_name: str | None = None
    action: str | None = None
    actor_id: str | None = None


@dataclass(frozen=True)
class AuditPage:
    entries: list[AuditEntry]
    next_cursor: int | None


class AuditQuery:
    """Read side of the audit trail, newest first, keyset-paginated by id."""

    def __init__(self, session: Session, clock: Clock, config: Settings | None = None):
        self.session = session
        self.clock = clock
        self.settings = config or default_settings

    def filters(
        self,
        changed_from: datetime | None = None,
        changed_to: datetime | None = None,
        table_name: str | None = None,
        action: str | None = None,
        actor_id: str | None = None,
    ) -> AuditFilters:
        end = to_storage(changed_to) if changed_to else to_storage(self.clock.now())
        start = (
            to_storage(changed_from)
            if changed_from
            else end - timedelta(days=self.settings.audit_default_window_days)
        )
        if start > end:
            raise ValidationError("changed_from must not be after changed_to", field="changed_from")
        if action is not None and action not in ACTIONS:
            raise ValidationError(f"Unknown audit action {action}", field="action")
        return AuditFilters(start, end, table_name, action, actor_id)

    @transient_retry
    def page(self, filters: AuditFilters, after_id: int | None = None, limit: int | None = None) -> AuditPage:
        limit = limit or self.settings.audit_page_size
        if limit < 1 or limit > self.settings.audit_max_page_size:
            raise ValidationError(
                f"limit must be between 1 and {self.settings.audit_max_page_size}", field="limit"
            )
        query = self.session.query(AuditEntry).filter(
            AuditEntry.changed_at >= filters.changed_from,
            AuditEntry.changed_at <= filters.changed_to,
        )
        if filters.table_name:
            query = query.filter(AuditEntry.table_name == filters.table_name)
        if filters.action:
            query = query.filter(AuditEntry.action == filters.action)
        if filters.actor_id:
            query = query.filter(AuditEntry.actor_id == filters.actor_id)
        if after_id is not None:
            query = query.filter(AuditEntry.id < after_id)

        rows = query.order_by(AuditEntry.id.desc()).limit(limit + 1).all()
        has_more = len(rows) > limit
        entries = rows[:limit]
        return AuditPage(entries=entries, next_cursor=entries[-1].id if has_more else None)

    def iter_entries(self, filters: AuditFilters, after_id: int | None = None) -> Iterator[AuditEntry]:
        """Lazily walk every matching entry; restart from any entry id as cursor."""
        cursor = after_id
        while True:
            page = self.page(filters, after_id=cursor)
            yield from page.entries
            if page.next_cursor is None:
                return
            cursor = page.next_cursor
