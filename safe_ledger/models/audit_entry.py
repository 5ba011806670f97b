from sqlalchemy import JSON, Column, DateTime, Integer, String

from safe_ledger.db.session import Base

INSERT = "insert"
UPDATE = "update"
DELETE = "delete"
ACTIONS = (INSERT, UPDATE, DELETE)


class AuditEntry(Base):
    __tablename__ = "audit_log"
    __append_only__ = True

    id = Column(Integer, primary_key=True, index=True)
    table_name = Column(String(64), nullable=False, index=True)
    record_id = Column(String(64), nullable=False)
    action = Column(String(10), nullable=False)
    old_value = Column(JSON, nullable=True)
    new_value = Column(JSON, nullable=True)
    actor_id = Column(String(64), nullable=False, index=True)
    changed_at = Column(DateTime, nullable=False, index=True)
