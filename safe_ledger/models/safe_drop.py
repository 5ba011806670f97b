from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text

from safe_ledger.db.session import Base


class SafeDrop(Base):
    __tablename__ = "safe_drops"
    __append_only__ = True

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(String(64), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    timestamp = Column(DateTime, nullable=False, index=True)
    receipt_number = Column(String(40), nullable=False, unique=True)
    confirmed = Column(Boolean, nullable=False, default=True)
    shift_id = Column(Integer, ForeignKey("shifts.id"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)
