from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text

from safe_ledger.db.session import Base


class ManualSafeCount(Base):
    __tablename__ = "manual_safe_counts"
    __append_only__ = True

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(String(64), nullable=False)
    expected_amount = Column(Numeric(12, 2), nullable=False)
    actual_amount = Column(Numeric(12, 2), nullable=False)
    variance = Column(Numeric(12, 2), nullable=False)  # actual - expected
    timestamp = Column(DateTime, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)
