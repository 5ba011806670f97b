from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text

from safe_ledger.db.session import Base


class Withdrawal(Base):
    __tablename__ = "withdrawals"
    __append_only__ = True

    id = Column(Integer, primary_key=True, index=True)
    withdrawal_number = Column(String(40), nullable=False, unique=True)
    actor_id = Column(String(64), nullable=False, index=True)
    approver_id = Column(String(64), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    reason = Column(String(255), nullable=False)
    timestamp = Column(DateTime, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)
