from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from safe_ledger.db.session import Base

CASH = "cash"
CHECK = "check"
PAYMENT_TYPES = (CASH, CHECK)


class Expense(Base):
    __tablename__ = "expenses"
    __append_only__ = True

    id = Column(Integer, primary_key=True, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False)
    actor_id = Column(String(64), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_type = Column(String(10), nullable=False)  # cash|check
    date = Column(Date, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    receipt_ref = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False)

    vendor = relationship("Vendor")
