from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, Text

from safe_ledger.db.session import Base


class DailySales(Base):
    __tablename__ = "daily_sales"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, unique=True)
    card_sales = Column(Numeric(12, 2), nullable=False)
    cash_sales = Column(Numeric(12, 2), nullable=False)  # always derived from drops + cash expenses
    total_sales = Column(Numeric(12, 2), nullable=False)
    variance = Column(Numeric(12, 2), nullable=False, default=0)
    closed_by_actor_id = Column(String(64), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
