from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text

from safe_ledger.db.session import Base


class Shift(Base):
    __tablename__ = "shifts"
    __closed_by__ = "end_time"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(String(64), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    starting_drawer_cash = Column(Numeric(12, 2), nullable=False)
    ending_drawer_cash = Column(Numeric(12, 2), nullable=True)
    total_drops = Column(Numeric(12, 2), nullable=False, default=0)
    total_expenses = Column(Numeric(12, 2), nullable=False, default=0)
    variance = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)

    @property
    def is_open(self) -> bool:
        return self.end_time is None
