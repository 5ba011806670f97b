from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import Session

from safe_ledger.db.session import Base

SAFE = "safe"
DAILY_SALES = "daily_sales"
SHIFTS = "shifts"
TIME_CLOCK = "time_clock"
LOCK_NAMES = (SAFE, DAILY_SALES, SHIFTS, TIME_CLOCK)


class LedgerLock(Base):
    """One row per serialized resource; writers bump ``version`` to take the row lock."""

    __tablename__ = "ledger_locks"

    name = Column(String(40), primary_key=True)
    version = Column(Integer, nullable=False, default=0)
    touched_at = Column(DateTime, nullable=True)

    @classmethod
    def ensure(cls, db: Session) -> None:
        existing = {row.name for row in db.query(cls).all()}
        for name in LOCK_NAMES:
            if name not in existing:
                db.add(cls(name=name, version=0))
