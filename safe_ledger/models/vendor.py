from sqlalchemy import Boolean, Column, DateTime, Integer, String

from safe_ledger.db.session import Base

VENDOR = "vendor"
DEPOSIT_SOURCE = "deposit_source"


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False, default=VENDOR)  # vendor|deposit_source
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False)
