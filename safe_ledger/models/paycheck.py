from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship

from safe_ledger.db.session import Base


class Paycheck(Base):
    __tablename__ = "paychecks"
    __append_only__ = True
    __table_args__ = (
        UniqueConstraint("employee_id", "week_start", "week_end", name="uq_paychecks_employee_week"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    week_start = Column(Date, nullable=False)
    week_end = Column(Date, nullable=False)
    hours = Column(Numeric(8, 2), nullable=False)
    hourly_rate = Column(Numeric(12, 2), nullable=False)
    gross_pay = Column(Numeric(12, 2), nullable=False)
    expenses_total = Column(Numeric(12, 2), nullable=False)
    net_pay = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, nullable=False)

    employee = relationship("Employee")
