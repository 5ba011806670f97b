from .audit_entry import AuditEntry
from .daily_sales import DailySales
from .deposit import Deposit
from .employee import Employee
from .employee_expense import EmployeeExpense
from .expense import Expense
from .ledger_lock import LedgerLock
from .manual_safe_count import ManualSafeCount
from .paycheck import Paycheck
from .safe_drop import SafeDrop
from .shift import Shift
from .time_entry import TimeEntry
from .vendor import Vendor
from .withdrawal import Withdrawal

__all__ = [
    "AuditEntry",
    "DailySales",
    "Deposit",
    "Employee",
    "EmployeeExpense",
    "Expense",
    "LedgerLock",
    "ManualSafeCount",
    "Paycheck",
    "SafeDrop",
    "Shift",
    "TimeEntry",
    "Vendor",
    "Withdrawal",
]
