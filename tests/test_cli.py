from datetime import date

import pytest
from sqlalchemy import create_engine, inspect, text

from safe_ledger import cli
from safe_ledger.db import session as db_session
from safe_ledger.domains.expenses.service import ExpenseService
from safe_ledger.domains.safe.service import SafeService
from safe_ledger.domains.sales.service import SalesService


def test_balance_prints_current_balance(capsys, store, cli_database):
    safe = SafeService(store)
    safe.record_drop("alice", "500.00")
    safe.record_drop("alice", "250.00")
    safe.record_withdrawal("manager-1", "300.00", "Change order")

    assert cli.main(["balance"]) == 0

    assert "Safe balance: 450.00" in capsys.readouterr().out


def test_reconcile_prints_variance(capsys, store, vendor, deposit_source, cli_database):
    SalesService(store).close_daily_sales(date(2024, 1, 10), "1000.00", "alice")
    expenses = ExpenseService(store)
    expenses.record_expense("manager-1", vendor.id, "150.00", "check", date(2024, 1, 10))
    expenses.record_deposit("manager-1", deposit_source.id, "1100.00", date(2024, 1, 11))

    assert cli.main(["reconcile", "2024-01-10", "2024-01-11"]) == 0

    out = capsys.readouterr().out
    assert "expected deposits: 1150.00" in out
    assert "variance:          -50.00 (short)" in out


def test_reversed_range_reports_error(capsys, cli_database):
    assert cli.main(["reconcile", "2024-01-11", "2024-01-10"]) == 1

    assert "error: start must not be after end" in capsys.readouterr().err


def test_bad_date_is_usage_error(cli_database):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["payroll", "last-monday", "2024-01-14"])
    assert excinfo.value.code == 2


def test_seed_then_payroll(capsys, cli_database):
    assert cli.main(["seed"]) == 0
    assert cli.main(["seed"]) == 0
    assert cli.main(["payroll", "2024-01-08", "2024-01-14"]) == 0

    out = capsys.readouterr().out
    assert "Seeded 2 employees and 4 vendors" in out
    assert "Seeded 0 employees and 0 vendors" in out
    assert "Ada Lovelace hours=0.00 rate=18.50" in out
    assert "unpaid" in out


def test_init_db_creates_tables_and_locks(capsys, tmp_path, monkeypatch):
    engine = create_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    monkeypatch.setattr(db_session, "engine", engine)

    assert cli.main(["init-db"]) == 0

    tables = set(inspect(engine).get_table_names())
    assert {"safe_drops", "withdrawals", "paychecks", "audit_log", "ledger_locks"} <= tables
    with engine.connect() as connection:
        assert connection.execute(text("SELECT COUNT(*) FROM ledger_locks")).scalar() == 4
    assert "Initialised ledger tables" in capsys.readouterr().out
    engine.dispose()
