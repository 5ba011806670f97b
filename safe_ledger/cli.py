from __future__ import annotations

import argparse
import sys
from contextlib import contextmanager
from datetime import date
from typing import Iterator

from safe_ledger.core.clock import SystemClock
from safe_ledger.core.config import settings
from safe_ledger.core.logging import configure_logging
from safe_ledger.db import session as db_session
from safe_ledger.db.immutability import register_immutability_listeners
from safe_ledger.domains.payroll.service import PayrollService
from safe_ledger.domains.reconciliation.service import ReconciliationService
from safe_ledger.domains.safe.service import SafeService
from safe_ledger.errors import LedgerError
from safe_ledger.ledger.store import LedgerStore
from safe_ledger.seed.seed_data import seed


@contextmanager
def store_from_args(args: argparse.Namespace) -> Iterator[LedgerStore]:
    register_immutability_listeners()
    with db_session.session_scope() as db:
        yield LedgerStore(db, SystemClock(), settings)


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from None


def cmd_init_db(args: argparse.Namespace) -> None:
    db_session.init_db(db_session.engine)
    print(f"Initialised ledger tables at {db_session.engine.url.render_as_string(hide_password=True)}")


def cmd_seed(args: argparse.Namespace) -> None:
    with store_from_args(args) as store:
        created = seed(store)
    print(f"Seeded {created['employees']} employees and {created['vendors']} vendors")


def cmd_balance(args: argparse.Namespace) -> None:
    with store_from_args(args) as store:
        balance = SafeService(store).compute_safe_balance()
    print(f"Safe balance: {balance}")


def cmd_reconcile(args: argparse.Namespace) -> None:
    with store_from_args(args) as store:
        result = ReconciliationService(store).reconcile(args.start, args.end)
    print(f"Bank reconciliation {args.start} - {args.end}")
    print(f"  expected deposits: {result.expected_deposits}")
    print(f"  actual deposits:   {result.actual_deposits}")
    print(f"  variance:          {result.variance} ({result.status})")


def cmd_payroll(args: argparse.Namespace) -> None:
    with store_from_args(args) as store:
        rows = PayrollService(store).compute_weekly_payroll(args.start, args.end)
    if not rows:
        print("No active employees")
        return
    for row in rows:
        status = f"paid {row.paid_at:%Y-%m-%d}" if row.paid_at else "unpaid"
        print(
            f"{row.employee_id} {row.name} hours={row.total_hours} rate={row.hourly_rate} "
            f"expenses={row.expenses_total} net={row.estimated_net} {status}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="safe-ledger", description="Cash custody ledger administration")
    sub = parser.add_subparsers(dest="command", required=True)

    init_db = sub.add_parser("init-db", help="Create ledger tables and lock rows")
    init_db.set_defaults(func=cmd_init_db)

    seed_cmd = sub.add_parser("seed", help="Insert starter employees and vendors")
    seed_cmd.set_defaults(func=cmd_seed)

    balance = sub.add_parser("balance", help="Print the current safe balance")
    balance.set_defaults(func=cmd_balance)

    reconcile = sub.add_parser("reconcile", help="Compare bank deposits to card sales plus check expenses")
    reconcile.add_argument("start", type=parse_date)
    reconcile.add_argument("end", type=parse_date)
    reconcile.set_defaults(func=cmd_reconcile)

    payroll = sub.add_parser("payroll", help="Weekly payroll summary for active employees")
    payroll.add_argument("start", type=parse_date)
    payroll.add_argument("end", type=parse_date)
    payroll.set_defaults(func=cmd_payroll)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging(settings.log_level)
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except LedgerError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
