"""Pure derivations over slices of the fact streams.

Nothing here touches the store: callers fetch the rows for the window they
care about and hand the amounts in. Every figure is rebuilt from history on
each call, so sums are order independent and safe to recompute after a
crash.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from .money import ZERO, round2, total

HOURS_PLACES = Decimal("0.01")
SECONDS_PER_HOUR = Decimal(3600)


def safe_balance(confirmed_drops: Iterable[Decimal], withdrawals: Iterable[Decimal]) -> Decimal:
    return round2(total(confirmed_drops) - total(withdrawals))


def count_variance(expected: Decimal, actual: Decimal) -> Decimal:
    return round2(actual - expected)


@dataclass(frozen=True)
class ShiftFigures:
    starting_cash: Decimal
    ending_cash: Decimal
    total_drops: Decimal
    total_expenses: Decimal
    expected_ending: Decimal
    variance: Decimal


def shift_figures(
    starting_cash: Decimal,
    ending_cash: Decimal,
    drops: Iterable[Decimal],
    cash_expenses: Iterable[Decimal],
) -> ShiftFigures:
    # Cash expenses are reported alongside but do not reduce the expected drawer.
    total_drops = total(drops)
    expected_ending = round2(starting_cash - total_drops)
    return ShiftFigures(
        starting_cash=round2(starting_cash),
        ending_cash=round2(ending_cash),
        total_drops=total_drops,
        total_expenses=total(cash_expenses),
        expected_ending=expected_ending,
        variance=round2(ending_cash - expected_ending),
    )


def cash_sales(drops: Iterable[Decimal], cash_expenses: Iterable[Decimal]) -> Decimal:
    return round2(total(drops) + total(cash_expenses))


@dataclass(frozen=True)
class SalesFigures:
    card_sales: Decimal
    cash_sales: Decimal
    total_sales: Decimal
    variance: Decimal


def sales_figures(card: Decimal, cash: Decimal, expected_total: Decimal | None = None) -> SalesFigures:
    total_sales = round2(card + cash)
    variance = round2(total_sales - expected_total) if expected_total is not None else ZERO
    return SalesFigures(card_sales=round2(card), cash_sales=round2(cash), total_sales=total_sales, variance=variance)


@dataclass(frozen=True)
class BankVariance:
    expected_deposits: Decimal
    actual_deposits: Decimal
    variance: Decimal

    @property
    def status(self) -> str:
        if self.variance == 0:
            return "balanced"
        return "over" if self.variance > 0 else "short"


def bank_variance(
    card_sales: Iterable[Decimal],
    check_expenses: Iterable[Decimal],
    deposits: Iterable[Decimal],
) -> BankVariance:
    expected = round2(total(card_sales) + total(check_expenses))
    actual = total(deposits)
    return BankVariance(expected_deposits=expected, actual_deposits=actual, variance=round2(actual - expected))


def worked_hours(clock_in: datetime, clock_out: datetime | None) -> Decimal:
    """Exact hours for one closed entry; open entries count as zero."""
    if clock_out is None:
        return Decimal(0)
    seconds = Decimal(str((clock_out - clock_in).total_seconds()))
    return max(seconds / SECONDS_PER_HOUR, Decimal(0))


def total_hours(entries: Iterable[tuple[datetime, datetime | None]]) -> Decimal:
    hours = sum((worked_hours(start, end) for start, end in entries), Decimal(0))
    return hours.quantize(HOURS_PLACES)


@dataclass(frozen=True)
class PayFigures:
    hours: Decimal
    hourly_rate: Decimal
    gross_pay: Decimal
    expenses_total: Decimal
    net_pay: Decimal


def pay_figures(hours: Decimal, hourly_rate: Decimal, expenses: Iterable[Decimal]) -> PayFigures:
    gross = round2(hours * hourly_rate)
    expenses_total = total(expenses)
    return PayFigures(
        hours=hours,
        hourly_rate=round2(hourly_rate),
        gross_pay=gross,
        expenses_total=expenses_total,
        net_pay=round2(gross - expenses_total),
    )
