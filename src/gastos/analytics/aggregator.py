"""
Aggregate views over the expense list.

Every function here is pure: it recomputes from the full list it is given
and keeps no state between calls. Foreign amounts are converted with a
fixed foreign-to-local rate passed in by the caller.
"""
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple, Union

from gastos.domain.enums import Currency
from gastos.domain.models import Expense
from gastos.services.models import DashboardSummary

MONTH_NAMES = ['Ene', 'Feb', 'Mar', 'Abr', 'May', 'Jun', 'Jul', 'Ago', 'Sep', 'Oct', 'Nov', 'Dic']

ZERO = Decimal("0")

Rate = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class CurrencyTotals:
    """Spend per currency, each summed on its own (no conversion)"""
    local: Decimal = ZERO
    foreign: Decimal = ZERO


def _as_rate(rate: Rate) -> Decimal:
    value = rate if isinstance(rate, Decimal) else Decimal(str(rate))
    if value < 0:
        raise ValueError(f"Exchange rate must be non-negative, got {rate}")
    return value


def period_label(year: int, month: int) -> str:
    """2025, 3 -> 'Mar 2025'"""
    return f"{MONTH_NAMES[month - 1]} {year}"


def totals_by_currency(expenses: Iterable[Expense]) -> CurrencyTotals:
    local = ZERO
    foreign = ZERO
    for expense in expenses:
        if expense.currency == Currency.PEN:
            local += expense.amount
        else:
            foreign += expense.amount
    return CurrencyTotals(local=local, foreign=foreign)


def blended_total(expenses: Iterable[Expense], rate: Rate) -> Decimal:
    """Total spend in local currency: local + foreign * rate"""
    totals = totals_by_currency(expenses)
    return totals.local + totals.foreign * _as_rate(rate)


def totals_by_category(expenses: Iterable[Expense], rate: Rate) -> List[Tuple[str, Decimal]]:
    """
    Blended spend per category.

    Sorted by amount descending; ties are broken by category name ascending.
    """
    rate = _as_rate(rate)
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for expense in expenses:
        totals[expense.category] += expense.amount_in_local(rate)

    return sorted(totals.items(), key=lambda item: (-item[1], item[0]))


def totals_by_period(expenses: Iterable[Expense], rate: Rate) -> List[Tuple[str, Decimal]]:
    """
    Blended spend per statement period, labelled like 'Mar 2025'.

    Periods come out in chronological order (year, then month).
    """
    rate = _as_rate(rate)
    totals: Dict[Tuple[int, int], Decimal] = defaultdict(Decimal)
    for expense in expenses:
        totals[expense.period_key] += expense.amount_in_local(rate)

    return [
        (period_label(year, month), amount)
        for (year, month), amount in sorted(totals.items())
    ]


def summarize(expenses: Iterable[Expense], rate: Rate) -> DashboardSummary:
    """Compute every dashboard view in one pass over a snapshot of the list"""
    expenses = list(expenses)
    rate = _as_rate(rate)
    by_currency = totals_by_currency(expenses)

    return DashboardSummary(
        rate=rate,
        expense_count=len(expenses),
        local_total=by_currency.local,
        foreign_total=by_currency.foreign,
        blended_total=by_currency.local + by_currency.foreign * rate,
        by_category=totals_by_category(expenses, rate),
        by_period=totals_by_period(expenses, rate),
    )
