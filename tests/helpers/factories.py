from datetime import date
from decimal import Decimal

from gastos.domain.enums import Bank, Currency
from gastos.domain.models import Expense


def make_expense(
    name: str = "Starbucks",
    amount: str = "10.00",
    currency: Currency = Currency.PEN,
    category: str = "Café",
    period_month: str = "03",
    period_year: str = "2025",
    spent_on: date = date(2025, 3, 10),
    bank: Bank = Bank.BCP,
) -> Expense:
    """Build an expense with sensible defaults for tests"""
    return Expense(
        name=name,
        category=category,
        date=spent_on,
        amount=Decimal(amount),
        currency=currency,
        bank=bank,
        period_month=period_month,
        period_year=period_year,
    )
