import uuid
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from datetime import date
from typing import Any, Dict, Optional, Tuple

from gastos.domain.enums import Bank, Currency


class InvalidExpenseError(ValueError):
    """Raised when an expense is missing a required field or has invalid values."""
    pass


def new_expense_id() -> str:
    return uuid.uuid4().hex


def parse_amount(value: Any) -> Decimal:
    """
    Parse an amount into a non-negative Decimal.

    Raises:
        InvalidExpenseError: If the value is empty, not numeric or negative
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidExpenseError("Amount is required")

    try:
        # float -> str first so 0.1 stays 0.1
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidExpenseError(f"Invalid amount: {value!r}")

    if not amount.is_finite():
        raise InvalidExpenseError(f"Invalid amount: {value!r}")

    if amount < 0:
        raise InvalidExpenseError(f"Amount must be non-negative, got {amount}")

    return amount


def normalize_period(period_month: Any, period_year: Any) -> Tuple[str, str]:
    """Return the period as ('MM', 'YYYY') strings, validating both parts."""
    month = str(period_month).strip()
    year = str(period_year).strip()

    if not month.isdigit() or not 1 <= int(month) <= 12:
        raise InvalidExpenseError(f"Period month must be between 01 and 12, got {period_month!r}")

    if not (year.isdigit() and len(year) == 4):
        raise InvalidExpenseError(f"Period year must have four digits, got {period_year!r}")

    return month.zfill(2), year


@dataclass
class Expense:
    """Core domain model representing a single recorded expense"""
    name: str
    category: str
    date: date
    amount: Decimal
    currency: Currency
    bank: Bank
    period_month: str
    period_year: str
    id: str = field(default_factory=new_expense_id)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check the invariants of a stored expense.

        Raises:
            InvalidExpenseError: If any field is missing or out of range
        """
        if not self.name or not self.name.strip():
            raise InvalidExpenseError("Expense name is required")

        if not self.category:
            raise InvalidExpenseError("Expense category is required")

        if not isinstance(self.amount, Decimal):
            self.amount = parse_amount(self.amount)
        elif self.amount < 0:
            raise InvalidExpenseError(f"Amount must be non-negative, got {self.amount}")

        self.period_month, self.period_year = normalize_period(self.period_month, self.period_year)

    @property
    def period_key(self) -> Tuple[int, int]:
        """(year, month) used to order statement periods chronologically"""
        return int(self.period_year), int(self.period_month)

    def amount_in_local(self, rate: Decimal) -> Decimal:
        """Amount converted to local currency using the given foreign-to-local rate"""
        if self.currency.is_local:
            return self.amount
        return self.amount * rate

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the key-value blob store"""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "date": self.date.isoformat(),
            "amount": str(self.amount), # Store as string for precision
            "currency": self.currency.value,
            "bank": self.bank.value,
            "period_month": self.period_month,
            "period_year": self.period_year,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        return cls(
            id=data["id"],
            name=data["name"],
            category=data["category"],
            date=date.fromisoformat(data["date"]),
            amount=parse_amount(data["amount"]),
            currency=Currency(data["currency"]),
            bank=Bank(data["bank"]),
            period_month=data["period_month"],
            period_year=data["period_year"],
        )

    def __repr__(self):
        return f"Expense({self.date}, {self.name[:30]}, {self.amount} {self.currency.value}, {self.category})"


@dataclass
class ExpenseDraft:
    """
    Manual entry form state.

    Everything is optional here; `to_expense()` is the only way a draft
    becomes an Expense, so an invalid form never reaches the record store.
    """
    name: str = ""
    category: str = ""
    amount: Optional[str] = None
    currency: Currency = Currency.PEN
    bank: Bank = Bank.BCP
    date: Optional[date] = None
    period_month: Optional[str] = None
    period_year: Optional[str] = None

    def to_expense(self, today: Optional["date"] = None) -> Expense:
        """
        Build a validated Expense from the draft.

        Missing date and period default to today's date and month.

        Raises:
            InvalidExpenseError: If a required field is missing or invalid
        """
        today = today or date.today()

        name = self.name.strip() if self.name else ""
        if not name:
            raise InvalidExpenseError("Expense name is required")

        if not self.category:
            raise InvalidExpenseError("Expense category is required")

        expense_date = self.date or today
        return Expense(
            name=name,
            category=self.category,
            date=expense_date,
            amount=parse_amount(self.amount),
            currency=self.currency,
            bank=self.bank,
            period_month=self.period_month or f"{today.month:02d}",
            period_year=self.period_year or str(today.year),
        )
