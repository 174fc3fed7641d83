import pytest
from datetime import date
from decimal import Decimal

from gastos.domain.enums import Bank, Currency
from gastos.domain.models import Expense, ExpenseDraft, InvalidExpenseError, parse_amount
from tests.helpers.factories import make_expense


@pytest.mark.unit
class TestExpense:

    def test_ids_are_unique(self):
        assert make_expense().id != make_expense().id

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidExpenseError):
            make_expense(amount="-0.01")

    def test_zero_amount_allowed(self):
        assert make_expense(amount="0").amount == Decimal("0")

    def test_period_month_is_padded(self):
        assert make_expense(period_month="3").period_month == "03"

    @pytest.mark.parametrize("month,year", [("0", "2025"), ("13", "2025"), ("ab", "2025"), ("03", "25")])
    def test_invalid_period_rejected(self, month, year):
        with pytest.raises(InvalidExpenseError):
            make_expense(period_month=month, period_year=year)

    def test_amount_in_local(self):
        assert make_expense(amount="10", currency=Currency.USD).amount_in_local(Decimal("3.70")) == Decimal("37.00")
        assert make_expense(amount="10", currency=Currency.PEN).amount_in_local(Decimal("3.70")) == Decimal("10")

    def test_dict_round_trip_keeps_precision(self):
        expense = make_expense(amount="1234567.89", bank=Bank.SCOTIABANK)

        restored = Expense.from_dict(expense.to_dict())

        assert restored == expense
        assert isinstance(restored.amount, Decimal)


@pytest.mark.unit
class TestExpenseDraft:

    def test_defaults_to_today(self):
        draft = ExpenseDraft(name=" Tambo ", category="Alimentación", amount="4.20")

        expense = draft.to_expense(today=date(2025, 7, 15))

        assert expense.name == "Tambo"
        assert expense.date == date(2025, 7, 15)
        assert (expense.period_month, expense.period_year) == ("07", "2025")
        assert expense.currency == Currency.PEN

    def test_missing_name(self):
        with pytest.raises(InvalidExpenseError):
            ExpenseDraft(name="  ", category="Otros", amount="1").to_expense()


@pytest.mark.unit
class TestParseAmount:

    @pytest.mark.parametrize("value", [None, "", "  ", "abc", "NaN", "Infinity"])
    def test_invalid(self, value):
        with pytest.raises(InvalidExpenseError):
            parse_amount(value)

    def test_float_keeps_short_repr(self):
        assert parse_amount(0.1) == Decimal("0.1")
