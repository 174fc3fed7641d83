import pytest
from datetime import date
from typing import List

from gastos.categorization.categories import DEFAULT_CATEGORIES
from gastos.config.settings import Settings
from gastos.domain.enums import Currency
from gastos.domain.models import Expense
from gastos.repositories.memory_store import InMemoryKeyValueStore
from gastos.services.expense_service import ExpenseService
from tests.helpers.factories import make_expense


@pytest.fixture
def settings() -> Settings:
    """Settings that don't depend on config files"""
    return Settings(categories=list(DEFAULT_CATEGORIES))


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def classifier(mocker):
    """Mock external classifier with no real behaviour"""
    return mocker.Mock()


@pytest.fixture
def service(store, classifier, settings) -> ExpenseService:
    """Service with an in-memory store and a mocked classifier"""
    return ExpenseService(store=store, classifier=classifier, settings=settings)


@pytest.fixture
def sample_expenses() -> List[Expense]:
    return [
        make_expense(name="Wong", amount="100.00", category="Alimentación",
                     period_month="02", spent_on=date(2025, 2, 3)),
        make_expense(name="Netflix", amount="10.00", currency=Currency.USD,
                     category="Entretenimiento", period_month="03", spent_on=date(2025, 3, 1)),
        make_expense(name="Starbucks", amount="15.50", category="Café",
                     period_month="03", spent_on=date(2025, 3, 12)),
    ]
