"""
Categorization system for expense tracking.

Suggests a category for an expense name using a chain of responsibility:
learned corrections first, then the external classifier, then the default.

Quick Start:
    >>> from gastos.categorization import Categorizer, CorrectionTable
    >>>
    >>> corrections = CorrectionTable({"Starbucks": "Café"})
    >>> categorizer = Categorizer()
    >>> categorizer.categorize("Starbucks", ["Café", "Otros"], corrections)
    'Café'
"""
from gastos.categorization.categorizer import Categorizer
from gastos.categorization.corrections import CorrectionTable
from gastos.categorization.base import (
    CategorizationRequest,
    CategorizationRule,
    CategorySuggestion,
    SuggestionSource,
)
from gastos.categorization.rules import (
    CorrectionRule,
    ClassifierRule,
    DefaultRule,
)
from gastos.categorization import categories

__all__ = [
    "Categorizer",
    "CorrectionTable",
    "CategorizationRequest",
    "CategorizationRule",
    "CategorySuggestion",
    "SuggestionSource",
    "CorrectionRule",
    "ClassifierRule",
    "DefaultRule",
    "categories",
]
