from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from gastos.categorization.corrections import CorrectionTable


class SuggestionSource(Enum):
    """Where a suggested category came from"""
    CORRECTION = "correction"
    CLASSIFIER = "classifier"
    DEFAULT = "default"


@dataclass(frozen=True)
class CategorizationRequest:
    """Everything a rule may look at to categorize an expense name"""
    name: str
    valid_categories: Sequence[str]
    corrections: CorrectionTable


@dataclass(frozen=True)
class CategorySuggestion:
    """A category proposed for an expense name, with its origin"""
    name: str
    category: str
    source: SuggestionSource


class CategorizationRule(ABC):
    """
    Abstract base class for all categorization rules.

    Implements Chain of Responsibility:
    - Each rule tries to categorize an expense name
    - If it can't it passes to the next rule
    - Rules are tried in priority order

    Usage:
        Create chain: learned corrections -> external classifier -> default
        ```
        correction_rule = CorrectionRule()
        correction_rule.set_next(ClassifierRule(classifier)).set_next(DefaultRule())

        suggestion = correction_rule.categorize(request)
        ```
    """

    source: SuggestionSource

    def __init__(self):
        self._next_rule: Optional['CategorizationRule'] = None

    def set_next(self, rule: 'CategorizationRule') -> 'CategorizationRule':
        """
        Set the next rule in the chain.

        Args:
            rule: The next rule to try if this one has no answer

        Returns:
            The rule that was set (for chaining)

        Example:
            `rule1.set_next(rule2).set_next(rule3)`
        """
        self._next_rule = rule
        return rule

    @abstractmethod
    def _resolve(self, request: CategorizationRequest) -> Optional[str]:
        """
        Try to produce a category for the request.

        Subclasses implement their specific lookup here.

        Args:
            request: The name being categorized plus its context

        Returns:
            Category name, or None to hand over to the next rule
        """
        pass

    def categorize(self, request: CategorizationRequest) -> Optional[CategorySuggestion]:
        """
        Attempt to categorize an expense name.

        This is the main method called by clients. It:
        1. Asks this rule for a category
        2. If it has one, returns it tagged with this rule's source
        3. Otherwise, passes to the next rule in the chain
        4. If there are no more rules, returns None

        Args:
            request: The name being categorized plus its context

        Returns:
            CategorySuggestion if any rule in the chain answered, None otherwise
        """
        category = self._resolve(request)
        if category is not None:
            return CategorySuggestion(
                name=request.name,
                category=category,
                source=self.source,
            )

        if self._next_rule:
            return self._next_rule.categorize(request)

        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
