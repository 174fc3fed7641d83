from typing import List, Optional, Sequence

from gastos.categorization.base import (
    CategorizationRequest,
    CategorizationRule,
    CategorySuggestion,
)
from gastos.categorization.rules import ClassifierRule, CorrectionRule, DefaultRule
from gastos.categorization.categories import DEFAULT_CATEGORY
from gastos.categorization.corrections import CorrectionTable
from gastos.classifier.base import ExpenseClassifier


class Categorizer:
    """
    Picks a category for an expense name.

    Builds a chain of rules in priority order:
    1. Learned corrections (exact name match)
    2. External classifier (when one is configured)
    3. Default category ("Otros")

    Categorizing never writes to the correction table. Learning only
    happens when a person confirms or overrides a suggestion.

    Usage:
        categorizer = Categorizer(classifier=OpenAIClassifier())
        category = categorizer.categorize("Starbucks", categories, corrections)
    """

    def __init__(
        self,
        classifier: Optional[ExpenseClassifier] = None,
        default_category: str = DEFAULT_CATEGORY,
    ):
        """
        Initialize the categorizer.

        Args:
            classifier: External classifier. Without one, names that have no
                learned correction get the default category.
            default_category: Category used when nothing else answers
        """
        self.classifier = classifier
        self.default_category = default_category
        self._rule_chain: Optional[CategorizationRule] = None

        self._build_rule_chain()

    def _build_rule_chain(self) -> None:
        rules: List[CategorizationRule] = [CorrectionRule()]

        if self.classifier is not None:
            rules.append(ClassifierRule(self.classifier))

        rules.append(DefaultRule(self.default_category))

        self._rule_chain = rules[0]
        for i in range(len(rules) - 1):
            rules[i].set_next(rules[i + 1])

    def suggest(
        self,
        name: str,
        valid_categories: Sequence[str],
        corrections: CorrectionTable,
    ) -> CategorySuggestion:
        """
        Suggest a category for an expense name, with where it came from.

        Args:
            name: Expense name. Surrounding whitespace is ignored.
            valid_categories: Current category set
            corrections: Learned correction table

        Returns:
            CategorySuggestion

        Raises:
            ValueError: If the name is empty after trimming
        """
        key = name.strip()
        if not key:
            raise ValueError("Cannot categorize an empty expense name")

        request = CategorizationRequest(
            name=key,
            valid_categories=list(valid_categories),
            corrections=corrections,
        )
        suggestion = self._rule_chain.categorize(request)

        assert suggestion is not None, "Rule chain should never return None"

        return suggestion

    def categorize(
        self,
        name: str,
        valid_categories: Sequence[str],
        corrections: CorrectionTable,
    ) -> str:
        """
        Categorize a single expense name.

        Example:
            ```
            >>> categorizer.categorize("Starbucks", ["Café", "Otros"], corrections)
            'Café'
            ```
        """
        return self.suggest(name, valid_categories, corrections).category

    def get_rule_chain_info(self) -> str:
        """
        Describe the active rule chain, one rule per line in priority order.
        """
        rules = []
        current = self._rule_chain
        priority = 1

        while current:
            rules.append(f"{priority}. {current}")
            current = current._next_rule
            priority += 1

        return "\n".join(rules)

    def __repr__(self) -> str:
        num_rules = 0
        current = self._rule_chain
        while current:
            num_rules += 1
            current = current._next_rule

        return f"Categorizer({num_rules} rules in chain)"
