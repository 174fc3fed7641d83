from typing import Optional, Sequence

from gastos.categorization.base import (
    CategorizationRequest,
    CategorizationRule,
    SuggestionSource,
)
from gastos.categorization.categories import DEFAULT_CATEGORY
from gastos.classifier.base import ExpenseClassifier
from gastos.logging_setup import get_logger

_logger = get_logger("gastos.categorization.rules")


def match_category(answer: Optional[str], valid_categories: Sequence[str]) -> Optional[str]:
    """
    Map a free-text answer onto one of the valid categories.

    Exact matches win; otherwise a case-insensitive match returns the
    canonical spelling from `valid_categories`. Anything else is None.
    """
    if not answer:
        return None

    candidate = answer.strip().strip('"\'.').strip()
    if not candidate:
        return None

    if candidate in valid_categories:
        return candidate

    folded = candidate.casefold()
    for category in valid_categories:
        if category.casefold() == folded:
            return category

    return None


class CorrectionRule(CategorizationRule):
    """
    Rule that answers from the learned correction table.

    Exact, case-sensitive lookup. When it answers, nothing further down
    the chain runs, so a learned name never reaches the external classifier.
    """

    source = SuggestionSource.CORRECTION

    def _resolve(self, request: CategorizationRequest) -> Optional[str]:
        return request.corrections.lookup(request.name)


class ClassifierRule(CategorizationRule):
    """
    Rule that asks the external classifier.

    The classifier gets the valid categories and the whole correction table
    as hints. Failures and unusable answers are logged and passed on.
    """

    source = SuggestionSource.CLASSIFIER

    def __init__(self, classifier: ExpenseClassifier):
        super().__init__()
        self.classifier = classifier

    def _resolve(self, request: CategorizationRequest) -> Optional[str]:
        try:
            answer = self.classifier.classify_name(
                request.name,
                list(request.valid_categories),
                request.corrections.to_dict(),
            )
        except Exception as e:
            _logger.warning(
                "classify_name failed name=%r error=%s: %s",
                request.name,
                e.__class__.__name__,
                e,
            )
            return None

        category = match_category(answer, request.valid_categories)
        if category is None:
            _logger.info("classify_name unusable answer name=%r answer=%r", request.name, answer)
        return category

    def __repr__(self) -> str:
        return f"ClassifierRule({self.classifier.__class__.__name__})"


class DefaultRule(CategorizationRule):
    """
    Fallback rule that always answers.

    Should be the last rule in the chain.
    """

    source = SuggestionSource.DEFAULT

    def __init__(self, default_category: str = DEFAULT_CATEGORY):
        super().__init__()
        self.default_category = default_category

    def _resolve(self, _: CategorizationRequest) -> Optional[str]:
        return self.default_category

    def __repr__(self) -> str:
        return f"DefaultRule('{self.default_category}')"
