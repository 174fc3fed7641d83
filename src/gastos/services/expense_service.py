import json
import mimetypes
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Union

from gastos.analytics.aggregator import Rate, summarize
from gastos.categorization import Categorizer, CategorySuggestion, CorrectionTable
from gastos.categorization.categories import DEFAULT_CATEGORIES
from gastos.classifier.base import ExpenseClassifier, ExtractionError
from gastos.config.settings import Settings
from gastos.domain.enums import Bank
from gastos.domain.models import Expense, ExpenseDraft, InvalidExpenseError, normalize_period
from gastos.logging_setup import get_logger
from gastos.repositories.base import ExpenseNotFoundError, KeyValueStore, PersistenceError
from gastos.services.models import DashboardSummary, ImportResult, PersistResult

_logger = get_logger("gastos.services.expenses")

EXPENSES_KEY = "gastos_personales_data"
CATEGORIES_KEY = "gastos_categorias_data"
CORRECTIONS_KEY = "gastos_correcciones_ia"


class ExpenseService:
    """
    Application state: the expense list, the category set and the learned
    corrections, plus every operation the user can run on them.

    State lives in memory. `load()` reads it from the store and `persist()`
    writes it back; callers persist after each mutation and can inspect
    the returned PersistResult.

    Usage:
        service = ExpenseService(store, classifier=OpenAIClassifier())
        service.load()
        service.add_expense(ExpenseDraft(name="Starbucks", category="Café", amount="12.50"))
        result = service.persist()
    """

    def __init__(
        self,
        store: KeyValueStore,
        classifier: Optional[ExpenseClassifier] = None,
        settings: Optional[Settings] = None,
        categorizer: Optional[Categorizer] = None,
    ):
        self.store = store
        self.classifier = classifier
        self.settings = settings or Settings(categories=list(DEFAULT_CATEGORIES))
        self._categorizer = categorizer

        self.expenses: List[Expense] = []
        self.categories: List[str] = self._default_categories()
        self.corrections = CorrectionTable()

        # Last category suggested for each name, to detect user overrides
        self._last_suggestions: Dict[str, str] = {}

    @property
    def categorizer(self) -> Categorizer:
        """Lazy-load categorizer"""
        if self._categorizer is None:
            self._categorizer = Categorizer(
                classifier=self.classifier,
                default_category=self.settings.default_category,
            )
        return self._categorizer

    def _default_categories(self) -> List[str]:
        return list(self.settings.categories or DEFAULT_CATEGORIES)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load_json(self, key: str):
        raw = self.store.load(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Stored value for '{key}' is not valid JSON") from e

    def load(self) -> None:
        """
        Replace the in-memory state with what the store holds.

        Missing keys fall back to an empty expense list, the default
        category set and an empty correction table.

        Raises:
            PersistenceError: If the store can't be read or holds corrupt data
        """
        expenses_data = self._load_json(EXPENSES_KEY)
        categories_data = self._load_json(CATEGORIES_KEY)
        corrections_data = self._load_json(CORRECTIONS_KEY)

        try:
            self.expenses = [Expense.from_dict(item) for item in expenses_data or []]
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"Stored expenses are malformed: {e}") from e

        if categories_data is None:
            categories_data = self._default_categories()
        elif not isinstance(categories_data, list) or not all(isinstance(c, str) for c in categories_data):
            raise PersistenceError("Stored categories must be a list of names")

        if corrections_data is None:
            corrections_data = {}
        elif not isinstance(corrections_data, dict) or not all(
            isinstance(name, str) and isinstance(category, str)
            for name, category in corrections_data.items()
        ):
            raise PersistenceError("Stored corrections must map names to categories")

        self.categories = list(categories_data)
        self.corrections = CorrectionTable.from_dict(corrections_data)
        self._last_suggestions.clear()

        _logger.debug(
            "loaded state expenses=%d categories=%d corrections=%d",
            len(self.expenses),
            len(self.categories),
            len(self.corrections),
        )

    def persist(self) -> PersistResult:
        """
        Write the whole state to the store.

        Each key is written independently. Failures are logged and reported
        in the result, never raised.
        """
        payloads = {
            EXPENSES_KEY: [expense.to_dict() for expense in self.expenses],
            CATEGORIES_KEY: list(self.categories),
            CORRECTIONS_KEY: self.corrections.to_dict(),
        }

        result = PersistResult()
        for key, payload in payloads.items():
            try:
                self.store.save(key, json.dumps(payload, ensure_ascii=False))
                result.saved_keys.append(key)
            except PersistenceError as e:
                _logger.error("persist failed key=%s error=%s", key, e)
                result.failed_keys.append(key)
                result.errors[key] = str(e)

        return result

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def list_expenses(self) -> List[Expense]:
        """All expenses, most recent first"""
        return sorted(self.expenses, key=lambda e: e.date, reverse=True)

    def get_expense(self, expense_id: str) -> Expense:
        """
        Raises:
            ExpenseNotFoundError: If no expense has this ID
        """
        for expense in self.expenses:
            if expense.id == expense_id:
                return expense
        raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")

    def add_expense(
        self,
        entry: Union[ExpenseDraft, Expense],
        suggestion: Optional[str] = None,
    ) -> Expense:
        """
        Add a manually entered expense.

        If a category was suggested for this name and the user picked a
        different one, the choice is learned as a correction.

        Args:
            entry: Form draft or already built Expense
            suggestion: Category that was suggested for the name. Defaults to
                the last `suggest_category` result for it.

        Returns:
            The stored Expense

        Raises:
            InvalidExpenseError: If a required field is missing or the
                category isn't in the category set. Nothing is stored.
        """
        expense = entry.to_expense() if isinstance(entry, ExpenseDraft) else entry

        if expense.category not in self.categories:
            raise InvalidExpenseError(f"Unknown category '{expense.category}'")

        suggested = self._last_suggestions.pop(expense.name, None)
        if suggestion is not None:
            suggested = suggestion
        if suggested is not None and expense.category != suggested:
            _logger.info(
                "learning override name=%r suggested=%r chosen=%r",
                expense.name,
                suggested,
                expense.category,
            )
            self.corrections.record(expense.name, expense.category)

        self.expenses.append(expense)
        return expense

    def add_many(self, expenses: List[Expense]) -> List[Expense]:
        """Append already validated expenses (e.g. from a statement import)"""
        self.expenses.extend(expenses)
        return expenses

    def delete_expense(self, expense_id: str) -> Expense:
        """
        Remove an expense.

        Raises:
            ExpenseNotFoundError: If no expense has this ID
        """
        expense = self.get_expense(expense_id)
        self.expenses = [e for e in self.expenses if e.id != expense_id]
        return expense

    def update_category(self, expense_id: str, category: str) -> Expense:
        """
        Change an expense's category and learn it for the expense name.

        Raises:
            ExpenseNotFoundError: If no expense has this ID
            InvalidExpenseError: If the category isn't in the category set
        """
        if category not in self.categories:
            raise InvalidExpenseError(f"Unknown category '{category}'")

        expense = self.get_expense(expense_id)

        if self.corrections.lookup(expense.name) != category:
            self.corrections.record(expense.name, category)

        expense.category = category
        return expense

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def add_category(self, name: str) -> bool:
        """
        Add a category. Blank names and duplicates are ignored.

        Returns:
            True if the category was added
        """
        name = name.strip()
        if not name or name in self.categories:
            return False
        self.categories.append(name)
        return True

    def remove_category(self, name: str) -> bool:
        """
        Remove a category. Expenses already using it keep it.

        Returns:
            True if the category was removed
        """
        if name not in self.categories:
            return False
        self.categories = [c for c in self.categories if c != name]
        return True

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    def suggest_category(self, name: str) -> CategorySuggestion:
        """
        Suggest a category for an expense name and remember the suggestion.

        Learned corrections answer without calling the classifier.

        Raises:
            ValueError: If the name is empty after trimming
        """
        suggestion = self.categorizer.suggest(name, self.categories, self.corrections)
        self._last_suggestions[suggestion.name] = suggestion.category
        return suggestion

    def teach(self, name: str, category: str) -> None:
        """
        Explicitly learn `category` for `name`.

        Raises:
            ValueError: If the name is empty after trimming
            InvalidExpenseError: If the category isn't in the category set
        """
        name = name.strip()
        if not name:
            raise ValueError("Cannot learn a category for an empty name")
        if category not in self.categories:
            raise InvalidExpenseError(f"Unknown category '{category}'")
        self.corrections.record(name, category)

    def clear_corrections(self) -> int:
        """
        Forget every learned correction.

        Returns:
            How many corrections were removed
        """
        count = len(self.corrections)
        self.corrections.clear()
        return count

    # ------------------------------------------------------------------
    # Statement import
    # ------------------------------------------------------------------

    def import_document(
        self,
        source: Union[Path, str, bytes],
        bank: Bank,
        period_month: str,
        period_year: str,
        mime_type: Optional[str] = None,
        dry_run: bool = False,
    ) -> ImportResult:
        """
        Extract expenses from a statement document and add them.

        Args:
            source: Path to the document, or its raw bytes
            bank: Bank that issued the statement
            period_month: Statement month the expenses are attributed to
            period_year: Statement year the expenses are attributed to
            mime_type: Document MIME type. Guessed from the file name when omitted.
            dry_run: Extract without storing anything

        Returns:
            An ImportResult with the expenses built from the document

        Raises:
            ExtractionError: If no classifier is configured or extraction fails
            InvalidExpenseError: If the statement period is invalid
        """
        if self.classifier is None:
            raise ExtractionError("No classifier configured for statement extraction")

        period_month, period_year = normalize_period(period_month, period_year)

        if isinstance(source, bytes):
            file_bytes = source
            source_name = "<bytes>"
        else:
            path = Path(source)
            file_bytes = path.read_bytes()
            source_name = str(path)
            if mime_type is None:
                mime_type, _ = mimetypes.guess_type(path.name)

        mime_type = mime_type or "application/pdf"

        extracted = self.classifier.extract_from_document(
            file_bytes,
            mime_type,
            bank,
            period_month,
            period_year,
            list(self.categories),
            self.corrections.to_dict(),
        )

        period_start = date(int(period_year), int(period_month), 1)
        expenses = [
            Expense(
                name=item.name,
                category=item.category,
                date=item.date or period_start,
                amount=item.amount,
                currency=item.currency,
                bank=bank,
                period_month=period_month,
                period_year=period_year,
            )
            for item in extracted
        ]

        if not dry_run:
            self.add_many(expenses)

        _logger.info(
            "imported statement source=%s bank=%s period=%s/%s expenses=%d dry_run=%s",
            source_name,
            bank.value,
            period_month,
            period_year,
            len(expenses),
            dry_run,
        )

        return ImportResult(
            imported=expenses,
            source=source_name,
            bank=bank.value,
            period=f"{period_month}/{period_year}",
            dry_run=dry_run,
        )

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def summary(self, rate: Optional[Rate] = None) -> DashboardSummary:
        """Aggregate views of the current expense list"""
        return summarize(self.expenses, self.settings.exchange_rate if rate is None else rate)
