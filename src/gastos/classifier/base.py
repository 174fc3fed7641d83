from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Mapping, Optional, Sequence

from gastos.domain.enums import Bank, Currency


class ExtractionError(Exception):
    """Raised when a statement document could not be turned into expenses."""
    pass


@dataclass
class ExtractedExpense:
    """
    Partial expense returned by document extraction.

    The caller fills in id, bank and statement period before storing it.
    """
    name: str
    amount: Decimal
    currency: Currency
    category: str
    date: Optional[date] = None


class ExpenseClassifier(ABC):
    """
    External collaborator that classifies expense names and extracts
    expenses from statement documents.

    Implementations talk to a remote model, so every call may fail.
    """

    @abstractmethod
    def classify_name(
        self,
        name: str,
        valid_categories: Sequence[str],
        corrections: Mapping[str, str],
    ) -> Optional[str]:
        """
        Pick a category for a single expense name.

        Args:
            name: Expense name, already trimmed
            valid_categories: Categories the answer must come from
            corrections: Learned name -> category overrides, passed as hints

        Returns:
            The raw category answer, or None if the model gave nothing

        Raises:
            Exception: Any transport or API error. Callers handle it.
        """
        pass

    @abstractmethod
    def extract_from_document(
        self,
        file_bytes: bytes,
        mime_type: str,
        bank: Bank,
        period_month: str,
        period_year: str,
        valid_categories: Sequence[str],
        corrections: Mapping[str, str],
    ) -> List[ExtractedExpense]:
        """
        Extract purchases from a bank statement document.

        Args:
            file_bytes: Raw document content (PDF or image)
            mime_type: MIME type of the document
            bank: Bank that issued the statement
            period_month: Statement month ('01'..'12')
            period_year: Statement year ('YYYY')
            valid_categories: Categories each expense must be assigned to
            corrections: Learned name -> category overrides, passed as hints

        Returns:
            List of partial expenses

        Raises:
            ExtractionError: If the document could not be processed
        """
        pass
