"""
Service layer models - DTOs for service operations.

These models represent the results of service operations, not domain entities.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Tuple

from gastos.domain.models import Expense


@dataclass
class PersistResult:
    """
    Result of writing the application state to the store.

    A failed write never raises; it shows up here instead.
    """
    saved_keys: List[str] = field(default_factory=list)
    failed_keys: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed_keys

    def __str__(self) -> str:
        if self.ok:
            return f"Saved {len(self.saved_keys)} keys"
        failures = ", ".join(f"{key} ({self.errors.get(key, 'unknown error')})" for key in self.failed_keys)
        return f"Failed to save: {failures}"


@dataclass
class ImportResult:
    """
    Result of extracting expenses from a statement document.
    """
    imported: List[Expense] = field(default_factory=list)
    source: str = ""
    bank: str = ""
    period: str = ""
    dry_run: bool = False

    @property
    def total_extracted(self) -> int:
        return len(self.imported)

    @property
    def success(self) -> bool:
        """Import is successful if at least one expense was extracted"""
        return self.total_extracted > 0

    def __str__(self) -> str:
        "Human-readable summary"
        lines = [
            f"Import summary for {self.bank} ({self.period}):",
            f" 📄 File: {self.source}",
            f" ✅ Extracted expenses: {self.total_extracted}",
        ]
        if self.dry_run:
            lines.append(" 👀 Dry run, nothing was stored")
        return "\n".join(lines)


@dataclass
class DashboardSummary:
    """
    Aggregate views of the expense list.

    Category totals are sorted by amount descending, period totals
    chronologically.
    """
    rate: Decimal
    expense_count: int
    local_total: Decimal
    foreign_total: Decimal
    blended_total: Decimal
    by_category: List[Tuple[str, Decimal]] = field(default_factory=list)
    by_period: List[Tuple[str, Decimal]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.expense_count == 0

    @property
    def top_categories(self) -> List[Tuple[str, Decimal]]:
        return self.by_category[:5]

    def category_share(self, amount: Decimal) -> Decimal:
        """Percentage of the blended total that `amount` represents"""
        if self.blended_total == 0:
            return Decimal("0")
        return amount / self.blended_total * 100
