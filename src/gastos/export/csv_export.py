"""
CSV export of the expense history.

Column order is part of what users see in their spreadsheets:
Fecha, Gasto, Categoria, Banco, Monto, Moneda, Periodo
"""
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Union

from gastos.domain.models import Expense
from gastos.logging_setup import get_logger

_logger = get_logger("gastos.export.csv")

HEADERS = ["Fecha", "Gasto", "Categoria", "Banco", "Monto", "Moneda", "Periodo"]

# Excel only detects UTF-8 (accents, ñ) with a byte-order mark
CSV_ENCODING = "utf-8-sig"


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _row(expense: Expense) -> List[str]:
    return [
        expense.date.strftime("%d/%m/%Y"),
        _quote(expense.name),
        _quote(expense.category),
        expense.bank.value,
        f"{expense.amount:.2f}",
        expense.currency.value,
        f"{expense.period_month}/{expense.period_year}",
    ]


def build_csv(expenses: Iterable[Expense]) -> str:
    """
    Render expenses as CSV text, newest first.

    Only the name and category fields are quoted.
    """
    ordered = sorted(expenses, key=lambda e: e.date, reverse=True)
    lines = [",".join(HEADERS)]
    lines.extend(",".join(_row(expense)) for expense in ordered)
    return "\n".join(lines)


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"historial_gastos_{today.isoformat()}.csv"


def write_csv(
    expenses: Iterable[Expense],
    directory: Union[Path, str] = ".",
    today: Optional[date] = None,
) -> Optional[Path]:
    """
    Write the expense history to `directory`.

    Returns:
        Path of the written file, or None when there is nothing to export
    """
    expenses = list(expenses)
    if not expenses:
        return None

    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / export_filename(today)

    with open(target, "w", encoding=CSV_ENCODING, newline="") as f:
        f.write(build_csv(expenses))

    _logger.info("exported %d expenses to %s", len(expenses), target)
    return target
