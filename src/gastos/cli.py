import typer
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from gastos.classifier.base import ExtractionError
from gastos.classifier.openai_classifier import OpenAIClassifier
from gastos.config.settings import Settings
from gastos.database.connection import DatabaseConfig, DatabaseManager
from gastos.domain.enums import Bank, Currency
from gastos.domain.models import ExpenseDraft
from gastos.export.csv_export import write_csv
from gastos.logging_setup import configure_logging
from gastos.repositories.sqlite_store import SQLiteKeyValueStore
from gastos.services.expense_service import ExpenseService

app = typer.Typer(
    name="gastos",
    help="Track personal expenses with AI-assisted categorization",
    add_completion=False,
)
categories_app = typer.Typer(help="Manage the category list")
learning_app = typer.Typer(help="Manage learned category corrections")
app.add_typer(categories_app, name="categories")
app.add_typer(learning_app, name="learning")

console = Console()

class State:
    verbose: bool = False
    service: Optional[ExpenseService] = None


state = State()


def _persist() -> None:
    """Save state and warn (without failing the command) if a write failed"""
    result = state.service.persist()
    if not result.ok:
        console.print(f"[yellow]⚠ Changes may not have been saved: {result}[/yellow]")


def _fail(e: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {e}")
    if state.verbose:
        console.print_exception()
    raise typer.Exit(code=1)


def _money(amount, currency: Currency = Currency.PEN) -> str:
    symbol = "S/" if currency == Currency.PEN else "$"
    return f"{symbol} {amount:,.2f}"


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    ),
    db_path: Optional[Path] = typer.Option(
        None,
        "--db",
        help="Database file (defaults to the configured path)",
    ),
):
    """
    Gastos - Record, categorize, and analyze your expenses.
    """
    state.verbose = verbose
    configure_logging("DEBUG" if verbose else None)

    if state.service is None:
        settings = Settings.load()
        db_manager = DatabaseManager(DatabaseConfig(db_path or settings.database_path))
        state.service = ExpenseService(
            store=SQLiteKeyValueStore(db_manager),
            classifier=OpenAIClassifier(
                categorize_model=settings.categorize_model,
                extract_model=settings.extract_model,
                default_category=settings.default_category,
            ),
            settings=settings,
        )
        state.service.load()


@app.command(name="add")
def add_expense(
    name: str = typer.Argument(..., help="Merchant or description"),
    amount: str = typer.Argument(..., help="Amount, e.g. 12.50"),
    currency: Currency = typer.Option(Currency.PEN, "--currency", "-c", case_sensitive=False),
    bank: Bank = typer.Option(Bank.BCP, "--bank", "-b", case_sensitive=False),
    category: Optional[str] = typer.Option(
        None,
        "--category",
        help="Category. Suggested automatically when omitted.",
    ),
    spent_on: Optional[datetime] = typer.Option(
        None,
        "--date", "-d",
        formats=["%Y-%m-%d"],
        help="Expense date (defaults to today)",
    ),
    period_month: Optional[str] = typer.Option(None, "--month", "-m", help="Statement month (01-12)"),
    period_year: Optional[str] = typer.Option(None, "--year", "-y", help="Statement year"),
    suggest: bool = typer.Option(
        True,
        "--suggest/--no-suggest",
        help="Ask for a category suggestion before saving",
    ),
):
    """
    Add an expense manually.

    If you pass a category that differs from the suggestion, the choice is
    learned for next time.

    Examples:
        gastos add "Starbucks" 12.50
        gastos add "Netflix" 15.99 --currency USD --category Entretenimiento
    """
    try:
        service = state.service

        if suggest and name.strip():
            suggestion = service.suggest_category(name)
            console.print(
                f"[dim]Suggested category:[/dim] [magenta]{suggestion.category}[/magenta] "
                f"[dim]({suggestion.source.value})[/dim]"
            )
            if category is None:
                category = suggestion.category

        draft = ExpenseDraft(
            name=name,
            category=category or service.settings.default_category,
            amount=amount,
            currency=currency,
            bank=bank,
            date=spent_on.date() if spent_on else None,
            period_month=period_month,
            period_year=period_year,
        )
        expense = service.add_expense(draft)
        _persist()

        console.print(
            f"[bold green]✓ Added[/bold green] {expense.name} "
            f"{_money(expense.amount, expense.currency)} → [magenta]{expense.category}[/magenta]"
        )
        if state.verbose:
            console.print(f"[dim]→ id {expense.id}[/dim]")

    except Exception as e:
        _fail(e)


@app.command(name="list")
def list_expenses(
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum rows to show"),
):
    """
    Show the expense history, most recent first.
    """
    try:
        expenses = state.service.list_expenses()

        if not expenses:
            console.print(Panel(
                "[yellow]No expenses recorded yet[/yellow]",
                title="Empty History",
                border_style="yellow"
            ))
            return

        table = Table(title="Historial", show_header=True, padding=(0, 1))
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Date", style="cyan", width=12)
        table.add_column("Name", style="white", max_width=40)
        table.add_column("Category", style="magenta")
        table.add_column("Bank")
        table.add_column("Amount", justify="right", style="red")
        table.add_column("Period", justify="center")

        for expense in expenses[:limit]:
            table.add_row(
                expense.id,
                str(expense.date),
                expense.name,
                expense.category,
                expense.bank.value,
                _money(expense.amount, expense.currency),
                f"{expense.period_month}/{expense.period_year}",
            )

        console.print(table)

        if len(expenses) > limit:
            console.print(f"\n[dim]Showing {limit} of {len(expenses)} expenses[/dim]")

    except Exception as e:
        _fail(e)


@app.command(name="delete")
def delete_expense(
    expense_id: str = typer.Argument(..., help="ID of the expense"),
    yes: bool = typer.Option(False, "--yes", help="Don't ask for confirmation"),
):
    """
    Delete an expense.
    """
    try:
        expense = state.service.get_expense(expense_id)
        if not yes and not typer.confirm(f"Delete '{expense.name}' ({expense.date})?"):
            raise typer.Abort()

        state.service.delete_expense(expense_id)
        _persist()
        console.print(f"[green]✓[/green] Deleted {expense.name}")

    except typer.Abort:
        raise
    except Exception as e:
        _fail(e)


@app.command(name="set-category")
def set_category(
    expense_id: str = typer.Argument(..., help="ID of the expense"),
    category: str = typer.Argument(..., help="New category"),
):
    """
    Change the category of an expense. The choice is learned for its name.
    """
    try:
        expense = state.service.update_category(expense_id, category)
        _persist()
        console.print(
            f"[green]✓[/green] {expense.name} → [magenta]{expense.category}[/magenta] "
            f"[dim](learned)[/dim]"
        )

    except Exception as e:
        _fail(e)


@app.command(name="suggest")
def suggest(
    name: str = typer.Argument(..., help="Merchant or description"),
):
    """
    Suggest a category for an expense name without saving anything.
    """
    try:
        suggestion = state.service.suggest_category(name)
        console.print(
            f"[magenta]{suggestion.category}[/magenta] [dim]({suggestion.source.value})[/dim]"
        )

    except Exception as e:
        _fail(e)


@app.command(name="scan")
def scan_statement(
    filepath: Path = typer.Argument(
        ...,
        help="Statement document (PDF or image)",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    bank: Bank = typer.Option(Bank.BCP, "--bank", "-b", case_sensitive=False),
    period_month: str = typer.Option(
        f"{datetime.now().month:02d}",
        "--month", "-m",
        help="Statement month (01-12)",
    ),
    period_year: str = typer.Option(
        str(datetime.now().year),
        "--year", "-y",
        help="Statement year",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Preview without saving",
    ),
):
    """
    Extract expenses from a bank statement with AI.

    Examples:
        gastos scan estado.pdf --bank BCP --month 03 --year 2025
        gastos scan captura.png --bank Interbank --dry-run
    """
    try:
        console.print(Panel.fit(
            f"[bold cyan]Statement Scan[/bold cyan]\n"
            f"File: {filepath}\n"
            f"Bank: {bank.value}\n"
            f"Period: {period_month}/{period_year}\n"
            f"Mode: {'DRY RUN' if dry_run else 'LIVE'}",
            border_style="cyan"
        ))

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Reading statement...", total=None)

            result = state.service.import_document(
                filepath,
                bank=bank,
                period_month=period_month,
                period_year=period_year,
                dry_run=dry_run,
            )

            progress.update(task, completed=True)

    except ExtractionError as e:
        console.print(Panel(
            f"[bold red]Could not read the statement[/bold red]\n{e}",
            title="Extraction Failed",
            border_style="red"
        ))
        if state.verbose:
            console.print_exception()
        raise typer.Exit(code=1)
    except Exception as e:
        _fail(e)

    console.print(f"\n[bold]Found {result.total_extracted} expenses[/bold]")

    if result.imported:
        preview = Table(title="Extracted")
        preview.add_column("Date", style="cyan")
        preview.add_column("Name", style="white")
        preview.add_column("Category", style="magenta")
        preview.add_column("Amount", justify="right", style="red")

        for expense in result.imported:
            preview.add_row(
                str(expense.date),
                expense.name[:40],
                expense.category,
                _money(expense.amount, expense.currency),
            )
        console.print(preview)

    if dry_run:
        console.print("[yellow]DRY RUN - No changes made[/yellow]")
    else:
        _persist()
        console.print(f"[bold green]✓ Imported {result.total_extracted} expenses[/bold green]")


@app.command(name="dashboard")
def dashboard(
    rate: Optional[str] = typer.Option(
        None,
        "--rate", "-r",
        help="USD to PEN exchange rate (defaults to the configured rate)",
    ),
):
    """
    Show totals, spending by category and the monthly trend.
    """
    try:
        summary = state.service.summary(rate)

        if summary.is_empty:
            console.print(Panel(
                "[yellow]Not enough data for a dashboard. Add your first expenses![/yellow]",
                title="Empty Dashboard",
                border_style="yellow"
            ))
            return

        console.print(Panel(
            f"[bold]Total (PEN):[/bold]  {_money(summary.blended_total):>16}\n"
            f"[dim]Calculated with rate {summary.rate:.2f}[/dim]\n\n"
            f"Spent in soles:    {_money(summary.local_total, Currency.PEN):>14}\n"
            f"Spent in dollars:  {_money(summary.foreign_total, Currency.USD):>14}\n"
            f"Expenses:          {summary.expense_count:>14}",
            title="[bold]Summary[/bold]",
            border_style="cyan",
            padding=(1, 2)
        ))

        console.print("\n[bold]Spending by Category[/bold]")
        category_table = Table(show_header=True, box=None, padding=(0, 2))
        category_table.add_column("Category", style="cyan", no_wrap=True)
        category_table.add_column("Amount", justify="right", style="red")
        category_table.add_column("% of Total", justify="right", style="dim")

        for category, amount in summary.by_category:
            category_table.add_row(
                category,
                _money(amount),
                f"{summary.category_share(amount):.1f}%",
            )
        console.print(category_table)

        console.print("\n[bold]Monthly Trend[/bold]")
        period_table = Table(show_header=True, box=None, padding=(0, 2))
        period_table.add_column("Period", style="cyan", no_wrap=True)
        period_table.add_column("Total", justify="right", style="red")

        for label, amount in summary.by_period:
            period_table.add_row(label, _money(amount))
        console.print(period_table)

    except Exception as e:
        _fail(e)


@app.command(name="export")
def export(
    output: Path = typer.Option(
        Path("."),
        "--output", "-o",
        help="Directory for the CSV file",
        file_okay=False,
    ),
):
    """
    Export the expense history to CSV (opens cleanly in Excel).
    """
    try:
        path = write_csv(state.service.list_expenses(), output)
        if path is None:
            console.print("[yellow]Nothing to export[/yellow]")
            return
        console.print(f"[green]✓[/green] Exported to {path}")

    except Exception as e:
        _fail(e)


@categories_app.command(name="list")
def categories_list():
    """Show the category list."""
    for category in state.service.categories:
        console.print(f" • {category}")


@categories_app.command(name="add")
def categories_add(name: str = typer.Argument(..., help="Category name")):
    """Add a category."""
    if state.service.add_category(name):
        _persist()
        console.print(f"[green]✓[/green] Added category {name.strip()}")
    else:
        console.print(f"[yellow]Category '{name}' is empty or already exists[/yellow]")


@categories_app.command(name="remove")
def categories_remove(name: str = typer.Argument(..., help="Category name")):
    """Remove a category. Existing expenses keep it."""
    if state.service.remove_category(name):
        _persist()
        console.print(f"[green]✓[/green] Removed category {name}")
    else:
        console.print(f"[yellow]Category '{name}' not found[/yellow]")


@learning_app.command(name="list")
def learning_list():
    """Show learned corrections."""
    corrections = state.service.corrections
    if not len(corrections):
        console.print("[dim]No corrections learned yet[/dim]")
        return

    table = Table(show_header=True, box=None, padding=(0, 2))
    table.add_column("Name", style="white")
    table.add_column("Category", style="magenta")
    for name, category in sorted(corrections.items()):
        table.add_row(name, category)

    console.print(table)
    console.print(f"\n[dim]{len(corrections)} active refinement rules[/dim]")


@learning_app.command(name="teach")
def learning_teach(
    name: str = typer.Argument(..., help="Expense name, exactly as it appears"),
    category: str = typer.Argument(..., help="Category to use for it"),
):
    """Teach the categorizer a category for a name."""
    try:
        state.service.teach(name, category)
        _persist()
        console.print(f"[green]✓[/green] Learned {name.strip()} → [magenta]{category}[/magenta]")

    except Exception as e:
        _fail(e)


@learning_app.command(name="clear")
def learning_clear(
    yes: bool = typer.Option(False, "--yes", help="Don't ask for confirmation"),
):
    """Forget every learned correction."""
    if not yes and not typer.confirm("Reset learning?"):
        raise typer.Abort()

    count = state.service.clear_corrections()
    _persist()
    console.print(f"[green]✓[/green] Cleared {count} corrections")


def cli_main():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    cli_main()
