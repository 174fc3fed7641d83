import pytest
from decimal import Decimal
from typer.testing import CliRunner

from gastos import cli
from gastos.classifier.base import ExtractedExpense, ExtractionError
from gastos.domain.enums import Currency
from gastos.services.expense_service import ExpenseService

runner = CliRunner()


@pytest.fixture
def cli_service(service: ExpenseService, monkeypatch):
    """Inject a service backed by the in-memory store"""
    monkeypatch.setattr(cli.state, "service", service)
    return service


@pytest.mark.integration
class TestCli:

    def test_add_uses_suggestion(self, cli_service: ExpenseService, classifier):
        classifier.classify_name.return_value = "Transporte"

        result = runner.invoke(cli.app, ["add", "Uber", "18.40"])

        assert result.exit_code == 0, result.output
        assert cli_service.expenses[0].category == "Transporte"
        assert cli_service.store.load("gastos_personales_data") is not None

    def test_add_with_override_learns(self, cli_service: ExpenseService, classifier):
        classifier.classify_name.return_value = "Alimentación"

        result = runner.invoke(cli.app, ["add", "Starbucks", "12.50", "--category", "Café"])

        assert result.exit_code == 0, result.output
        assert cli_service.corrections.lookup("Starbucks") == "Café"

    def test_add_invalid_amount_fails(self, cli_service: ExpenseService):
        result = runner.invoke(cli.app, ["add", "--no-suggest", "--", "Uber", "-5"])

        assert result.exit_code == 1
        assert "Error" in result.output
        assert cli_service.expenses == []

    def test_dashboard(self, cli_service: ExpenseService):
        runner.invoke(cli.app, ["add", "Wong", "100", "--category", "Alimentación", "--no-suggest"])
        runner.invoke(cli.app, ["add", "Netflix", "10", "--currency", "USD",
                                "--category", "Entretenimiento", "--no-suggest"])

        result = runner.invoke(cli.app, ["dashboard"])

        assert result.exit_code == 0, result.output
        assert "137.00" in result.output

    def test_scan_failure_is_visible(self, cli_service: ExpenseService, classifier, tmp_path):
        statement = tmp_path / "estado.pdf"
        statement.write_bytes(b"%PDF")
        classifier.extract_from_document.side_effect = ExtractionError("unreadable")

        result = runner.invoke(cli.app, ["scan", str(statement), "--month", "03", "--year", "2025"])

        assert result.exit_code == 1
        assert "Extraction Failed" in result.output

    def test_scan_imports(self, cli_service: ExpenseService, classifier, tmp_path):
        statement = tmp_path / "estado.pdf"
        statement.write_bytes(b"%PDF")
        classifier.extract_from_document.return_value = [
            ExtractedExpense(name="Wong", amount=Decimal("85.20"), currency=Currency.PEN,
                             category="Alimentación"),
        ]

        result = runner.invoke(cli.app, ["scan", str(statement), "--month", "03", "--year", "2025"])

        assert result.exit_code == 0, result.output
        assert len(cli_service.expenses) == 1

    def test_learning_clear(self, cli_service: ExpenseService):
        cli_service.teach("Uber", "Transporte")

        result = runner.invoke(cli.app, ["learning", "clear", "--yes"])

        assert result.exit_code == 0, result.output
        assert len(cli_service.corrections) == 0

    def test_categories_remove_keeps_expenses(self, cli_service: ExpenseService):
        runner.invoke(cli.app, ["add", "Starbucks", "9", "--category", "Café", "--no-suggest"])

        result = runner.invoke(cli.app, ["categories", "remove", "Café"])

        assert result.exit_code == 0, result.output
        assert "Café" not in cli_service.categories
        assert cli_service.expenses[0].category == "Café"

    def test_export(self, cli_service: ExpenseService, tmp_path):
        runner.invoke(cli.app, ["add", "Starbucks", "9", "--category", "Café", "--no-suggest"])

        result = runner.invoke(cli.app, ["export", "--output", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert len(list(tmp_path.glob("historial_gastos_*.csv"))) == 1
