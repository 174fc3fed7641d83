import pytest
from datetime import date

from gastos.domain.enums import Bank, Currency
from gastos.export.csv_export import HEADERS, build_csv, export_filename, write_csv
from tests.helpers.factories import make_expense


@pytest.mark.unit
class TestBuildCsv:

    def test_header_order(self):
        assert build_csv([]).splitlines()[0] == "Fecha,Gasto,Categoria,Banco,Monto,Moneda,Periodo"
        assert HEADERS == ["Fecha", "Gasto", "Categoria", "Banco", "Monto", "Moneda", "Periodo"]

    def test_row_format(self):
        expense = make_expense(
            name="Starbucks",
            amount="12.5",
            currency=Currency.USD,
            category="Café",
            bank=Bank.INTERBANK,
            spent_on=date(2025, 3, 7),
            period_month="03",
            period_year="2025",
        )

        row = build_csv([expense]).splitlines()[1]

        assert row == '07/03/2025,"Starbucks","Café",Interbank,12.50,USD,03/2025'

    def test_quotes_are_doubled(self):
        expense = make_expense(name='Bar "El Pato"', category='Ocio "nocturno"')

        row = build_csv([expense]).splitlines()[1]

        assert '"Bar ""El Pato"""' in row
        assert '"Ocio ""nocturno"""' in row

    def test_rows_newest_first(self):
        older = make_expense(name="Old", spent_on=date(2025, 1, 1))
        newer = make_expense(name="New", spent_on=date(2025, 2, 1))

        lines = build_csv([older, newer]).splitlines()

        assert '"New"' in lines[1]
        assert '"Old"' in lines[2]


@pytest.mark.unit
class TestWriteCsv:

    def test_filename_includes_date(self):
        assert export_filename(date(2025, 4, 2)) == "historial_gastos_2025-04-02.csv"

    def test_written_with_bom(self, tmp_path):
        path = write_csv([make_expense(name="Café Ñaña")], tmp_path, today=date(2025, 4, 2))

        raw = path.read_bytes()
        assert path.name == "historial_gastos_2025-04-02.csv"
        assert raw.startswith(b"\xef\xbb\xbf")
        assert "Café Ñaña" in raw.decode("utf-8-sig")

    def test_empty_list_writes_nothing(self, tmp_path):
        assert write_csv([], tmp_path) is None
        assert list(tmp_path.iterdir()) == []
