import json
import sqlite3
import pytest

from gastos.config.settings import Settings
from gastos.database.connection import DatabaseConfig, DatabaseManager
from gastos.repositories.base import PersistenceError
from gastos.repositories.sqlite_store import SQLiteKeyValueStore
from gastos.services.expense_service import ExpenseService
from tests.helpers.factories import make_expense


@pytest.fixture
def test_db(tmp_path):
    """
    Create a real test database.

    Use pytest's tmp_path fixture to create a temporary directory.
    """
    db_manager = DatabaseManager(DatabaseConfig(tmp_path / "data" / "test.db"))

    yield db_manager

    db_manager.close()


@pytest.fixture
def store(test_db):
    return SQLiteKeyValueStore(test_db)


@pytest.mark.integration
class TestSQLiteKeyValueStore:
    """Test suite for the SQLite store. Uses a real temp db."""

    def test_load_missing_key(self, store: SQLiteKeyValueStore):
        assert store.load("gastos_personales_data") is None

    def test_save_and_load(self, store: SQLiteKeyValueStore):
        store.save("k", '{"a": 1}')

        assert store.load("k") == '{"a": 1}'

    def test_save_overwrites(self, store: SQLiteKeyValueStore):
        store.save("k", "first")
        store.save("k", "second")

        assert store.load("k") == "second"

    def test_schema_version_recorded(self, store: SQLiteKeyValueStore, test_db):
        store.load("k")

        row = test_db.get_connection().execute(
            "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
        ).fetchone()
        assert row["version"] == 1

    def test_sqlite_errors_become_persistence_errors(self, store: SQLiteKeyValueStore, mocker):
        mocker.patch.object(
            store.db,
            "get_connection",
            side_effect=sqlite3.OperationalError("database is locked"),
        )

        with pytest.raises(PersistenceError):
            store.load("k")
        with pytest.raises(PersistenceError):
            store.save("k", "v")

    def test_unreadable_schema_becomes_persistence_error(self, store: SQLiteKeyValueStore, mocker):
        mocker.patch(
            "gastos.repositories.sqlite_store.execute_schema",
            side_effect=FileNotFoundError("schema.sql"),
        )

        with pytest.raises(PersistenceError):
            store.load("k")
        with pytest.raises(PersistenceError):
            store.save("k", "v")

    def test_persist_reports_unreadable_schema(self, store: SQLiteKeyValueStore, mocker):
        mocker.patch(
            "gastos.repositories.sqlite_store.execute_schema",
            side_effect=PermissionError("schema.sql"),
        )
        service = ExpenseService(store=store, settings=Settings())

        result = service.persist()

        assert not result.ok
        assert len(result.failed_keys) == 3

    def test_values_survive_reconnect(self, tmp_path):
        config = DatabaseConfig(tmp_path / "gastos.db")
        with DatabaseManager(config) as db:
            SQLiteKeyValueStore(db).save("k", "persisted")

        with DatabaseManager(config) as db:
            assert SQLiteKeyValueStore(db).load("k") == "persisted"


@pytest.mark.integration
class TestServiceWithSQLite:

    def test_state_round_trip(self, store: SQLiteKeyValueStore):
        # Arrange
        settings = Settings(categories=["Café", "Otros"])
        service = ExpenseService(store=store, settings=settings)
        service.load()
        service.add_expense(make_expense(name="Starbucks", category="Café"))
        service.teach("Starbucks", "Café")

        # Act
        result = service.persist()
        reloaded = ExpenseService(store=store, settings=settings)
        reloaded.load()

        # Assert
        assert result.ok
        assert len(reloaded.expenses) == 1
        assert reloaded.expenses[0].name == "Starbucks"
        assert reloaded.corrections.lookup("Starbucks") == "Café"
        assert json.loads(store.load("gastos_categorias_data")) == ["Café", "Otros"]
