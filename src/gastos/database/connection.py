"""
SQLite access for the key-value blob store.

The database holds one `kv_store` row per state key (expenses, categories,
corrections). Everything else about the data lives in the JSON blobs.
"""
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional, Union

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class DatabaseConfig:
    """Where the blob store lives on disk. The parent folder is created on demand."""

    def __init__(self, db_path: Union[Path, str] = "data/gastos.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def connection_string(self) -> str:
        return str(self.db_path.absolute())


def configure_connection(conn: sqlite3.Connection) -> None:
    """Rows come back as sqlite3.Row so stores can read `row["value"]`."""
    conn.row_factory = sqlite3.Row


class DatabaseManager:
    """
    Owns the single connection shared by the key-value store.

    The connection opens lazily on first use and closes on `close()` or when
    the manager is used as a context manager.

    Usage:
        with DatabaseManager(DatabaseConfig("data/gastos.db")) as db:
            SQLiteKeyValueStore(db).save("gastos_personales_data", "[]")
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._connection: Optional[sqlite3.Connection] = None

    def get_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self._connection = sqlite3.connect(self.config.connection_string)
            configure_connection(self._connection)
        return self._connection

    def close(self) -> None:
        if self._connection:
            self._connection.close()
            self._connection = None

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Wrap a blob write. Commits when the block finishes, rolls back if it raises.

        Usage:
            with db_manager.transaction() as conn:
                conn.execute("INSERT INTO kv_store ...")
        """
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def execute_schema(conn: sqlite3.Connection, schema_path: Path = SCHEMA_PATH) -> None:
    """
    Create the `kv_store` and `schema_version` tables if they are missing.

    Raises:
        OSError: If the schema file can't be read
    """
    schema = Path(schema_path).read_text(encoding="utf-8")
    conn.executescript(schema)
    conn.commit()
