import sqlite3
from typing import Optional

from gastos.database.connection import DatabaseManager, execute_schema
from gastos.repositories.base import KeyValueStore, PersistenceError


class SQLiteKeyValueStore(KeyValueStore):
    """
    SQLite implementation of the KeyValueStore.

    Blobs live in the `kv_store` table, created on first use.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager
        self._initialized = False

    def _ensure_schema(self) -> None:
        if self._initialized:
            return
        try:
            execute_schema(self.db.get_connection())
        except OSError as e:
            raise PersistenceError(f"Could not read the database schema: {e}") from e
        self._initialized = True

    def load(self, key: str) -> Optional[str]:
        try:
            self._ensure_schema()
            cursor = self.db.get_connection().execute(
                "SELECT value FROM kv_store WHERE key = ?",
                (key,),
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read '{key}': {e}") from e

        if row is None:
            return None

        return row["value"]

    def save(self, key: str, value: str) -> None:
        try:
            self._ensure_schema()
            with self.db.transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value),
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not write '{key}': {e}") from e
