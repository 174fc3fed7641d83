#!/usr/bin/env python3
"""
Initialize the gastos database.

Run this script to create the key-value store schema.
"""
from gastos.config.settings import Settings
from gastos.database.connection import DatabaseConfig, DatabaseManager, SCHEMA_PATH, execute_schema

def main():
    """initialize the database."""

    config = DatabaseConfig(Settings.load().database_path)
    print(f"Initializing database at: {config.db_path}")

    with DatabaseManager(config) as db:
        conn = db.get_connection()

        print(f"Executing schema from: {SCHEMA_PATH}")
        execute_schema(conn)

        cursor = conn.execute(
            "SELECT version, description FROM schema_version ORDER BY version DESC LIMIT 1"
        )
        row = cursor.fetchone()

        if row:
            print(f"✓ Database initialized successfully!")
            print(f"  Schema version: {row['version']}")
            print(f"  Description: {row['description']}")
        else:
            print("✗ Database initialization may have failed")

if __name__ == "__main__":
    main()
