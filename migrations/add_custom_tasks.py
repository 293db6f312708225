"""
Migration: Add custom task and soft delete columns

Databases created before custom tasks existed lack daily_tasks.is_custom,
and those created before soft deletes lack employees.deleted_at. This
migration adds both where missing.

Date: 2026-10-19
"""

import sys
import os
from datetime import datetime, timezone

# Add the project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from sqlalchemy import create_engine, text, inspect

from crewledger.fastapi.core.config import get_settings

settings = get_settings(os.environ.get("ENV_MODE", "dev"))
DATABASE_URL = settings.DB_URL

COLUMNS = (
    ("daily_tasks", "is_custom", "BOOLEAN NOT NULL DEFAULT 0", None),
    ("employees", "deleted_at", "TIMESTAMP DEFAULT NULL", "idx_employees_deleted_at"),
)


def run_migration():
    """Add missing columns."""
    print(f"Starting custom task migration at {datetime.now(timezone.utc)}")
    print("Connecting to database...")

    engine = create_engine(DATABASE_URL)

    with engine.connect() as connection:
        inspector = inspect(engine)

        for table, column, definition, index_name in COLUMNS:
            print(f"\n=== Processing {table} table ===")
            existing = {col['name'] for col in inspector.get_columns(table)}

            if column in existing:
                print(f"- {column} column already exists in {table} table")
                continue

            print(f"Adding {column} column to {table} table...")
            connection.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {definition}"))
            connection.commit()
            print(f"Added {column} column to {table} table")

            if index_name:
                connection.execute(text(f"CREATE INDEX {index_name} ON {table}({column})"))
                connection.commit()
                print(f"Created index on {table}.{column}")

    print("\n" + "="*50)
    print("Migration completed successfully!")
    print("="*50)


def rollback_migration():
    """Remove the added columns."""
    print(f"Starting rollback at {datetime.now(timezone.utc)}")

    engine = create_engine(DATABASE_URL)

    with engine.connect() as connection:
        inspector = inspect(engine)

        for table, column, _definition, index_name in COLUMNS:
            print(f"\n=== Reverting {table} table ===")
            existing = {col['name'] for col in inspector.get_columns(table)}

            if column not in existing:
                print(f"- {column} column doesn't exist in {table} table")
                continue

            if index_name:
                connection.execute(text(f"DROP INDEX IF EXISTS {index_name}"))
                connection.commit()

            connection.execute(text(f"ALTER TABLE {table} DROP COLUMN {column}"))
            connection.commit()
            print(f"Removed {column} column from {table} table")

    print("\n" + "="*50)
    print("Rollback completed successfully!")
    print("="*50)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Add custom task and soft delete columns")
    parser.add_argument(
        "--rollback",
        action="store_true",
        help="Rollback the migration (remove the added columns)"
    )

    args = parser.parse_args()

    try:
        if args.rollback:
            rollback_migration()
        else:
            run_migration()
    except Exception as e:
        print(f"\nMigration failed: {e}")
        raise
