#!/usr/bin/env python3
"""Migration script to backfill bank_account_id on reconciliations.

Older databases stored matches without the bank account they belong to,
so per-account queries had to join through bank_transactions. This
migration:
- adds the reconciliations.bank_account_id column if it is missing
- copies each match's bank account from its bank transaction

Matches whose transaction has no bank account are left as they are and
reported.

Usage:
    python migrations/migrate_backfill_match_bank_account.py [--db-path PATH]
"""

import sys
from pathlib import Path

# Add src to path so we can import ledgermatch modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import text, inspect
from ledgermatch.database.factories import create_sqlite_database


def column_exists(engine, table_name: str, column_name: str) -> bool:
    """Check if a column exists in a table."""
    inspector = inspect(engine)
    columns = [col["name"] for col in inspector.get_columns(table_name)]
    return column_name in columns


def migrate_database(database_path: str | None = None) -> int:
    """Add and backfill reconciliations.bank_account_id.

    Args:
        database_path: Path to database file. If None, uses default location.

    Returns:
        Number of matches updated

    Raises:
        Exception: If migration fails
    """
    db = create_sqlite_database(database_path=database_path)
    db.connect()

    try:
        session = db.session_factory()
        try:
            engine = session.bind
            if engine is None:
                raise Exception("Could not get database engine from session")
        finally:
            session.close()

        inspector = inspect(engine)
        if "reconciliations" not in inspector.get_table_names():
            raise Exception(
                "Table 'reconciliations' does not exist. Please initialize the database schema first."
            )

        if not column_exists(engine, "reconciliations", "bank_account_id"):
            print("Adding column: reconciliations.bank_account_id")
            with engine.begin() as conn:
                conn.execute(
                    text(
                        "ALTER TABLE reconciliations ADD COLUMN bank_account_id INTEGER "
                        "REFERENCES bank_accounts(id)"
                    )
                )

        print("Backfilling bank accounts on existing matches...")
        updated = db.backfill_match_bank_accounts()
        print(f"  Updated {updated} match(es)")

        remaining = [m for m in db.list_matches() if m.bank_account_id is None]
        if remaining:
            print(f"  {len(remaining)} match(es) still have no bank account (transaction not linked)")

        print("Migration completed successfully!")
        return updated

    except Exception as e:
        print(f"Migration failed: {e}")
        raise
    finally:
        db.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Backfill bank_account_id on reconciliations"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides LEDGERMATCH_DB_PATH environment variable)",
    )
    args = parser.parse_args()

    try:
        migrate_database(database_path=args.db_path)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
