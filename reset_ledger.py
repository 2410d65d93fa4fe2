#!/usr/bin/env python3
"""
Ledger database reset script.

This script performs the following operations:
1. Creates a backup of the current SQLite database file
2. Clears every ledger table (tokens, balances, allowances, global state)

The schema and its migration version are left in place.

Usage:
    python reset_ledger.py [--backup-only] [--no-backup] [--dry-run]
"""

import argparse
import datetime
import shutil
import sys
from pathlib import Path

from sqlalchemy import MetaData

from ntoken.config import settings
from ntoken.database.connection import engine

KEEP_TABLES = {"alembic_version"}


def create_backup():
    """Copy the SQLite database file into backups/"""
    print("📦 Creating database backup...")

    if not settings.DATABASE_URL.startswith("sqlite"):
        print("⚠️  Backups are only supported for SQLite; use your database's dump tool")
        return None

    db_file = Path(settings.DB_PATH)
    if not db_file.exists():
        print("⚠️  No SQLite database file found to backup")
        return None

    backup_dir = Path("backups")
    backup_dir.mkdir(exist_ok=True)
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_file = backup_dir / f"{db_file.stem}_{timestamp}{db_file.suffix}"

    shutil.copy2(db_file, backup_file)
    print(f"✅ SQLite backup created: {backup_file}")
    return str(backup_file)


def truncate_database(dry_run=False):
    """Delete all rows from the ledger tables"""
    print("🔄 Truncating database...")

    meta = MetaData()
    meta.reflect(bind=engine)
    tables = [t for t in reversed(meta.sorted_tables) if t.name not in KEEP_TABLES]

    if dry_run:
        for table in tables:
            print(f"  🔍 Would clear table: {table.name}")
        return True

    with engine.begin() as conn:
        for table in tables:
            print(f"  🗑️  Clearing table: {table.name}")
            conn.execute(table.delete())

    print(f"✅ Cleared {len(tables)} tables")
    return True


def main():
    parser = argparse.ArgumentParser(description="Reset the ledger database")
    parser.add_argument("--backup-only", action="store_true", help="Only create a backup")
    parser.add_argument("--no-backup", action="store_true", help="Skip the backup")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be cleared")
    args = parser.parse_args()

    if not args.no_backup and not args.dry_run:
        create_backup()
    if args.backup_only:
        return 0

    return 0 if truncate_database(dry_run=args.dry_run) else 1


if __name__ == "__main__":
    sys.exit(main())
