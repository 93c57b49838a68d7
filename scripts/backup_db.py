#!/usr/bin/env python3
"""Database backup utility.

Usage:
    # Create a backup (optionally labelled)
    python scripts/backup_db.py create [label]

    # List backups, most recent first
    python scripts/backup_db.py list

    # Delete all but the most recent N backups (default 10)
    python scripts/backup_db.py clean [keep]

    # Show store statistics, or dump the whole store as JSON
    python scripts/backup_db.py stats
    python scripts/backup_db.py export

Environment:
    DB_PATH: Store location (default: /app/data/db.json or data/db.json)
    BACKUP_DIR: Backup directory (default: /app/data/backups or data/backups)
"""

import argparse
import json
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.backup import DEFAULT_KEEP_COUNT
from src.shell.backup_manager import BackupManager
from src.shell.config_loader import resolve_backup_dir, resolve_db_path
from src.shell.json_store import StoreError, document_stats, read_document

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def cmd_create(manager: BackupManager, args) -> int:
    try:
        path = manager.snapshot(args.label)
    except OSError as e:
        logger.error("❌ Backup failed: %s", e)
        return 1
    print(f"✅ Backup created: {path}")
    return 0


def cmd_list(manager: BackupManager, args) -> int:
    backups = manager.list_backups()
    print(f"\n📋 Found {len(backups)} backups:\n")
    for index, backup in enumerate(backups, start=1):
        print(f"{index}. {backup.filename}")
        print(f"   Size: {backup.size_kb:.2f} KB")
        print(f"   Created: {backup.created.isoformat()}\n")
    return 0


def cmd_clean(manager: BackupManager, args) -> int:
    deleted = manager.prune(args.keep)
    print(f"✅ Deleted {deleted} old backups")
    return 0


def _read_store(manager: BackupManager) -> dict | None:
    # Read-only: a missing or corrupt store is reported, never recreated
    try:
        return read_document(manager.store_path)
    except StoreError as e:
        logger.error("❌ %s", e)
        return None


def cmd_stats(manager: BackupManager, args) -> int:
    data = _read_store(manager)
    if data is None:
        return 1
    stats = document_stats(data, manager.store_path)
    print(f"Store: {stats.path}")
    print(f"Guilds: {stats.guilds}")
    print(f"Tracked quakes: {stats.tracked_quakes}")
    print(f"Last updated: {stats.last_updated}")
    print(f"Version: {stats.version}")
    return 0


def cmd_export(manager: BackupManager, args) -> int:
    data = _read_store(manager)
    if data is None:
        return 1
    print(json.dumps(data, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Back up the bot database")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Create a new backup")
    create.add_argument("label", nargs="?", default=None, help="Optional backup label")
    create.set_defaults(func=cmd_create)

    list_parser = subparsers.add_parser("list", help="List backups")
    list_parser.set_defaults(func=cmd_list)

    clean = subparsers.add_parser("clean", help="Delete old backups")
    clean.add_argument(
        "keep",
        nargs="?",
        type=int,
        default=DEFAULT_KEEP_COUNT,
        help=f"Number of backups to keep (default: {DEFAULT_KEEP_COUNT})",
    )
    clean.set_defaults(func=cmd_clean)

    stats = subparsers.add_parser("stats", help="Show store statistics")
    stats.set_defaults(func=cmd_stats)

    export = subparsers.add_parser("export", help="Print the store as JSON")
    export.set_defaults(func=cmd_export)

    args = parser.parse_args(argv)

    manager = BackupManager(resolve_db_path(), resolve_backup_dir())
    return args.func(manager, args)


if __name__ == "__main__":
    sys.exit(main())
