"""Backup Manager - Imperative Shell.

This module snapshots the JSON store into a backup directory and prunes
old snapshots. Naming and retention decisions are in core.backup.
"""

import logging
import shutil
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from src.core.backup import (
    DEFAULT_KEEP_COUNT,
    BackupInfo,
    is_backup_filename,
    make_backup_filename,
    select_backups_to_prune,
    sort_newest_first,
)


logger = logging.getLogger(__name__)


# Attempts at a free backup name before giving up
MAX_NAME_ATTEMPTS = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BackupManager:
    """Creates, lists and prunes store backups.

    This is part of the imperative shell - it handles file I/O.
    """

    def __init__(
        self,
        store_path: str | Path,
        backup_dir: str | Path,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize backup manager.

        Args:
            store_path: Path of the JSON store to back up
            backup_dir: Directory that holds the backups
            clock: Returns the current time used in backup names
        """
        self.store_path = Path(store_path)
        self.backup_dir = Path(backup_dir)
        self.clock = clock

    def _copy_to_new_file(self, label: str | None) -> Path:
        now = self.clock()
        for sequence in range(MAX_NAME_ATTEMPTS):
            backup_path = self.backup_dir / make_backup_filename(now, label, sequence)
            try:
                # Exclusive create; the new file's mtime is its creation time
                with open(self.store_path, "rb") as source, open(backup_path, "xb") as target:
                    shutil.copyfileobj(source, target)
            except FileExistsError:
                continue
            return backup_path

        raise FileExistsError(f"No free backup name for {label or 'backup'} at {now.isoformat()}")

    def snapshot(self, label: str | None = None) -> Path:
        """Copy the store into a new timestamped backup file.

        Existing backups are never overwritten: if the name is taken, a
        numbered suffix is added.

        Args:
            label: Optional label included in the file name

        Returns:
            Path of the new backup

        Raises:
            FileNotFoundError: If the store file does not exist
            OSError: If the copy fails
        """
        if not self.backup_dir.exists():
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created backup directory: %s", self.backup_dir)

        if not self.store_path.exists():
            raise FileNotFoundError(f"Database not found at {self.store_path}")

        backup_path = self._copy_to_new_file(label)

        logger.info(
            "Backup created: %s (%.2f KB)",
            backup_path,
            backup_path.stat().st_size / 1024,
        )
        return backup_path

    def list_backups(self) -> list[BackupInfo]:
        """List backups, most recent first.

        Returns:
            Backup metadata (empty if the directory does not exist)
        """
        if not self.backup_dir.exists():
            logger.info("No backups directory found at %s", self.backup_dir)
            return []

        backups = []
        for path in self.backup_dir.iterdir():
            if not path.is_file() or not is_backup_filename(path.name):
                continue
            stats = path.stat()
            backups.append(BackupInfo(
                filename=path.name,
                path=path,
                size=stats.st_size,
                created=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
            ))

        return sort_newest_first(backups)

    def prune(self, keep_count: int = DEFAULT_KEEP_COUNT) -> int:
        """Delete all but the newest keep_count backups.

        Failures to delete individual files are logged and skipped.

        Args:
            keep_count: Number of most recent backups to keep

        Returns:
            Number of backups deleted
        """
        backups = self.list_backups()
        to_delete = select_backups_to_prune(backups, keep_count)

        if not to_delete:
            logger.info("%d backups found, no cleanup needed", len(backups))
            return 0

        deleted = 0
        for backup in to_delete:
            try:
                backup.path.unlink()
                deleted += 1
                logger.info("Deleted old backup: %s", backup.filename)
            except OSError as e:
                logger.error("Failed to delete %s: %s", backup.filename, str(e))

        logger.info(
            "Cleaned up %d old backups, kept %d most recent",
            deleted,
            len(backups) - deleted,
        )
        return deleted

    def run_scheduled(
        self,
        label: str = "auto",
        keep_count: int = DEFAULT_KEEP_COUNT,
    ) -> Path | None:
        """Snapshot and prune, for timer-driven backups.

        Never raises: failures are logged so the backup timer keeps running.

        Returns:
            Path of the new backup, or None if the snapshot failed
        """
        logger.info("Creating %s database backup", label)

        try:
            backup_path = self.snapshot(label)
        except Exception:
            logger.exception("Scheduled backup failed")
            return None

        try:
            self.prune(keep_count)
        except Exception:
            logger.exception("Backup cleanup failed")

        return backup_path
