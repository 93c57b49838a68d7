"""Backup naming and retention - Pure functions.

The actual file copying and deletion is handled by the shell layer
(BackupManager). This module only decides names and what to prune.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path


BACKUP_PREFIX = "db_backup_"
BACKUP_SUFFIX = ".json"

# Number of backups kept by default
DEFAULT_KEEP_COUNT = 10


@dataclass(frozen=True)
class BackupInfo:
    """Metadata of one backup file.

    Attributes:
        filename: File name inside the backup directory
        path: Full path
        size: Size in bytes
        created: Modification time of the backup file
    """
    filename: str
    path: Path
    size: int
    created: datetime

    @property
    def size_kb(self) -> float:
        """Size in kilobytes."""
        return self.size / 1024


def format_backup_timestamp(now: datetime) -> str:
    """Format a timestamp for use in a file name.

    UTC ISO-8601 with ":" and "." replaced by "-", so names sort and are
    portable across filesystems.

    Pure function.
    """
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z").replace(":", "-").replace(".", "-")


def make_backup_filename(
    now: datetime,
    label: str | None = None,
    sequence: int = 0,
) -> str:
    """Build a backup file name.

    Pure function.

    Args:
        now: Backup time
        label: Optional label (e.g. "startup", "auto", "manual")
        sequence: Disambiguates backups taken in the same millisecond;
            non-zero values add a "_N" suffix that sorts after the base name

    Returns:
        File name like "db_backup_startup_2026-10-18T09-12-00-000Z.json"
    """
    timestamp = format_backup_timestamp(now)
    if sequence:
        timestamp = f"{timestamp}_{sequence}"
    backup_label = f"{label}_{timestamp}" if label else timestamp
    return f"{BACKUP_PREFIX}{backup_label}{BACKUP_SUFFIX}"


def is_backup_filename(filename: str) -> bool:
    """Check if a file name belongs to a backup.

    Pure function.
    """
    return filename.startswith(BACKUP_PREFIX) and filename.endswith(BACKUP_SUFFIX)


def sort_newest_first(backups: list[BackupInfo]) -> list[BackupInfo]:
    """Sort backups by creation time, most recent first.

    Equal times are ordered by file name, so the order does not depend on
    directory listing order.

    Pure function.
    """
    return sorted(backups, key=lambda b: (b.created, b.filename), reverse=True)


def select_backups_to_prune(
    backups: list[BackupInfo],
    keep_count: int = DEFAULT_KEEP_COUNT,
) -> list[BackupInfo]:
    """Select all backups except the newest keep_count.

    Pure function.

    Args:
        backups: Backups in any order
        keep_count: How many of the most recent backups to keep

    Returns:
        Backups to delete (empty if there are keep_count or fewer)
    """
    keep_count = max(keep_count, 0)
    return sort_newest_first(backups)[keep_count:]
