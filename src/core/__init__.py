"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Earthquake data parsing (USGS GeoJSON, PHIVOLCS bulletin table)
- Deduplication and FIFO capping of tracked IDs
- Discord message formatting and static map URLs
- Command cooldowns
- Backup naming and retention

All functions here are deterministic and have no I/O.
"""

from src.core.earthquake import Earthquake, parse_earthquakes, parse_bulletin_rows
from src.core.bulletin_table import parse_bulletin_table
from src.core.geo import BoundingBox, PHILIPPINES_BOUNDS
from src.core.formatter import format_discord_embed, format_earthquake_summary
from src.core.static_map import build_map_url
from src.core.dedup import append_with_cap, filter_already_tracked
from src.core.rate_limit import check_cooldown, record_use
from src.core.backup import make_backup_filename, select_backups_to_prune

__all__ = [
    # Earthquake
    "Earthquake",
    "parse_earthquakes",
    "parse_bulletin_rows",
    "parse_bulletin_table",
    # Geo
    "BoundingBox",
    "PHILIPPINES_BOUNDS",
    # Formatter
    "format_discord_embed",
    "format_earthquake_summary",
    "build_map_url",
    # Dedup
    "append_with_cap",
    "filter_already_tracked",
    # Cooldowns
    "check_cooldown",
    "record_use",
    # Backups
    "make_backup_filename",
    "select_backups_to_prune",
]
