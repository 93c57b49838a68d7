"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- USGS API client (HTTP)
- PHIVOLCS page client (HTTP)
- Discord REST client (HTTP)
- JSON file store, tracked IDs and channel registry (disk)
- Backups (disk)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from src.shell.usgs_client import USGSClient
from src.shell.phivolcs_client import PhivolcsClient
from src.shell.discord_client import DiscordClient
from src.shell.json_store import JsonStore, StoreError
from src.shell.tracked_quakes import TrackedQuakeStore
from src.shell.destination_registry import DestinationRegistry
from src.shell.backup_manager import BackupManager
from src.shell.config_loader import load_config, ConfigurationError

__all__ = [
    "USGSClient",
    "PhivolcsClient",
    "DiscordClient",
    "JsonStore",
    "StoreError",
    "TrackedQuakeStore",
    "DestinationRegistry",
    "BackupManager",
    "load_config",
    "ConfigurationError",
]
