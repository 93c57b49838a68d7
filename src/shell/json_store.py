"""JSON Store - Imperative Shell.

This module persists the bot's state (guild alert channels and tracked
earthquake IDs) to a single JSON document on disk.

Document structure:
{
    "guildConfigs": {"<guild_id>": "<channel_id>", ...},
    "trackedQuakes": ["<earthquake_id>", ...],   # oldest first
    "version": "2.0.0",
    "lastUpdated": "<ISO-8601 timestamp>"
}

Every write is atomic (temp file + rename) and every mutation is
write-through: the in-memory copy only changes once the disk write succeeds.
"""

import copy
import json
import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


SCHEMA_VERSION = "2.0.0"


class StoreError(Exception):
    """Raised when the store cannot be read or written."""


@dataclass(frozen=True)
class StoreStats:
    """Store statistics.

    Attributes:
        guilds: Number of guilds with an alert channel
        tracked_quakes: Number of tracked earthquake IDs
        last_updated: Timestamp of the last save
        version: Schema version
        path: Store file path (None for in-memory stores)
    """
    guilds: int
    tracked_quakes: int
    last_updated: str
    version: str
    path: Path | None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def default_document() -> dict[str, Any]:
    """Build an empty store document."""
    return {
        "guildConfigs": {},
        "trackedQuakes": [],
        "version": SCHEMA_VERSION,
        "lastUpdated": _now_iso(),
    }


def _normalize(data: Any) -> dict[str, Any]:
    """Coerce a loaded document into the expected shape."""
    if not isinstance(data, dict):
        raise ValueError("store document is not a JSON object")

    guild_configs = data.get("guildConfigs") or {}
    tracked = data.get("trackedQuakes") or []
    if not isinstance(guild_configs, dict) or not isinstance(tracked, list):
        raise ValueError("store document has unexpected field types")

    return {
        "guildConfigs": {str(k): str(v) for k, v in guild_configs.items()},
        "trackedQuakes": [str(i) for i in tracked],
        "version": data.get("version", SCHEMA_VERSION),
        "lastUpdated": data.get("lastUpdated", _now_iso()),
    }


def read_document(path: str | Path) -> dict[str, Any]:
    """Read a store document from disk without creating or repairing it.

    Args:
        path: Location of the JSON document

    Returns:
        The normalized document

    Raises:
        StoreError: If the file is missing, unreadable or not a store document
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return _normalize(json.load(f))
    except (OSError, ValueError) as e:
        raise StoreError(f"Could not read database at {path}: {e}") from e


def document_stats(data: dict[str, Any], path: Path | None = None) -> StoreStats:
    """Summarize a store document."""
    return StoreStats(
        guilds=len(data["guildConfigs"]),
        tracked_quakes=len(data["trackedQuakes"]),
        last_updated=data["lastUpdated"],
        version=data["version"],
        path=path,
    )


class InMemoryStore:
    """Store with the JsonStore interface that never touches disk.

    Used for tests.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._lock = threading.RLock()
        self._data = _normalize(data) if data is not None else default_document()
        self.path: Path | None = None

    def read(self, reader: Callable[[dict[str, Any]], Any]) -> Any:
        """Run reader against the current document under the store lock.

        The reader must not modify the document.
        """
        with self._lock:
            return reader(self._data)

    def mutate(self, mutator: Callable[[dict[str, Any]], None]) -> None:
        """Apply mutator to a copy of the document, persist it, then swap it in.

        Raises:
            StoreError: If the document cannot be persisted; the in-memory
                document is left unchanged
        """
        with self._lock:
            updated = copy.deepcopy(self._data)
            mutator(updated)
            updated["lastUpdated"] = _now_iso()
            self._persist(updated)
            self._data = updated

    def _persist(self, data: dict[str, Any]) -> None:
        pass

    def stats(self) -> StoreStats:
        """Get store statistics."""
        with self._lock:
            return document_stats(self._data, self.path)


class JsonStore(InMemoryStore):
    """File-backed store for guild channels and tracked earthquakes.

    This is part of the imperative shell - it handles file I/O.
    """

    def __init__(self, path: str | Path) -> None:
        """Open the store, creating the file and its directory if needed.

        Args:
            path: Location of the JSON document

        Raises:
            StoreError: If a fresh document cannot be written
        """
        super().__init__()
        self.path = Path(path)
        self._tmp_path = self.path.with_name(self.path.name + ".tmp")

        logger.info("Using database at %s", self.path)

        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Created database directory: %s", self.path.parent)

        loaded = self._load()
        if loaded is None:
            self._persist(self._data)
        else:
            self._data = loaded

    def _load(self) -> dict[str, Any] | None:
        """Load the document from disk.

        Returns:
            The normalized document, or None if the file is missing or unreadable
        """
        if not self.path.exists():
            logger.info("No existing database found, creating %s", self.path)
            return None

        try:
            data = read_document(self.path)
        except StoreError as e:
            logger.warning("Could not load database, creating new one: %s", str(e))
            return None

        logger.info(
            "Loaded database: %d guilds, %d tracked quakes",
            len(data["guildConfigs"]),
            len(data["trackedQuakes"]),
        )
        return data

    def _persist(self, data: dict[str, Any]) -> None:
        """Write the document atomically.

        The document is written and fsynced to a temp file next to the store,
        then renamed over it, so the store file always holds either the
        previous or the new complete document.

        Raises:
            StoreError: If the write or the rename fails
        """
        try:
            with open(self._tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(self._tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to save database: %s", str(e))
            raise StoreError(f"Failed to save database to {self.path}: {e}") from e
