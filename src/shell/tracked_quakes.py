"""Tracked Earthquake Store - Imperative Shell.

Durable record of earthquake IDs that have already been announced, backed
by the shared JSON store. Capping and filtering logic lives in core.dedup.
"""

import logging

from src.core.dedup import (
    DEFAULT_MAX_TRACKED,
    append_with_cap,
    compute_ids_to_evict,
    filter_already_tracked,
)
from src.core.earthquake import Earthquake
from src.shell.json_store import InMemoryStore


logger = logging.getLogger(__name__)


class TrackedQuakeStore:
    """Answers "was this earthquake already announced?" and records new ones.

    Every effective mutation saves the whole store. Save failures raise
    StoreError to the caller.
    """

    def __init__(
        self,
        store: InMemoryStore,
        max_tracked: int = DEFAULT_MAX_TRACKED,
    ) -> None:
        """Initialize the tracked store.

        Args:
            store: Shared JSON store (or an in-memory one)
            max_tracked: Maximum IDs kept; the oldest are evicted first
        """
        self.store = store
        self.max_tracked = max_tracked

    def is_tracked(self, quake_id: str) -> bool:
        """Check if an earthquake has already been announced."""
        return self.store.read(lambda data: quake_id in data["trackedQuakes"])

    def mark_tracked(self, quake_id: str) -> None:
        """Record an earthquake as announced.

        Idempotent: marking an already-tracked ID does not write.

        Raises:
            StoreError: If the store cannot be saved
        """
        if self.is_tracked(quake_id):
            return

        def add(data: dict) -> None:
            data["trackedQuakes"] = append_with_cap(
                data["trackedQuakes"], quake_id, self.max_tracked
            )

        self.store.mutate(add)
        logger.info("Tracked quake %s in database", quake_id)

    def tracked_ids(self) -> list[str]:
        """Get tracked IDs, oldest first."""
        return self.store.read(lambda data: list(data["trackedQuakes"]))

    def count(self) -> int:
        """Get the number of tracked IDs."""
        return self.store.read(lambda data: len(data["trackedQuakes"]))

    def filter_untracked(self, earthquakes: list[Earthquake]) -> list[Earthquake]:
        """Drop earthquakes that were already announced, keeping order."""
        tracked = set(self.tracked_ids())
        return filter_already_tracked(earthquakes, tracked.__contains__)

    def trim(self) -> int:
        """Re-apply the cap, e.g. after it was lowered in configuration.

        Returns:
            Number of IDs evicted
        """
        evicted = compute_ids_to_evict(self.tracked_ids(), self.max_tracked)
        if not evicted:
            return 0

        def drop(data: dict) -> None:
            excess = len(compute_ids_to_evict(data["trackedQuakes"], self.max_tracked))
            data["trackedQuakes"] = data["trackedQuakes"][excess:]

        self.store.mutate(drop)
        logger.info("Cleaned %d old tracked quakes", len(evicted))
        return len(evicted)
