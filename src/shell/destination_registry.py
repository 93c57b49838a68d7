"""Destination Registry - Imperative Shell.

Maps each guild to the one channel that receives its earthquake alerts,
backed by the shared JSON store.
"""

import logging
from dataclasses import dataclass

from src.shell.json_store import InMemoryStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Destination:
    """A registered alert destination.

    Attributes:
        group_id: Guild (community) ID
        target_id: Channel ID inside the guild
    """
    group_id: str
    target_id: str


class DestinationRegistry:
    """Guild -> alert channel mapping with write-through persistence.

    Reads come from the store's in-memory document, so registrations made
    between polling cycles are visible to the next cycle without a disk read.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    def set(self, group_id: str, target_id: str) -> None:
        """Register (or replace) the alert channel of a guild.

        Raises:
            StoreError: If the store cannot be saved
        """
        def assign(data: dict) -> None:
            data["guildConfigs"][str(group_id)] = str(target_id)

        self.store.mutate(assign)
        logger.info("Set alert channel for guild %s: %s", group_id, target_id)

    def get(self, group_id: str) -> str | None:
        """Get the alert channel of a guild, or None."""
        return self.store.read(lambda data: data["guildConfigs"].get(str(group_id)))

    def delete(self, group_id: str) -> bool:
        """Unregister a guild's alert channel.

        Returns:
            True if a channel was registered and has been removed

        Raises:
            StoreError: If the store cannot be saved
        """
        if self.get(group_id) is None:
            return False

        def remove(data: dict) -> None:
            data["guildConfigs"].pop(str(group_id), None)

        self.store.mutate(remove)
        logger.info("Deleted alert channel for guild %s", group_id)
        return True

    def all(self) -> list[Destination]:
        """Get every registered destination."""
        return self.store.read(lambda data: [
            Destination(group_id=group_id, target_id=target_id)
            for group_id, target_id in data["guildConfigs"].items()
        ])
