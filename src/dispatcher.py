"""Dispatcher - Fans new earthquakes out to every registered channel.

For each new earthquake (in chronological order) one delivery per
destination is attempted concurrently. Once every delivery for the event
has settled, successfully or not, the event is marked as tracked.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from src.core.earthquake import Earthquake
from src.core.formatter import format_discord_embed
from src.core.static_map import build_map_url
from src.shell.destination_registry import Destination, DestinationRegistry
from src.shell.discord_client import DiscordClient
from src.shell.tracked_quakes import TrackedQuakeStore


logger = logging.getLogger(__name__)


# Upper bound on concurrent deliveries
DEFAULT_MAX_WORKERS = 8

# How long to wait for all deliveries of one event (seconds)
DEFAULT_DELIVERY_TIMEOUT = 15

NO_NEW_EARTHQUAKES = "No new earthquakes to report."
NO_DESTINATIONS = "No servers have set an alert channel yet."


@dataclass
class DeliveryResult:
    """Result of delivering one earthquake to one destination.

    Attributes:
        earthquake: The earthquake that was delivered
        destination: Where it was sent
        success: Whether the channel accepted the message
        error: Error message if failed
    """
    earthquake: Earthquake
    destination: Destination
    success: bool
    error: str | None = None


@dataclass
class DispatchResult:
    """Result of dispatching a batch of earthquakes.

    Attributes:
        events_delivered: Earthquakes that were attempted and marked tracked
        destinations: Number of registered destinations
        deliveries: Every delivery attempt
        message: Fixed summary when nothing was attempted
    """
    events_delivered: list[Earthquake] = field(default_factory=list)
    destinations: int = 0
    deliveries: list[DeliveryResult] = field(default_factory=list)
    message: str | None = None

    @property
    def deliveries_sent(self) -> list[DeliveryResult]:
        return [d for d in self.deliveries if d.success]

    @property
    def deliveries_failed(self) -> list[DeliveryResult]:
        return [d for d in self.deliveries if not d.success]

    @property
    def summary(self) -> str:
        """Human-readable summary of the dispatch."""
        if self.message:
            return self.message
        return (
            f"Sent {len(self.events_delivered)} new earthquake alerts "
            f"to {self.destinations} servers "
            f"({len(self.deliveries_sent)} of {len(self.deliveries)} deliveries succeeded)."
        )


class Dispatcher:
    """Delivers earthquakes to registered Discord channels.

    This class wires together:
    - Destination registry (who gets alerts)
    - Core formatting and static map URL building
    - Discord client (sending messages)
    - Tracked earthquake store (recording what was announced)
    """

    def __init__(
        self,
        registry: DestinationRegistry,
        tracked_store: TrackedQuakeStore,
        discord_client: DiscordClient,
        mapbox_api_key: str | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        delivery_timeout: float = DEFAULT_DELIVERY_TIMEOUT,
    ) -> None:
        """Initialize dispatcher.

        Args:
            registry: Registered alert channels
            tracked_store: Store of announced earthquake IDs
            discord_client: Client used to post messages
            mapbox_api_key: Mapbox token for map images (Yandex used if None)
            max_workers: Maximum concurrent deliveries
            delivery_timeout: Seconds to wait for all deliveries of one event
        """
        self.registry = registry
        self.tracked_store = tracked_store
        self.discord_client = discord_client
        self.mapbox_api_key = mapbox_api_key
        self.max_workers = max_workers
        self.delivery_timeout = delivery_timeout

    def _deliver(self, earthquake: Earthquake, destination: Destination) -> DeliveryResult:
        """Send one earthquake to one channel. Never raises."""
        try:
            map_url = build_map_url(
                earthquake.latitude,
                earthquake.longitude,
                earthquake.magnitude,
                mapbox_api_key=self.mapbox_api_key,
            )
            payload = format_discord_embed(earthquake, map_url=map_url)
            response = self.discord_client.send_message(destination.target_id, payload)
        except Exception as e:
            return DeliveryResult(
                earthquake=earthquake,
                destination=destination,
                success=False,
                error=str(e),
            )

        return DeliveryResult(
            earthquake=earthquake,
            destination=destination,
            success=response.success,
            error=response.error,
        )

    def send_to_channel(self, earthquake: Earthquake, target_id: str) -> DeliveryResult:
        """Send one earthquake to a single channel. Never raises.

        Used for on-demand lookups: nothing is marked tracked.
        """
        return self._deliver(earthquake, Destination(group_id="", target_id=target_id))

    def _deliver_to_all(
        self,
        executor: ThreadPoolExecutor,
        earthquake: Earthquake,
        destinations: list[Destination],
    ) -> list[DeliveryResult]:
        """Deliver one earthquake to every destination and wait for all of them."""
        futures = {
            executor.submit(self._deliver, earthquake, destination): destination
            for destination in destinations
        }
        done, not_done = wait(futures, timeout=self.delivery_timeout)

        results = [future.result() for future in done]
        for future in not_done:
            future.cancel()
            results.append(DeliveryResult(
                earthquake=earthquake,
                destination=futures[future],
                success=False,
                error=f"Delivery timed out after {self.delivery_timeout}s",
            ))

        for result in results:
            if result.success:
                logger.info(
                    "Sent alert for M%.1f %s to guild %s",
                    earthquake.magnitude,
                    earthquake.place,
                    result.destination.group_id,
                )
            else:
                logger.error(
                    "Error sending to guild %s channel %s for quake %s: %s",
                    result.destination.group_id,
                    result.destination.target_id,
                    earthquake.id,
                    result.error,
                )

        return results

    def dispatch(self, earthquakes: list[Earthquake]) -> DispatchResult:
        """Deliver each earthquake to every destination, then mark it tracked.

        Earthquakes are delivered in the given order. Delivery failures are
        logged and counted; they do not stop other deliveries, and the event
        is still marked tracked once all its attempts have settled.

        Args:
            earthquakes: New earthquakes, oldest first

        Returns:
            DispatchResult summarizing the batch

        Raises:
            StoreError: If an earthquake cannot be marked tracked
        """
        if not earthquakes:
            return DispatchResult(message=NO_NEW_EARTHQUAKES)

        destinations = self.registry.all()
        if not destinations:
            logger.info("No alert channels registered, %d earthquakes left pending", len(earthquakes))
            return DispatchResult(message=NO_DESTINATIONS)

        result = DispatchResult(destinations=len(destinations))

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(destinations)),
            thread_name_prefix="delivery",
        )
        try:
            for earthquake in earthquakes:
                result.deliveries.extend(
                    self._deliver_to_all(executor, earthquake, destinations)
                )
                self.tracked_store.mark_tracked(earthquake.id)
                result.events_delivered.append(earthquake)
        finally:
            # Hung deliveries must not block the cycle
            executor.shutdown(wait=False, cancel_futures=True)

        logger.info(result.summary)
        return result
