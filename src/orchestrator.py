"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components. It's the "glue" that
makes the application work.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta

from src.core.config import Config
from src.core.dedup import merge_sources
from src.core.earthquake import Earthquake, sort_chronologically, unique_by_id
from src.core.rate_limit import (
    CooldownState,
    check_cooldown,
    format_cooldown,
    record_use,
    reset_cooldown,
)
from src.dispatcher import DispatchResult, Dispatcher
from src.scheduler import PollingScheduler
from src.shell.destination_registry import DestinationRegistry
from src.shell.json_store import StoreError
from src.shell.tracked_quakes import TrackedQuakeStore
from src.sources import EventSource, PhivolcsEventSource, USGSEventSource


logger = logging.getLogger(__name__)


REQUEST_UPDATE_COMMAND = "request-update"
LOCAL_LOOKUP_COMMAND = "get-local-quake"
GLOBAL_LOOKUP_COMMAND = "get-global-quake"

# Latest-earthquake lookups: PHIVOLCS over 12 hours, worldwide USGS M2.5+ over 6
LOCAL_LOOKUP_WINDOW = timedelta(hours=12)
GLOBAL_LOOKUP_WINDOW = timedelta(hours=6)
GLOBAL_MIN_MAGNITUDE = 2.5

CYCLE_FAILED = "Error occurred while sending earthquake alerts."
NO_CHANNEL_SET = "This server does not have an earthquake alert channel set."
LOOKUP_FAILED = "Failed to post earthquake data. Please try again later."


@dataclass
class ProcessingResult:
    """Result of a complete earthquake monitoring cycle.

    Attributes:
        earthquakes_fetched: Earthquakes returned by all sources
        earthquakes_new: Earthquakes not previously announced
        dispatch: Result of delivering the new earthquakes
    """
    earthquakes_fetched: int
    earthquakes_new: int
    dispatch: DispatchResult = field(default_factory=DispatchResult)

    @property
    def summary(self) -> str:
        """Human-readable summary of the processing result."""
        return self.dispatch.summary


class Orchestrator:
    """Coordinates earthquake monitoring and alerting.

    This class wires together:
    - Event sources (USGS, PHIVOLCS)
    - Core functions (merging, ordering)
    - Tracked earthquake store (deduplication state)
    - Dispatcher (fan-out to registered Discord channels)
    - Destination registry (per-server alert channels)

    Monitoring cycles never overlap: a cycle started while another one is
    running waits for it, then sees everything the first one tracked. The
    orchestrator owns the polling scheduler, so timer runs and manual
    updates share one single-flight guard.
    """

    def __init__(
        self,
        config: Config,
        sources: list[EventSource],
        tracked_store: TrackedQuakeStore,
        registry: DestinationRegistry,
        dispatcher: Dispatcher,
        clock: Callable[[], float] = time.monotonic,
        local_source: EventSource | None = None,
        global_source: EventSource | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            config: Application configuration
            sources: Enabled earthquake sources
            tracked_store: Store of announced earthquake IDs
            registry: Registered alert channels
            dispatcher: Delivers new earthquakes
            clock: Seconds clock used for command cooldowns
            local_source: Source for local lookups (PHIVOLCS if None)
            global_source: Source for global lookups (worldwide USGS if None)
        """
        self.config = config
        self.sources = sources
        self.tracked_store = tracked_store
        self.registry = registry
        self.dispatcher = dispatcher
        self.clock = clock
        self.local_source = local_source or PhivolcsEventSource(
            min_magnitude=config.min_magnitude,
        )
        self.global_source = global_source or USGSEventSource(
            bounds=None,
            min_magnitude=GLOBAL_MIN_MAGNITUDE,
        )
        self._cycle_lock = threading.Lock()
        self.scheduler = PollingScheduler(
            "poll",
            lambda: self.run_cycle_now(),
            config.polling_interval_seconds,
        )
        self._cooldowns = CooldownState()
        self._cooldown_lock = threading.Lock()

    def _fetch_earthquakes(self) -> list[Earthquake]:
        """Fetch from every source and merge into one chronological batch."""
        lookback = timedelta(hours=self.config.lookback_hours)

        earthquakes: list[Earthquake] = []
        for source in self.sources:
            earthquakes.extend(source.fetch(lookback, include_already_tracked=True))

        return sort_chronologically(unique_by_id(earthquakes))

    def _track_aliases(self, aliases: dict[str, str]) -> None:
        """Track second-source reports of announced earthquakes under their own IDs."""
        for duplicate_id, kept_id in aliases.items():
            if self.tracked_store.is_tracked(kept_id):
                self.tracked_store.mark_tracked(duplicate_id)

    def process(self) -> ProcessingResult:
        """Run a complete earthquake monitoring cycle.

        This is the main entry point that:
        1. Fetches earthquakes from every source
        2. Collapses reports of one earthquake from several sources (pure)
        3. Filters out already-announced earthquakes
        4. Delivers the rest and marks them tracked

        Returns:
            ProcessingResult with summary of actions taken

        Raises:
            StoreError: If an earthquake cannot be marked tracked
        """
        with self._cycle_lock:
            logger.info("Starting earthquake monitoring cycle")

            earthquakes = self._fetch_earthquakes()
            tracked = set(self.tracked_store.tracked_ids())
            merged = merge_sources(earthquakes, tracked.__contains__)
            new_earthquakes = self.tracked_store.filter_untracked(merged.earthquakes)

            logger.info(
                "Fetched %d earthquakes (%d reported by more than one source), %d new",
                len(earthquakes),
                len(merged.aliases),
                len(new_earthquakes),
            )

            dispatch = self.dispatcher.dispatch(new_earthquakes)
            self._track_aliases(merged.aliases)

            return ProcessingResult(
                earthquakes_fetched=len(earthquakes),
                earthquakes_new=len(new_earthquakes),
                dispatch=dispatch,
            )

    def run_cycle_now(self) -> str:
        """Run one cycle and return its summary. Never raises.

        Waits for a cycle that is already running.
        """
        try:
            result = self.process()
        except Exception:
            logger.exception("Error in earthquake monitoring cycle")
            return CYCLE_FAILED

        logger.info("Completed: %s", result.summary)
        return result.summary

    def _start_cooldown(self, command: str, user_id: str, cooldown: float) -> str | None:
        """Record a command use unless the user is on cooldown.

        Returns:
            None if the command may run, else the formatted wait time
        """
        with self._cooldown_lock:
            now = self.clock()
            check = check_cooldown(command, user_id, cooldown, self._cooldowns, now)
            if check.limited:
                return format_cooldown(check.time_remaining)
            self._cooldowns = record_use(command, user_id, cooldown, self._cooldowns, now)
            return None

    def _clear_cooldown(self, command: str, user_id: str) -> None:
        with self._cooldown_lock:
            self._cooldowns = reset_cooldown(command, user_id, self._cooldowns)

    def request_update(self, user_id: str) -> str:
        """Run an on-demand cycle for a user, subject to a per-user cooldown.

        The cycle goes through the polling scheduler, so it waits for a timer
        run in progress instead of overlapping it. A failed cycle does not
        count against the cooldown.

        Args:
            user_id: User requesting the update

        Returns:
            The cycle summary, or a cooldown message
        """
        wait = self._start_cooldown(
            REQUEST_UPDATE_COMMAND,
            user_id,
            self.config.request_update_cooldown_seconds,
        )
        if wait is not None:
            return f"⏳ Please wait **{wait}** before requesting another update."

        logger.info("Manual update requested by user %s", user_id)
        summary = self.scheduler.trigger_now()
        if summary is None or summary == CYCLE_FAILED:
            self._clear_cooldown(REQUEST_UPDATE_COMMAND, user_id)
            return CYCLE_FAILED
        return summary

    def _post_latest(
        self,
        command: str,
        source: EventSource,
        window: timedelta,
        channel_id: str,
        user_id: str,
    ) -> str:
        wait = self._start_cooldown(command, user_id, self.config.lookup_cooldown_seconds)
        if wait is not None:
            return f"⏳ Please wait **{wait}** before requesting another earthquake update."

        earthquakes = source.fetch(window, include_already_tracked=True)
        if not earthquakes:
            hours = int(window.total_seconds() // 3600)
            return f"No recent earthquakes found in the last {hours} hours."

        latest = max(earthquakes, key=lambda e: e.time)
        result = self.dispatcher.send_to_channel(latest, channel_id)
        if not result.success:
            logger.error(
                "Error posting quake %s to channel %s: %s",
                latest.id,
                channel_id,
                result.error,
            )
            self._clear_cooldown(command, user_id)
            return LOOKUP_FAILED

        return f"Posted M{latest.magnitude:.1f} - {latest.place} to <#{channel_id}>."

    def latest_local_quake(self, channel_id: str, user_id: str) -> str:
        """Post the newest PHIVOLCS earthquake to a channel.

        Looks at the last 12 hours, announced or not, and does not mark
        anything tracked.

        Args:
            channel_id: Channel the lookup was requested from
            user_id: User requesting the lookup (30 second cooldown by default)

        Returns:
            Status message for the user
        """
        return self._post_latest(
            LOCAL_LOOKUP_COMMAND,
            self.local_source,
            LOCAL_LOOKUP_WINDOW,
            channel_id,
            user_id,
        )

    def latest_global_quake(self, channel_id: str, user_id: str) -> str:
        """Post the newest worldwide USGS earthquake (M2.5+, last 6 hours) to a channel."""
        return self._post_latest(
            GLOBAL_LOOKUP_COMMAND,
            self.global_source,
            GLOBAL_LOOKUP_WINDOW,
            channel_id,
            user_id,
        )

    def set_destination(self, group_id: str, target_id: str) -> str:
        """Register the alert channel of a server."""
        try:
            self.registry.set(group_id, target_id)
        except StoreError:
            logger.exception("Could not save alert channel for guild %s", group_id)
            return "❌ Could not save the earthquake alert channel. Please try again later."

        return f"✅ Earthquake alert channel set to <#{target_id}>"

    def remove_destination(self, group_id: str) -> str:
        """Unregister the alert channel of a server."""
        try:
            removed = self.registry.delete(group_id)
        except StoreError:
            logger.exception("Could not remove alert channel for guild %s", group_id)
            return "❌ Could not unlink the earthquake alert channel. Please try again later."

        if not removed:
            return NO_CHANNEL_SET
        return "✅ Earthquake alert channel unlinked successfully."

    def get_destination(self, group_id: str) -> str:
        """Describe the alert channel of a server."""
        target_id = self.registry.get(group_id)
        if target_id is None:
            return NO_CHANNEL_SET
        return f"This server has an earthquake alert channel set to <#{target_id}>."
