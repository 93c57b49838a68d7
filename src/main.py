"""Bot Entry Point.

This module is a thin wrapper that loads configuration, wires the
components together and runs the polling and backup schedulers until the
process is asked to stop.
"""

import logging
import os
import signal
import sys
import threading

from src.core.config import Config
from src.core.earthquake import SOURCE_PHIVOLCS, SOURCE_USGS
from src.dispatcher import Dispatcher
from src.orchestrator import GLOBAL_MIN_MAGNITUDE, Orchestrator
from src.scheduler import PollingScheduler
from src.shell.backup_manager import BackupManager
from src.shell.config_loader import ConfigurationError, load_config, require_valid_config
from src.shell.destination_registry import DestinationRegistry
from src.shell.discord_client import DiscordClient
from src.shell.json_store import JsonStore
from src.shell.phivolcs_client import PhivolcsClient
from src.shell.tracked_quakes import TrackedQuakeStore
from src.shell.usgs_client import USGSClient
from src.sources import EventSource, PhivolcsEventSource, USGSEventSource


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _get_config() -> Config:
    """Load and validate configuration from file or environment."""
    config = load_config()
    require_valid_config(config)
    return config


def build_sources(config: Config) -> list[EventSource]:
    """Create the enabled event sources."""
    sources: list[EventSource] = []
    for name in config.enabled_sources:
        if name == SOURCE_PHIVOLCS:
            sources.append(PhivolcsEventSource(
                PhivolcsClient(timeout=config.fetch_timeout_seconds),
                min_magnitude=config.min_magnitude,
            ))
        elif name == SOURCE_USGS:
            sources.append(USGSEventSource(
                USGSClient(timeout=config.fetch_timeout_seconds),
                bounds=config.usgs_bounds,
                min_magnitude=config.min_magnitude,
            ))
    return sources


def build_orchestrator(config: Config, store: JsonStore) -> Orchestrator:
    """Wire the orchestrator and its collaborators around one store."""
    tracked_store = TrackedQuakeStore(store, max_tracked=config.max_tracked)
    tracked_store.trim()

    registry = DestinationRegistry(store)
    dispatcher = Dispatcher(
        registry=registry,
        tracked_store=tracked_store,
        discord_client=DiscordClient(config.discord_bot_token),
        mapbox_api_key=config.mapbox_api_key,
        delivery_timeout=config.delivery_timeout_seconds,
    )

    return Orchestrator(
        config=config,
        sources=build_sources(config),
        tracked_store=tracked_store,
        registry=registry,
        dispatcher=dispatcher,
        local_source=PhivolcsEventSource(
            PhivolcsClient(timeout=config.fetch_timeout_seconds),
            min_magnitude=config.min_magnitude,
        ),
        global_source=USGSEventSource(
            USGSClient(timeout=config.fetch_timeout_seconds),
            bounds=None,
            min_magnitude=GLOBAL_MIN_MAGNITUDE,
        ),
    )


def run() -> int:
    """Run the bot until SIGINT or SIGTERM.

    Returns:
        Process exit status
    """
    try:
        config = _get_config()
    except ConfigurationError as e:
        logger.error("Configuration error: %s", str(e))
        return 1

    store = JsonStore(config.db_path)
    orchestrator = build_orchestrator(config, store)
    backup_manager = BackupManager(config.db_path, config.backup_dir)

    stats = store.stats()
    logger.info(
        "Database ready: %d guilds, %d tracked quakes",
        stats.guilds,
        stats.tracked_quakes,
    )

    backup_manager.run_scheduled("startup", config.backup_keep_count)

    backup_scheduler = PollingScheduler(
        "backup",
        lambda: backup_manager.run_scheduled("auto", config.backup_keep_count),
        config.backup_interval_hours * 3600,
    )
    poll_scheduler = orchestrator.scheduler

    stop_event = threading.Event()

    def _handle_signal(signum, frame):
        logger.info("Received signal %s, shutting down", signal.Signals(signum).name)
        stop_event.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    backup_scheduler.start(run_immediately=False)
    poll_scheduler.start(run_immediately=True)
    logger.info("Earthquake monitor running with sources: %s", ", ".join(config.enabled_sources))

    stop_event.wait()

    poll_scheduler.stop()
    backup_scheduler.stop()
    logger.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(run())
