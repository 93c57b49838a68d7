#!/usr/bin/env python3
"""Send a test alert to one Discord channel.

⚠️  WARNING: This script posts a REAL message to the given channel!

This script creates a synthetic test earthquake and sends it using the same
formatting as production alerts. A [TEST] marker is added. Nothing is
recorded in the tracked earthquake store.

Usage:
    # Dry run (print the payload, no sends)
    python scripts/send_test_alert.py --channel 123456789012345678 --dry-run

    # Send to a channel
    python scripts/send_test_alert.py --channel 123456789012345678

Environment:
    DISCORD_BOT_TOKEN: Bot token used to post the message
    MAPBOX_API_KEY: Optional Mapbox token for the map image
"""

import argparse
import json
import logging
import os
import sys
from datetime import datetime, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.earthquake import SOURCE_PHIVOLCS, Earthquake
from src.core.formatter import format_discord_embed
from src.core.static_map import build_map_url
from src.shell.discord_client import DiscordClient

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def create_test_earthquake(
    magnitude: float = 5.5,
    location: str = "012 km N 45° E of Tagaytay City (Cavite)",
    latitude: float = 14.19,
    longitude: float = 120.99,
) -> Earthquake:
    """Create a synthetic test earthquake.

    Args:
        magnitude: Earthquake magnitude
        location: Location description
        latitude: Epicenter latitude
        longitude: Epicenter longitude

    Returns:
        Synthetic Earthquake object
    """
    now = datetime.now(timezone.utc)
    return Earthquake(
        id="test-earthquake-" + now.strftime("%Y%m%d%H%M%S"),
        magnitude=magnitude,
        place=location,
        time=now,
        latitude=latitude,
        longitude=longitude,
        depth_km=10.0,
        url="https://earthquake.phivolcs.dost.gov.ph/",
        source=SOURCE_PHIVOLCS,
    )


def main():
    parser = argparse.ArgumentParser(
        description="Send a test earthquake alert to a Discord channel",
        epilog="⚠️  WARNING: This sends a REAL message! Use --dry-run first.",
    )
    parser.add_argument(
        "--channel",
        type=str,
        required=True,
        help="Discord channel ID to post to",
    )
    parser.add_argument(
        "--magnitude",
        type=float,
        default=5.5,
        help="Earthquake magnitude for test (default: 5.5)",
    )
    parser.add_argument(
        "--location",
        type=str,
        default="012 km N 45° E of Tagaytay City (Cavite)",
        help="Location description",
    )
    parser.add_argument(
        "--latitude",
        type=float,
        default=14.19,
        help="Epicenter latitude (default: 14.19)",
    )
    parser.add_argument(
        "--longitude",
        type=float,
        default=120.99,
        help="Epicenter longitude (default: 120.99)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be sent without actually sending",
    )
    args = parser.parse_args()

    earthquake = create_test_earthquake(
        magnitude=args.magnitude,
        location=args.location,
        latitude=args.latitude,
        longitude=args.longitude,
    )

    logger.info("")
    logger.info("Test Earthquake Details:")
    logger.info("  Magnitude: %.1f", earthquake.magnitude)
    logger.info("  Location: %s", earthquake.place)
    logger.info("  Coordinates: (%.4f, %.4f)", earthquake.latitude, earthquake.longitude)
    logger.info("")

    map_url = build_map_url(
        earthquake.latitude,
        earthquake.longitude,
        earthquake.magnitude,
        mapbox_api_key=os.environ.get("MAPBOX_API_KEY"),
    )
    payload = format_discord_embed(earthquake, map_url=map_url, is_test=True)

    if args.dry_run:
        logger.info("DRY RUN - Would send to channel %s:", args.channel)
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    token = os.environ.get("DISCORD_BOT_TOKEN")
    if not token:
        logger.error("DISCORD_BOT_TOKEN is not set")
        return 1

    response = DiscordClient(token).send_message(args.channel, payload)

    if response.success:
        logger.info("  ✓ Test alert sent to channel %s", args.channel)
        return 0

    logger.error("  ✗ Failed to send test alert: %s", response.error)
    return 1


if __name__ == "__main__":
    sys.exit(main())
