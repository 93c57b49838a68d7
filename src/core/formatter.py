"""Message formatting - Pure functions.

This module formats earthquake data into Discord notification payloads.
All functions are pure with no side effects.
"""

from datetime import datetime, timezone
from typing import Any

from src.core.earthquake import PHT, SOURCE_PHIVOLCS, SOURCE_USGS, Earthquake

# Alerts are displayed in Philippine Standard Time (UTC+8)
DISPLAY_TZ = PHT

SOURCE_LABELS = {
    SOURCE_PHIVOLCS: "Phivolcs",
    SOURCE_USGS: "USGS",
}


def get_magnitude_color(magnitude: float) -> int:
    """Get the embed color for a magnitude.

    Pure function.

    Returns:
        RGB color as an integer (e.g., 0xFF0000)
    """
    if magnitude >= 7.0:
        return 0xFF0000  # Red (Major)
    elif magnitude >= 6.0:
        return 0xFFA500  # Orange (Strong)
    elif magnitude >= 5.0:
        return 0xFFFF00  # Yellow (Moderate)
    return 0x00FF00  # Green (Light)


def get_severity_label(magnitude: float) -> str:
    """Get a human-readable severity label.

    Pure function.
    """
    if magnitude >= 8.0:
        return "Great"
    elif magnitude >= 7.0:
        return "Major"
    elif magnitude >= 6.0:
        return "Strong"
    elif magnitude >= 5.0:
        return "Moderate"
    elif magnitude >= 4.0:
        return "Light"
    elif magnitude >= 3.0:
        return "Minor"
    else:
        return "Micro"


def format_display_time(event_time: datetime) -> str:
    """Format an event time in the display timezone.

    Pure function.
    """
    return event_time.astimezone(DISPLAY_TZ).strftime("%Y-%m-%d %I:%M %p PHT")


def format_earthquake_summary(earthquake: Earthquake) -> str:
    """Format a one-line summary of an earthquake.

    Pure function.

    Args:
        earthquake: Earthquake to summarize

    Returns:
        One-line summary string
    """
    return (
        f"M{earthquake.magnitude:.1f} - {earthquake.place} "
        f"at {format_display_time(earthquake.time)} "
        f"(depth: {earthquake.depth_km:.1f}km)"
    )


def format_discord_embed(
    earthquake: Earthquake,
    map_url: str | None = None,
    is_test: bool = False,
) -> dict[str, Any]:
    """Format an earthquake as a Discord message payload with one embed.

    Pure function.

    Args:
        earthquake: Earthquake to format
        map_url: Optional static map image URL
        is_test: Mark the message as a test alert

    Returns:
        Discord create-message payload dict
    """
    magnitude = f"M{earthquake.magnitude:.1f}"
    source_label = SOURCE_LABELS.get(earthquake.source, earthquake.source)

    embed: dict[str, Any] = {
        "title": f"{'[TEST] ' if is_test else ''}🚨 {magnitude} - {earthquake.place}",
        "description": (
            f"An earthquake of magnitude {earthquake.magnitude:.1f} "
            f"occurred {earthquake.place}."
        ),
        "color": get_magnitude_color(earthquake.magnitude),
        "fields": [
            {
                "name": "Time (PHT)",
                "value": format_display_time(earthquake.time),
                "inline": True,
            },
            {
                "name": "Magnitude",
                "value": f"{magnitude} ({get_severity_label(earthquake.magnitude)})",
                "inline": True,
            },
            {
                "name": "Depth",
                "value": f"{earthquake.depth_km:g} km",
                "inline": True,
            },
            {
                "name": "Coordinates",
                "value": f"Lat: {earthquake.latitude:.2f}, Lon: {earthquake.longitude:.2f}",
                "inline": True,
            },
        ],
        "footer": {"text": f"Data sourced from {source_label}"},
        "timestamp": earthquake.time.astimezone(timezone.utc).isoformat(),
    }

    if earthquake.url:
        embed["url"] = earthquake.url

    if map_url:
        embed["image"] = {"url": map_url}

    return {"embeds": [embed]}
