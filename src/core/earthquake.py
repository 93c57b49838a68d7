"""Earthquake data models and parsing - Pure functions.

This module turns raw source data (USGS GeoJSON features and PHIVOLCS
bulletin table rows) into typed Earthquake objects.
All functions are pure with no side effects.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urljoin


# PHIVOLCS publishes times in Philippine Standard Time (UTC+8)
PHT = timezone(timedelta(hours=8), name="PHT")

# Date-time format used in the PHIVOLCS bulletin table, e.g. "18 October 2026 - 09:12 AM"
PHIVOLCS_TIME_FORMAT = "%d %B %Y - %I:%M %p"

SOURCE_USGS = "usgs"
SOURCE_PHIVOLCS = "phivolcs"

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Earthquake:
    """Immutable earthquake data model.

    Attributes:
        id: Stable identifier, identical across repeated fetches of one event
        magnitude: Source-reported magnitude
        place: Human-readable location description
        time: Event timestamp (timezone-aware, source time)
        latitude: Epicenter latitude
        longitude: Epicenter longitude
        depth_km: Depth in kilometers
        url: Link to the source bulletin/detail page
        source: Which feed produced the record ("usgs" or "phivolcs")
    """
    id: str
    magnitude: float
    place: str
    time: datetime
    latitude: float
    longitude: float
    depth_km: float
    url: str
    source: str = SOURCE_USGS

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class BulletinRow:
    """One raw row of the PHIVOLCS bulletin table, as scraped.

    All values are the cell text with whitespace collapsed.
    """
    date_time: str
    latitude: str
    longitude: str
    depth: str
    magnitude: str
    place: str
    bulletin_href: str = ""


def parse_earthquake(feature: dict[str, Any]) -> Earthquake | None:
    """Parse a single USGS GeoJSON feature into an Earthquake.

    Args:
        feature: GeoJSON feature dict from USGS API

    Returns:
        Earthquake object or None if parsing fails
    """
    try:
        props = feature.get("properties", {})
        geometry = feature.get("geometry", {})
        coords = geometry.get("coordinates", [])

        if len(coords) < 3:
            return None

        # USGS uses milliseconds since epoch
        time_ms = props.get("time")
        if time_ms is None:
            return None

        event_time = datetime.fromtimestamp(time_ms / 1000, tz=timezone.utc)

        magnitude = props.get("mag")
        if magnitude is None:
            return None

        event_id = feature.get("id")
        if not event_id:
            return None

        return Earthquake(
            id=event_id,
            magnitude=float(magnitude),
            place=props.get("place") or "Unknown location",
            time=event_time,
            longitude=float(coords[0]),
            latitude=float(coords[1]),
            depth_km=float(coords[2]),
            url=props.get("url", ""),
            source=SOURCE_USGS,
        )
    except (KeyError, TypeError, ValueError):
        return None


def parse_earthquakes(geojson: dict[str, Any]) -> list[Earthquake]:
    """Parse USGS GeoJSON response into list of Earthquakes.

    Args:
        geojson: Full GeoJSON FeatureCollection from USGS API

    Returns:
        List of valid Earthquake objects, sorted by time (newest first)
    """
    features = geojson.get("features") or []
    earthquakes = []

    for feature in features:
        earthquake = parse_earthquake(feature)
        if earthquake is not None:
            earthquakes.append(earthquake)

    return sorted(earthquakes, key=lambda e: e.time, reverse=True)


def _format_coordinate(value: float) -> str:
    """Render a coordinate the way bulletin ids have always been built.

    Integral values carry no decimal part ("121", not "121.0").
    """
    if value.is_integer():
        return str(int(value))
    return repr(value)


def make_bulletin_id(date_time: str, latitude: float, longitude: float) -> str:
    """Build the stable id of a PHIVOLCS bulletin entry.

    PHIVOLCS has no native event id, so the id is the bulletin time plus the
    epicenter, with whitespace runs replaced by dashes.

    Args:
        date_time: Bulletin date-time text as published
        latitude: Epicenter latitude
        longitude: Epicenter longitude

    Returns:
        Identifier string
    """
    raw = f"{date_time}{_format_coordinate(latitude)}{_format_coordinate(longitude)}"
    return _WHITESPACE.sub("-", raw)


def parse_bulletin_time(date_time: str) -> datetime | None:
    """Parse PHIVOLCS bulletin date-time text (Philippine time).

    Returns:
        Timezone-aware datetime, or None if the text is not a bulletin time
    """
    text = _WHITESPACE.sub(" ", date_time).strip()
    try:
        return datetime.strptime(text, PHIVOLCS_TIME_FORMAT).replace(tzinfo=PHT)
    except ValueError:
        return None


def parse_bulletin_row(row: BulletinRow, base_url: str) -> Earthquake | None:
    """Parse a PHIVOLCS bulletin table row into an Earthquake.

    Args:
        row: Raw scraped row
        base_url: Origin the relative bulletin link is resolved against

    Returns:
        Earthquake object or None if the row is not a valid event
    """
    event_time = parse_bulletin_time(row.date_time)
    if event_time is None:
        return None

    try:
        latitude = float(row.latitude)
        longitude = float(row.longitude)
        depth_km = float(row.depth)
        magnitude = float(row.magnitude)
    except ValueError:
        return None

    href = row.bulletin_href.strip().replace("\\", "/")

    return Earthquake(
        id=make_bulletin_id(row.date_time, latitude, longitude),
        magnitude=magnitude,
        place=_WHITESPACE.sub(" ", row.place).strip(),
        time=event_time,
        latitude=latitude,
        longitude=longitude,
        depth_km=depth_km,
        url=urljoin(base_url.rstrip("/") + "/", href),
        source=SOURCE_PHIVOLCS,
    )


def parse_bulletin_rows(rows: list[BulletinRow], base_url: str) -> list[Earthquake]:
    """Parse all bulletin rows, skipping invalid ones.

    Returns:
        List of Earthquake objects, sorted by time (newest first)
    """
    earthquakes = []
    for row in rows:
        earthquake = parse_bulletin_row(row, base_url)
        if earthquake is not None:
            earthquakes.append(earthquake)

    return sorted(earthquakes, key=lambda e: e.time, reverse=True)


def filter_by_magnitude(
    earthquakes: list[Earthquake],
    min_magnitude: float | None = None,
    max_magnitude: float | None = None,
) -> list[Earthquake]:
    """Filter earthquakes by magnitude range.

    Pure function.

    Args:
        earthquakes: List of earthquakes to filter
        min_magnitude: Minimum magnitude (inclusive), None for no minimum
        max_magnitude: Maximum magnitude (inclusive), None for no maximum

    Returns:
        Filtered list of earthquakes
    """
    result = earthquakes

    if min_magnitude is not None:
        result = [e for e in result if e.magnitude >= min_magnitude]

    if max_magnitude is not None:
        result = [e for e in result if e.magnitude <= max_magnitude]

    return result


def filter_by_time(
    earthquakes: list[Earthquake],
    after: datetime | None = None,
    before: datetime | None = None,
) -> list[Earthquake]:
    """Filter earthquakes by time range.

    Pure function.

    Args:
        earthquakes: List of earthquakes to filter
        after: Only include earthquakes at or after this time
        before: Only include earthquakes before this time

    Returns:
        Filtered list of earthquakes
    """
    result = earthquakes

    if after is not None:
        result = [e for e in result if e.time >= after]

    if before is not None:
        result = [e for e in result if e.time < before]

    return result


def sort_chronologically(earthquakes: list[Earthquake]) -> list[Earthquake]:
    """Return earthquakes oldest first, so older events are announced first.

    The sort is stable: events with equal timestamps keep their input order.
    """
    return sorted(earthquakes, key=lambda e: e.time)


def unique_by_id(earthquakes: list[Earthquake]) -> list[Earthquake]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[str] = set()
    result = []
    for earthquake in earthquakes:
        if earthquake.id not in seen:
            seen.add(earthquake.id)
            result.append(earthquake)
    return result
