"""Event Sources - Wires source clients to the parsing core.

Each source fetches one feed, normalizes it into Earthquake records and
applies the magnitude and lookback filters. Sources never raise: a failed
fetch is logged and reported as "no earthquakes", and the next poll retries
the same window.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from src.core.bulletin_table import parse_bulletin_table
from src.core.earthquake import (
    SOURCE_PHIVOLCS,
    SOURCE_USGS,
    Earthquake,
    filter_by_magnitude,
    filter_by_time,
    parse_bulletin_rows,
    parse_earthquakes,
)
from src.core.geo import PHILIPPINES_BOUNDS, BoundingBox
from src.shell.phivolcs_client import PhivolcsClient
from src.shell.usgs_client import USGSClient


logger = logging.getLogger(__name__)


# How long the recent-ID cache remembers IDs before it is cleared
RECENT_ID_TTL = timedelta(hours=6)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EventSource:
    """Base class for earthquake feeds.

    Subclasses implement _fetch_events(); fetch() adds filtering, the
    recent-ID cache and the log-and-degrade error policy.
    """

    name = "source"

    def __init__(
        self,
        min_magnitude: float | None = None,
        clock: Callable[[], datetime] = _utcnow,
        recent_id_ttl: timedelta = RECENT_ID_TTL,
    ) -> None:
        """Initialize the source.

        Args:
            min_magnitude: Drop events below this magnitude
            clock: Returns the current time (timezone-aware)
            recent_id_ttl: How long the recent-ID cache lives before clearing
        """
        self.min_magnitude = min_magnitude
        self.clock = clock
        self.recent_id_ttl = recent_id_ttl
        self._recent_ids: set[str] = set()
        self._recent_ids_since = clock()

    def _fetch_events(self, lookback: timedelta) -> list[Earthquake]:
        raise NotImplementedError

    def _expire_recent_ids(self, now: datetime) -> None:
        if now - self._recent_ids_since > self.recent_id_ttl:
            if self._recent_ids:
                logger.info(
                    "Cleared %d cached %s quake IDs",
                    len(self._recent_ids),
                    self.name,
                )
            self._recent_ids.clear()
            self._recent_ids_since = now

    def fetch(
        self,
        lookback: timedelta,
        include_already_tracked: bool = True,
    ) -> list[Earthquake]:
        """Fetch earthquakes from the last `lookback` period.

        Args:
            lookback: How far back to look
            include_already_tracked: True returns the full snapshot. False
                returns only events this source has not returned before
                (per its in-memory cache) and remembers them.

        Returns:
            Earthquakes, newest first. Empty on any failure.
        """
        now = self.clock()

        try:
            events = self._fetch_events(lookback)
        except Exception as e:
            logger.error("Error fetching data from %s: %s", self.name, str(e))
            return []

        events = filter_by_magnitude(events, min_magnitude=self.min_magnitude)
        events = filter_by_time(events, after=now - lookback)

        if not include_already_tracked:
            self._expire_recent_ids(now)
            events = [e for e in events if e.id not in self._recent_ids]
            self._recent_ids.update(e.id for e in events)

        logger.info("%d earthquakes from %s within %s", len(events), self.name, lookback)
        return events


class USGSEventSource(EventSource):
    """Earthquakes from the USGS FDSN event service (GeoJSON)."""

    name = SOURCE_USGS

    def __init__(
        self,
        client: USGSClient | None = None,
        bounds: BoundingBox | None = PHILIPPINES_BOUNDS,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.client = client or USGSClient()
        self.bounds = bounds

    def _fetch_events(self, lookback: timedelta) -> list[Earthquake]:
        geojson = self.client.fetch_recent(
            lookback,
            bounds=self.bounds,
            min_magnitude=self.min_magnitude,
        )
        events = parse_earthquakes(geojson)
        if self.bounds is not None:
            events = [e for e in events if self.bounds.contains(e.latitude, e.longitude)]
        return events


class PhivolcsEventSource(EventSource):
    """Earthquakes scraped from the PHIVOLCS bulletin page."""

    name = SOURCE_PHIVOLCS

    def __init__(self, client: PhivolcsClient | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.client = client or PhivolcsClient()

    def _fetch_events(self, lookback: timedelta) -> list[Earthquake]:
        html = self.client.fetch_page()
        rows = parse_bulletin_table(html)
        if rows is None:
            logger.error("Could not find the earthquake data table on the PHIVOLCS page")
            return []
        return parse_bulletin_rows(rows, self.client.base_url)
