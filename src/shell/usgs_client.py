"""USGS API Client - Imperative Shell.

Queries the USGS FDSN event service for GeoJSON. Turning features into
Earthquake records happens in core.earthquake.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import requests

from src.core.geo import BoundingBox


logger = logging.getLogger(__name__)


USGS_API_BASE = "https://earthquake.usgs.gov/fdsnws/event/1/query"

DEFAULT_TIMEOUT = 30

# FDSN expects naive UTC timestamps
FDSN_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _fdsn_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime(FDSN_TIME_FORMAT)


@dataclass
class USGSQueryParams:
    """One FDSN event query.

    Attributes:
        bounds: Region to search; worldwide if None
        min_magnitude: Smallest magnitude returned
        start_time: Window start (any timezone, sent as UTC)
        end_time: Window end (any timezone, sent as UTC)
        limit: Cap on returned features; unlimited if None
    """
    bounds: BoundingBox | None = None
    min_magnitude: float | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    limit: int | None = 100


class USGSClient:
    """Fetches raw GeoJSON from the USGS event service."""

    def __init__(
        self,
        base_url: str = USGS_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _build_params(self, query: USGSQueryParams) -> dict[str, str]:
        params = {"format": "geojson", "orderby": "time"}

        if query.bounds is not None:
            box = query.bounds
            params.update(
                minlatitude=str(box.min_latitude),
                maxlatitude=str(box.max_latitude),
                minlongitude=str(box.min_longitude),
                maxlongitude=str(box.max_longitude),
            )

        optional = {
            "minmagnitude": query.min_magnitude,
            "starttime": query.start_time and _fdsn_time(query.start_time),
            "endtime": query.end_time and _fdsn_time(query.end_time),
            "limit": query.limit,
        }
        params.update({key: str(value) for key, value in optional.items() if value is not None})
        return params

    def fetch_earthquakes(self, query: USGSQueryParams) -> dict[str, Any]:
        """Run one FDSN query.

        Returns:
            The GeoJSON FeatureCollection as a dict

        Raises:
            requests.RequestException: On connection errors or a non-2xx status
            ValueError: If the body is not JSON
        """
        params = self._build_params(query)
        logger.debug("USGS query: %s", params)

        response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        response.raise_for_status()
        collection = response.json()

        features = collection.get("features") or []
        logger.info("USGS returned %d features", len(features))
        return collection

    def fetch_recent(
        self,
        lookback: timedelta,
        bounds: BoundingBox | None = None,
        min_magnitude: float | None = None,
        limit: int | None = 100,
    ) -> dict[str, Any]:
        """Query the window that ends now and starts `lookback` earlier."""
        end = datetime.now(timezone.utc)
        return self.fetch_earthquakes(USGSQueryParams(
            bounds=bounds,
            min_magnitude=min_magnitude,
            start_time=end - lookback,
            end_time=end,
            limit=limit,
        ))
