"""Tests for the event sources.

Source clients are mocked; parsing runs for real.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
import requests

from src.core.geo import PHILIPPINES_BOUNDS
from src.sources import PhivolcsEventSource, USGSEventSource


NOW = datetime(2026, 10, 18, 4, 0, tzinfo=timezone.utc)
LOOKBACK = timedelta(hours=6)


def feature(quake_id, minutes_ago, magnitude=5.0, lon=126.55, lat=8.31):
    event_time = NOW - timedelta(minutes=minutes_ago)
    return {
        "id": quake_id,
        "properties": {
            "mag": magnitude,
            "place": f"Place {quake_id}",
            "time": int(event_time.timestamp() * 1000),
            "url": f"https://earthquake.usgs.gov/earthquakes/eventpage/{quake_id}",
        },
        "geometry": {"coordinates": [lon, lat, 10.0]},
    }


PHIVOLCS_PAGE = """
<table class="MsoNormalTable">
  <tr><th>Date - Time (Philippine Time)</th></tr>
  <tr>
    <td><a href="2026_Earthquake_Information\\October\\b2.html">18 October 2026 - 11:30 AM</a></td>
    <td>09.12</td><td>126.20</td><td>024</td><td>5.1</td><td>Hinatuan (Surigao Del Sur)</td>
  </tr>
  <tr>
    <td><a href="2026_Earthquake_Information\\October\\b1.html">18 October 2026 - 10:00 AM</a></td>
    <td>14.19</td><td>120.99</td><td>012</td><td>3.2</td><td>Tagaytay City (Cavite)</td>
  </tr>
  <tr>
    <td><a href="old.html">17 October 2026 - 09:00 PM</a></td>
    <td>14.19</td><td>120.99</td><td>012</td><td>4.8</td><td>Tagaytay City (Cavite)</td>
  </tr>
</table>
"""


@pytest.fixture
def usgs_client():
    client = Mock()
    client.fetch_recent.return_value = {
        "features": [
            feature("us1", minutes_ago=10, magnitude=5.1),
            feature("us2", minutes_ago=30, magnitude=3.0),
            feature("us3", minutes_ago=60 * 7, magnitude=6.0),
            feature("us4", minutes_ago=20, magnitude=4.5, lon=139.7, lat=35.7),
        ]
    }
    return client


@pytest.fixture
def phivolcs_client():
    client = Mock()
    client.base_url = "https://earthquake.phivolcs.dost.gov.ph"
    client.fetch_page.return_value = PHIVOLCS_PAGE
    return client


def make_usgs(client, clock=lambda: NOW):
    return USGSEventSource(client, bounds=PHILIPPINES_BOUNDS, min_magnitude=4.0, clock=clock)


class TestUSGSEventSource:
    """Tests for USGSEventSource.fetch()."""

    def test_filters_magnitude_window_and_region(self, usgs_client):
        result = make_usgs(usgs_client).fetch(LOOKBACK)

        assert [e.id for e in result] == ["us1"]

    def test_queries_client_with_bounds(self, usgs_client):
        make_usgs(usgs_client).fetch(LOOKBACK)

        usgs_client.fetch_recent.assert_called_once_with(
            LOOKBACK,
            bounds=PHILIPPINES_BOUNDS,
            min_magnitude=4.0,
        )

    def test_snapshot_is_repeatable(self, usgs_client):
        source = make_usgs(usgs_client)

        assert [e.id for e in source.fetch(LOOKBACK)] == ["us1"]
        assert [e.id for e in source.fetch(LOOKBACK)] == ["us1"]

    def test_network_error_returns_empty(self, usgs_client):
        usgs_client.fetch_recent.side_effect = requests.ConnectionError("down")

        assert make_usgs(usgs_client).fetch(LOOKBACK) == []

    def test_bad_payload_returns_empty(self, usgs_client):
        usgs_client.fetch_recent.side_effect = ValueError("not json")

        assert make_usgs(usgs_client).fetch(LOOKBACK) == []


class TestRecentIdCache:
    """Tests for include_already_tracked=False."""

    def test_second_fetch_returns_nothing_new(self, usgs_client):
        source = make_usgs(usgs_client)

        first = source.fetch(LOOKBACK, include_already_tracked=False)
        second = source.fetch(LOOKBACK, include_already_tracked=False)

        assert [e.id for e in first] == ["us1"]
        assert second == []

    def test_cache_expires(self, usgs_client):
        now = {"value": NOW}
        source = make_usgs(usgs_client, clock=lambda: now["value"])
        source.fetch(LOOKBACK, include_already_tracked=False)

        # Keep the event inside the lookback window after the clock moves
        usgs_client.fetch_recent.return_value = {"features": [feature("us1", minutes_ago=-400, magnitude=5.1)]}
        now["value"] = NOW + timedelta(hours=6, minutes=1)

        result = source.fetch(LOOKBACK, include_already_tracked=False)

        assert [e.id for e in result] == ["us1"]


class TestPhivolcsEventSource:
    """Tests for PhivolcsEventSource.fetch()."""

    def test_parses_and_filters_page(self, phivolcs_client):
        source = PhivolcsEventSource(phivolcs_client, min_magnitude=4.0, clock=lambda: NOW)

        result = source.fetch(LOOKBACK)

        assert len(result) == 1
        quake = result[0]
        assert quake.magnitude == 5.1
        assert quake.source == "phivolcs"
        assert quake.time == datetime(2026, 10, 18, 3, 30, tzinfo=timezone.utc)
        assert quake.url == "https://earthquake.phivolcs.dost.gov.ph/2026_Earthquake_Information/October/b2.html"

    def test_missing_table_returns_empty(self, phivolcs_client):
        phivolcs_client.fetch_page.return_value = "<html>maintenance</html>"
        source = PhivolcsEventSource(phivolcs_client, min_magnitude=4.0, clock=lambda: NOW)

        assert source.fetch(LOOKBACK) == []

    def test_http_error_returns_empty(self, phivolcs_client):
        phivolcs_client.fetch_page.side_effect = requests.HTTPError("503")
        source = PhivolcsEventSource(phivolcs_client, clock=lambda: NOW)

        assert source.fetch(LOOKBACK) == []
