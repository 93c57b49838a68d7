"""Static map URLs - Pure functions.

This module builds static map image URLs for earthquake embeds. Discord
fetches the image itself, so no I/O happens here or in the shell.
"""

import math
from urllib.parse import urlencode


MAPBOX_STATIC_BASE = "https://api.mapbox.com/styles/v1/mapbox/streets-v11/static"
YANDEX_STATIC_BASE = "https://static-maps.yandex.ru/1.x/"

# Regional view that keeps nearby provinces visible
DEFAULT_ZOOM = 7

MAPBOX_SIZE = "600x400"
YANDEX_SIZE = "400,300"

# Mapbox pin label and color
MARKER_COLOR = "FF0000"


def get_marker_label(magnitude: float) -> str:
    """Get the pin label for a magnitude (whole number, floored).

    Pure function.
    """
    return str(math.floor(magnitude))


def build_mapbox_url(
    latitude: float,
    longitude: float,
    magnitude: float,
    access_token: str,
    zoom: int = DEFAULT_ZOOM,
) -> str:
    """Build a Mapbox static image URL with a labelled pin on the epicenter.

    Pure function.
    """
    marker = f"pin-s-{get_marker_label(magnitude)}+{MARKER_COLOR}({longitude},{latitude})"
    return (
        f"{MAPBOX_STATIC_BASE}/{marker}/"
        f"{longitude},{latitude},{zoom},0/{MAPBOX_SIZE}@2x"
        f"?{urlencode({'access_token': access_token})}"
    )


def build_yandex_url(
    latitude: float,
    longitude: float,
    zoom: int = DEFAULT_ZOOM,
) -> str:
    """Build a keyless Yandex static map URL with a marker on the epicenter.

    Pure function.
    """
    params = {
        "l": "map",
        "size": YANDEX_SIZE,
        "z": str(zoom),
        "ll": f"{longitude},{latitude}",
        "pt": f"{longitude},{latitude},pmwtm1",
    }
    return f"{YANDEX_STATIC_BASE}?{urlencode(params, safe=',')}"


def build_map_url(
    latitude: float,
    longitude: float,
    magnitude: float,
    mapbox_api_key: str | None = None,
) -> str:
    """Build the static map URL for an earthquake.

    Pure function. Uses Mapbox when an access key is configured, otherwise
    falls back to Yandex, which needs no key.

    Args:
        latitude: Epicenter latitude
        longitude: Epicenter longitude
        magnitude: Earthquake magnitude (used for the Mapbox pin label)
        mapbox_api_key: Mapbox access token, if any

    Returns:
        Image URL
    """
    if mapbox_api_key:
        return build_mapbox_url(latitude, longitude, magnitude, mapbox_api_key)
    return build_yandex_url(latitude, longitude)
