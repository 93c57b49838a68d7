"""PHIVOLCS Client - Imperative Shell.

This module downloads the PHIVOLCS latest-earthquakes page. The page is an
HTML document; scraping it is done by core.bulletin_table.
"""

import logging
import warnings

import requests
from urllib3.exceptions import InsecureRequestWarning


logger = logging.getLogger(__name__)


PHIVOLCS_BASE_URL = "https://earthquake.phivolcs.dost.gov.ph"

# Default timeout for page requests (seconds)
DEFAULT_TIMEOUT = 30

# The site rejects requests without a browser-like user agent
DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.3"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Connection": "keep-alive",
}


class PhivolcsClient:
    """Client for fetching the PHIVOLCS bulletin page.

    This is part of the imperative shell - it handles HTTP I/O.

    TLS verification is disabled: the origin's certificate chain does not
    validate against standard trust stores.
    """

    def __init__(
        self,
        base_url: str = PHIVOLCS_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize PHIVOLCS client.

        Args:
            base_url: Site origin
            timeout: Request timeout in seconds
            session: HTTP session to reuse (a new one is created if omitted)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_page(self) -> str:
        """Fetch the latest-earthquakes page.

        This method performs HTTP I/O.

        Returns:
            Page HTML

        Raises:
            requests.RequestException: If the request fails
        """
        logger.info("Fetching earthquake data from PHIVOLCS")

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", InsecureRequestWarning)
            response = self.session.get(
                self.base_url,
                headers=DEFAULT_HEADERS,
                timeout=self.timeout,
                verify=False,
            )
        response.raise_for_status()

        logger.debug("Fetched %d bytes from PHIVOLCS", len(response.content))

        return response.text
