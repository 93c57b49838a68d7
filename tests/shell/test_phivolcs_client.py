"""Tests for the PHIVOLCS page client.

Uses the `responses` library to mock HTTP requests.
"""

import warnings
from unittest.mock import Mock

import pytest
import requests
import responses

from src.shell.phivolcs_client import PHIVOLCS_BASE_URL, PhivolcsClient


class TestFetchPage:
    """Tests for PhivolcsClient.fetch_page()."""

    @responses.activate
    def test_returns_html(self):
        responses.add(responses.GET, PHIVOLCS_BASE_URL, body="<html>ok</html>", status=200)

        assert PhivolcsClient().fetch_page() == "<html>ok</html>"

    @responses.activate
    def test_sends_browser_headers(self):
        responses.add(responses.GET, PHIVOLCS_BASE_URL, body="", status=200)

        PhivolcsClient().fetch_page()

        headers = responses.calls[0].request.headers
        assert headers["User-Agent"].startswith("Mozilla/5.0")
        assert "text/html" in headers["Accept"]
        assert headers["Accept-Language"] == "en-US,en;q=0.5"

    @responses.activate
    def test_http_error_raises(self):
        responses.add(responses.GET, PHIVOLCS_BASE_URL, status=500)

        with pytest.raises(requests.HTTPError):
            PhivolcsClient().fetch_page()

    @responses.activate
    def test_connection_error_raises(self):
        responses.add(
            responses.GET,
            PHIVOLCS_BASE_URL,
            body=requests.ConnectionError("connection refused"),
        )

        with pytest.raises(requests.ConnectionError):
            PhivolcsClient().fetch_page()

    def test_disables_tls_verification_and_uses_timeout(self):
        session = Mock()
        session.get.return_value.text = "<html></html>"
        session.get.return_value.content = b"<html></html>"
        client = PhivolcsClient(timeout=7, session=session)

        client.fetch_page()

        kwargs = session.get.call_args.kwargs
        assert kwargs["verify"] is False
        assert kwargs["timeout"] == 7

    def test_restores_warning_filters(self):
        session = Mock()
        session.get.return_value.text = ""
        session.get.return_value.content = b""
        before = list(warnings.filters)

        PhivolcsClient(session=session).fetch_page()

        assert warnings.filters == before
