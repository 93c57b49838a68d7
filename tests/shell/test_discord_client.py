"""Tests for the Discord REST client.

Uses the `responses` library to mock HTTP requests.
"""

import json

import requests
import responses

from src.shell.discord_client import DISCORD_API_BASE, DiscordClient


CHANNEL_ID = "123456789012345678"
MESSAGES_URL = f"{DISCORD_API_BASE}/channels/{CHANNEL_ID}/messages"
PAYLOAD = {"embeds": [{"title": "🚨 M4.2 - Test"}]}


class TestSendMessage:
    """Tests for DiscordClient.send_message()."""

    @responses.activate
    def test_success(self):
        responses.add(responses.POST, MESSAGES_URL, json={"id": "1"}, status=200)

        result = DiscordClient("bot-token").send_message(CHANNEL_ID, PAYLOAD)

        assert result.success is True
        assert result.status_code == 200
        assert result.error is None

    @responses.activate
    def test_sends_bot_authorization_and_json(self):
        responses.add(responses.POST, MESSAGES_URL, json={"id": "1"}, status=200)

        DiscordClient("bot-token").send_message(CHANNEL_ID, PAYLOAD)

        request = responses.calls[0].request
        assert request.headers["Authorization"] == "Bot bot-token"
        assert json.loads(request.body) == PAYLOAD

    @responses.activate
    def test_unknown_channel(self):
        responses.add(
            responses.POST,
            MESSAGES_URL,
            json={"message": "Unknown Channel", "code": 10003},
            status=404,
        )

        result = DiscordClient("bot-token").send_message(CHANNEL_ID, PAYLOAD)

        assert result.success is False
        assert result.status_code == 404
        assert "Channel not found" in result.error

    @responses.activate
    def test_missing_permissions(self):
        responses.add(
            responses.POST,
            MESSAGES_URL,
            json={"message": "Missing Permissions", "code": 50013},
            status=403,
        )

        result = DiscordClient("bot-token").send_message(CHANNEL_ID, PAYLOAD)

        assert result.success is False
        assert "Missing permission" in result.error

    @responses.activate
    def test_non_json_error_body(self):
        responses.add(responses.POST, MESSAGES_URL, body="Bad Gateway", status=502)

        result = DiscordClient("bot-token").send_message(CHANNEL_ID, PAYLOAD)

        assert result.success is False
        assert result.error == "Bad Gateway"

    @responses.activate
    def test_timeout(self):
        responses.add(responses.POST, MESSAGES_URL, body=requests.Timeout("slow"))

        result = DiscordClient("bot-token").send_message(CHANNEL_ID, PAYLOAD)

        assert result.success is False
        assert result.status_code == 0
        assert result.error == "Request timed out"

    @responses.activate
    def test_connection_error(self):
        responses.add(responses.POST, MESSAGES_URL, body=requests.ConnectionError("refused"))

        result = DiscordClient("bot-token").send_message(CHANNEL_ID, PAYLOAD)

        assert result.success is False
        assert result.status_code == 0
        assert "refused" in result.error
