"""Discord Client - Imperative Shell.

This module posts messages to Discord channels through the REST API.
All I/O is contained here; message formatting is in the core module.
"""

import logging
from dataclasses import dataclass
from typing import Any

import requests


logger = logging.getLogger(__name__)


DISCORD_API_BASE = "https://discord.com/api/v10"

# Default timeout for message requests (seconds)
DEFAULT_TIMEOUT = 10

# Discord error codes worth naming in logs
UNKNOWN_CHANNEL = 10003
MISSING_ACCESS = 50001
MISSING_PERMISSIONS = 50013


@dataclass
class DiscordResponse:
    """Response from the Discord API.

    Attributes:
        success: Whether the message was posted
        status_code: HTTP status code (0 if no response was received)
        error: Error message if failed
    """
    success: bool
    status_code: int
    error: str | None = None


def _describe_error(response: requests.Response) -> str:
    """Build a readable error from a Discord error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    code = body.get("code")
    message = body.get("message", "")
    if code == UNKNOWN_CHANNEL:
        return f"Channel not found (it may have been deleted): {message}"
    if code in (MISSING_ACCESS, MISSING_PERMISSIONS):
        return f"Missing permission to post in channel: {message}"
    return f"{message} (code {code})" if code is not None else message


class DiscordClient:
    """Client for posting messages to Discord channels with a bot token.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        bot_token: str,
        api_base: str = DISCORD_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize Discord client.

        Args:
            bot_token: Discord bot token
            api_base: REST API base URL
            timeout: Request timeout in seconds
            session: HTTP session to reuse (a new one is created if omitted)
        """
        self.bot_token = bot_token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def send_message(
        self,
        channel_id: str,
        payload: dict[str, Any],
    ) -> DiscordResponse:
        """Post a message to a channel.

        This method performs HTTP I/O.

        Args:
            channel_id: Target channel ID
            payload: Message payload (from formatter)

        Returns:
            DiscordResponse indicating success or failure
        """
        url = f"{self.api_base}/channels/{channel_id}/messages"

        try:
            response = self.session.post(
                url,
                json=payload,
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bot {self.bot_token}",
                    "Content-Type": "application/json",
                },
            )
        except requests.Timeout:
            logger.error("Discord request to channel %s timed out", channel_id)
            return DiscordResponse(
                success=False,
                status_code=0,
                error="Request timed out",
            )
        except requests.RequestException as e:
            logger.error("Discord request to channel %s failed: %s", channel_id, str(e))
            return DiscordResponse(
                success=False,
                status_code=0,
                error=str(e),
            )

        if response.ok:
            logger.debug("Message posted to Discord channel %s", channel_id)
            return DiscordResponse(
                success=True,
                status_code=response.status_code,
            )

        error_text = _describe_error(response)
        logger.warning(
            "Discord returned %d for channel %s: %s",
            response.status_code,
            channel_id,
            error_text,
        )
        return DiscordResponse(
            success=False,
            status_code=response.status_code,
            error=error_text,
        )
