"""Slack Web API client for posting (threaded) chat messages."""

from dataclasses import dataclass
from typing import Optional

import httpx

from mailrelay.utils.logging import get_logger

logger = get_logger(__name__)

SLACK_API_BASE_URL = "https://slack.com/api"


class SlackApiError(Exception):
    """Exception raised when Slack API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class SlackMessage:
    """A message accepted by Slack."""

    channel: str
    ts: str


class SlackClient:
    """Client for the Slack chat.postMessage API."""

    def __init__(self, api_token: str, base_url: str = SLACK_API_BASE_URL):
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json; charset=utf-8",
        }

    async def post_message(
        self, channel: str, text: str, thread_ts: Optional[str] = None
    ) -> SlackMessage:
        """Post a message, optionally as a reply in an existing thread.

        Args:
            channel: Channel ID to post into
            text: Message text
            thread_ts: ts of the parent message, or None for a new message

        Returns:
            The posted message, whose ts can be used as a thread parent

        Raises:
            SlackApiError: If the request fails or Slack answers ok=false
        """
        url = f"{self.base_url}/chat.postMessage"
        payload: dict[str, str] = {"channel": channel, "text": text}
        if thread_ts is not None:
            payload["thread_ts"] = thread_ts

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url, headers=self.headers, json=payload, timeout=30.0
                )
        except httpx.HTTPError as e:
            logger.error(f"Slack request failed: {e}")
            raise SlackApiError(f"Unable to make request: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.error(
                f"Slack chat.postMessage error: {response.status_code} - {response.text}"
            )
            raise SlackApiError(
                f"Failed to post message: {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SlackApiError(f"Invalid Slack response: {e}") from e

        if not isinstance(data, dict):
            logger.error(f"Unexpected Slack response for channel {channel}: {data!r}")
            raise SlackApiError("Invalid Slack response: expected a JSON object")

        # Slack reports most failures as HTTP 200 with ok=false
        if not data.get("ok") or not data.get("ts"):
            error = data.get("error", "unknown_error")
            logger.error(f"Slack rejected message for channel {channel}: {error}")
            raise SlackApiError(f"Slack API error: {error}", status_code=200)

        return SlackMessage(channel=data.get("channel", channel), ts=data["ts"])
