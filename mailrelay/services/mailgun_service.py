"""Mailgun Messages API client.

Sends templated auto-replies through
``POST {base_url}/{domain}/messages`` with HTTP Basic auth (user ``api``).
"""

from typing import Optional

import httpx

from mailrelay.utils.logging import get_logger

logger = get_logger(__name__)

MAILGUN_API_BASE_URL = "https://api.mailgun.net/v3"


class MailgunApiError(Exception):
    """Exception raised when Mailgun API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MailgunClient:
    """Client for Mailgun API HTTP operations."""

    def __init__(
        self, api_key: str, domain: str, base_url: str = MAILGUN_API_BASE_URL
    ):
        """Initialize client.

        Args:
            api_key: Mailgun API key, used as the Basic auth password
            domain: Sending domain configured in Mailgun
            base_url: API base URL (use https://api.eu.mailgun.net/v3 for EU)
        """
        self.api_key = api_key
        self.domain = domain
        self.base_url = base_url.rstrip("/")

    async def send_message(
        self,
        from_address: str,
        to: str,
        subject: str,
        template: str,
        in_reply_to: str,
        references: str,
    ) -> None:
        """Send a templated auto-reply.

        Args:
            from_address: Sender address
            to: Recipient address
            subject: Message subject
            template: Name of the Mailgun template to render
            in_reply_to: Message-Id of the message being answered
            references: References header value

        Raises:
            MailgunApiError: If the request fails or Mailgun rejects it
        """
        url = f"{self.base_url}/{self.domain}/messages"
        data = {
            "from": from_address,
            "to": to,
            "subject": subject,
            "template": template,
            "h:X-Autoreply": "yes",
            "h:In-Reply-To": in_reply_to,
            "h:References": references,
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url, data=data, auth=("api", self.api_key), timeout=30.0
                )
        except httpx.HTTPError as e:
            logger.error(f"Mailgun request failed: {e}")
            raise MailgunApiError(f"Unable to make request: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.error(
                f"Mailgun messages API error: {response.status_code} - {response.text}"
            )
            raise MailgunApiError(
                f"Failed to send message: {response.text}",
                status_code=response.status_code,
            )

        logger.info(f"Email autoresponder sent to: {to}")
