"""Relay Service for verified Mailgun webhooks.

Orchestrates both webhook flows:
- auto_reply: normalize -> verify signature -> extract Message-Id -> Mailgun send
- forward_to_slack: normalize -> verify signature -> post subject -> thread body

Every request runs its steps strictly in sequence and stops at the first
failure. Nothing is stored between requests, so a replayed webhook with a
valid signature is processed again.
"""

from dataclasses import dataclass
from enum import Enum

from result import Err, Ok, Result

from mailrelay.config import Settings, get_settings
from mailrelay.schemas.email import ReceivedEmail
from mailrelay.services.headers import extract_message_id
from mailrelay.services.mailgun_service import MailgunApiError, MailgunClient
from mailrelay.services.normalizer import PayloadError, normalize_payload
from mailrelay.services.signature import SignatureError, verify_signature
from mailrelay.services.slack_service import SlackApiError, SlackClient, SlackMessage
from mailrelay.utils.logging import get_logger

logger = get_logger(__name__)


class RelayError(Enum):
    """Error types for relay operations."""

    MISSING_FIELDS = "missing_fields"
    INVALID_FIELD = "invalid_field"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    MALFORMED_BODY = "malformed_body"
    SIGNATURE_DECODE_ERROR = "signature_decode_error"
    SIGNATURE_MISMATCH = "signature_mismatch"
    HEADER_EXTRACTION = "header_extraction"
    DELIVERY = "delivery"


PAYLOAD_ERRORS: dict[PayloadError, RelayError] = {
    PayloadError.MISSING_FIELDS: RelayError.MISSING_FIELDS,
    PayloadError.INVALID_FIELD: RelayError.INVALID_FIELD,
    PayloadError.UNSUPPORTED_MEDIA_TYPE: RelayError.UNSUPPORTED_MEDIA_TYPE,
    PayloadError.MALFORMED_BODY: RelayError.MALFORMED_BODY,
}

SIGNATURE_ERRORS: dict[SignatureError, RelayError] = {
    SignatureError.DECODE_ERROR: RelayError.SIGNATURE_DECODE_ERROR,
    SignatureError.MISMATCH: RelayError.SIGNATURE_MISMATCH,
}


@dataclass(frozen=True)
class OutboundEmail:
    """Auto-reply to send for a received email."""

    recipient: str
    subject: str
    template: str
    in_reply_to: str
    references: str


@dataclass(frozen=True)
class ForwardResult:
    """Result of forwarding an email to Slack."""

    channel: str
    message_ts: str
    reply_ts: str


def build_reply(email: ReceivedEmail, template: str, message_id: str) -> OutboundEmail:
    """Build the templated reply to a received email.

    Args:
        email: The verified inbound email
        template: Mailgun template name from the route
        message_id: Message-Id of the inbound email

    Returns:
        OutboundEmail addressed to the original From address
    """
    return OutboundEmail(
        recipient=email.from_,
        subject=f"Re: {email.subject}",
        template=template,
        in_reply_to=message_id,
        references=message_id,
    )


class RelayService:
    """Service for verifying Mailgun webhooks and relaying their content."""

    def __init__(
        self,
        settings: Settings | None = None,
        mailgun_client: MailgunClient | None = None,
        slack_client: SlackClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.mailgun_client = mailgun_client or MailgunClient(
            api_key=self.settings.mailgun_api_key,
            domain=self.settings.mailgun_domain,
            base_url=self.settings.mailgun_api_base_url,
        )
        self.slack_client = slack_client or SlackClient(
            api_token=self.settings.slack_api_token,
            base_url=self.settings.slack_api_base_url,
        )
        self._signing_key = self.settings.mailgun_api_key.encode("utf-8")

    def receive(
        self, body: bytes, content_type: str
    ) -> Result[ReceivedEmail, RelayError]:
        """Normalize a webhook body and verify its signature.

        Args:
            body: Raw request body
            content_type: Request Content-Type header

        Returns:
            Result containing the verified ReceivedEmail or RelayError
        """
        normalized = normalize_payload(body, content_type)
        if normalized.is_err():
            return Err(PAYLOAD_ERRORS[normalized.unwrap_err()])

        email = normalized.unwrap()

        verified = verify_signature(
            self._signing_key, email.timestamp, email.token, email.signature
        )
        if verified.is_err():
            error = verified.unwrap_err()
            logger.warning(
                f"Rejected webhook from {email.sender}: signature {error.value}"
            )
            return Err(SIGNATURE_ERRORS[error])

        return Ok(email)

    async def auto_reply(
        self, body: bytes, content_type: str, template: str
    ) -> Result[OutboundEmail, RelayError]:
        """Answer a received email with a Mailgun template.

        Args:
            body: Raw request body
            content_type: Request Content-Type header
            template: Mailgun template name

        Returns:
            Result containing the OutboundEmail that was sent or RelayError
        """
        # 1. Normalize and verify
        received = self.receive(body, content_type)
        if received.is_err():
            return Err(received.unwrap_err())
        email = received.unwrap()

        # 2. Message-Id for threading the reply
        message_id = extract_message_id(email.message_headers)
        if message_id.is_err():
            logger.warning(
                f"Unable to extract Message-Id from {email.sender}: "
                f"{message_id.unwrap_err().value}"
            )
            return Err(RelayError.HEADER_EXTRACTION)

        # 3. Send the reply
        reply = build_reply(email, template, message_id.unwrap())
        try:
            await self.mailgun_client.send_message(
                from_address=self.settings.mailgun_from,
                to=reply.recipient,
                subject=reply.subject,
                template=reply.template,
                in_reply_to=reply.in_reply_to,
                references=reply.references,
            )
        except MailgunApiError as e:
            logger.error(f"Auto-reply to {reply.recipient} failed: {e}")
            return Err(RelayError.DELIVERY)

        return Ok(reply)

    async def forward_to_slack(
        self, body: bytes, content_type: str, channel_id: str
    ) -> Result[ForwardResult, RelayError]:
        """Forward a received email to Slack as a two-message thread.

        The subject is posted first; the plain-text body follows as a thread
        reply. If the reply fails the subject message stays posted and the
        whole operation still reports DELIVERY.

        Args:
            body: Raw request body
            content_type: Request Content-Type header
            channel_id: Slack channel ID

        Returns:
            Result containing ForwardResult or RelayError
        """
        # 1. Normalize and verify
        received = self.receive(body, content_type)
        if received.is_err():
            return Err(received.unwrap_err())
        email = received.unwrap()

        # 2. Subject as a new message
        try:
            parent: SlackMessage = await self.slack_client.post_message(
                channel=channel_id, text=email.subject, thread_ts=None
            )
        except SlackApiError as e:
            logger.error(f"Forwarding subject to Slack channel {channel_id} failed: {e}")
            return Err(RelayError.DELIVERY)

        # 3. Body as a thread reply
        try:
            reply = await self.slack_client.post_message(
                channel=channel_id, text=email.body_plain, thread_ts=parent.ts
            )
        except SlackApiError as e:
            logger.error(
                f"Forwarding body to Slack thread {parent.ts} in {channel_id} failed: {e}"
            )
            return Err(RelayError.DELIVERY)

        logger.info(f"Forwarded email from {email.sender} to Slack channel {channel_id}")
        return Ok(
            ForwardResult(channel=channel_id, message_ts=parent.ts, reply_ts=reply.ts)
        )
