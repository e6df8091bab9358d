"""Services package for webhook verification and relaying."""

from mailrelay.services.error_mapper import ErrorResponse, map_relay_error
from mailrelay.services.headers import HeaderError, extract_message_id
from mailrelay.services.mailgun_service import MailgunApiError, MailgunClient
from mailrelay.services.normalizer import PayloadError, normalize_payload
from mailrelay.services.relay_service import (
    ForwardResult,
    OutboundEmail,
    RelayError,
    RelayService,
)
from mailrelay.services.signature import SignatureError, verify_signature
from mailrelay.services.slack_service import SlackApiError, SlackClient, SlackMessage

__all__ = [
    "ErrorResponse",
    "ForwardResult",
    "HeaderError",
    "MailgunApiError",
    "MailgunClient",
    "OutboundEmail",
    "PayloadError",
    "RelayError",
    "RelayService",
    "SignatureError",
    "SlackApiError",
    "SlackClient",
    "SlackMessage",
    "extract_message_id",
    "map_relay_error",
    "normalize_payload",
    "verify_signature",
]
