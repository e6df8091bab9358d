"""Schema module for webhook payload models."""

from mailrelay.schemas.email import RECEIVED_EMAIL_FIELDS, ReceivedEmail

__all__ = ["RECEIVED_EMAIL_FIELDS", "ReceivedEmail"]
