"""Inbound email schema for Mailgun webhooks."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Wire names of the fields Mailgun posts for a received message
RECEIVED_EMAIL_FIELDS = (
    "sender",
    "from",
    "subject",
    "body-plain",
    "timestamp",
    "token",
    "signature",
    "message-headers",
)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class ReceivedEmail(BaseModel):
    """Canonical inbound email, identical for form-encoded and multipart posts.

    Fields are validated by their wire names (``from``, ``body-plain``,
    ``message-headers``); ``message_headers`` stays the raw JSON string of
    ``[name, value]`` pairs and is only parsed on demand.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sender: str
    from_: str = Field(alias="from")
    subject: str
    body_plain: str = Field(alias="body-plain")
    timestamp: int
    token: str
    signature: str
    message_headers: str = Field(alias="message-headers")

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, value: object) -> int:
        """Accept only plain decimal integers within the signed 64-bit range."""
        if isinstance(value, bool):
            raise ValueError("timestamp must be an integer")
        if isinstance(value, str):
            if not _INTEGER_RE.fullmatch(value):
                raise ValueError(f"timestamp is not an integer: {value!r}")
            value = int(value)
        if not isinstance(value, int):
            raise ValueError("timestamp must be an integer")
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise ValueError("timestamp out of range")
        return value
