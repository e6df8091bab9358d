"""Inbound payload normalizer.

Mailgun can post a received message either as
``application/x-www-form-urlencoded`` or as ``multipart/form-data``
(the latter when attachments are present). Both encodings are reduced to
a mapping of field name -> text and then validated into one
``ReceivedEmail``, so nothing downstream depends on the encoding.
"""

from collections.abc import Callable
from enum import Enum
from urllib.parse import parse_qsl

from pydantic import ValidationError
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from result import Err, Ok, Result

from mailrelay.schemas.email import RECEIVED_EMAIL_FIELDS, ReceivedEmail
from mailrelay.utils.logging import get_logger

logger = get_logger(__name__)

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM_DATA = "multipart/form-data"


class PayloadError(Enum):
    """Error types for payload normalization."""

    MISSING_FIELDS = "missing_fields"
    INVALID_FIELD = "invalid_field"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    MALFORMED_BODY = "malformed_body"


class MalformedBodyError(Exception):
    """Raised when a request body cannot be split into fields."""


def parse_form_urlencoded(body: bytes, options: dict[bytes, bytes]) -> dict[str, str]:
    """Parse a form-encoded body into a field mapping.

    Unknown fields are kept (and later ignored); blank values are kept so
    that an empty subject still counts as present.
    """
    # Percent-escapes are decoded as UTF-8; the raw body itself is ASCII
    text = body.decode("ascii", errors="replace")
    return dict(parse_qsl(text, keep_blank_values=True))


class _MultipartCollector:
    """Collects named text parts from a multipart body.

    Parts whose name or body is not valid UTF-8 are dropped.
    """

    def __init__(self) -> None:
        self.fields: dict[str, str] = {}
        self._header_name = b""
        self._header_value = b""
        self._disposition = b""
        self._data = bytearray()

    def on_part_begin(self) -> None:
        self._disposition = b""
        self._data = bytearray()

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._data.extend(data[start:end])

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_name += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        if self._header_name.lower() == b"content-disposition":
            self._disposition = self._header_value
        self._header_name = b""
        self._header_value = b""

    def on_part_end(self) -> None:
        _, options = parse_options_header(self._disposition)
        raw_name = options.get(b"name")
        if raw_name is None:
            return
        try:
            name = raw_name.decode("utf-8")
            value = bytes(self._data).decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Skipping multipart part that is not valid UTF-8")
            return
        self.fields[name] = value

    def callbacks(self) -> dict[str, Callable]:
        return {
            "on_part_begin": self.on_part_begin,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
        }


def parse_multipart(body: bytes, options: dict[bytes, bytes]) -> dict[str, str]:
    """Parse a multipart/form-data body into a field mapping.

    Raises:
        MalformedBodyError: If the boundary is missing or the body is unparseable
    """
    boundary = options.get(b"boundary")
    if not boundary:
        raise MalformedBodyError("multipart body without boundary")

    collector = _MultipartCollector()
    try:
        parser = MultipartParser(boundary, collector.callbacks())
        parser.write(body)
        parser.finalize()
    except MultipartParseError as e:
        raise MalformedBodyError(f"Unable to parse multipart body: {e}") from e
    return collector.fields


_PARSERS: dict[str, Callable[[bytes, dict[bytes, bytes]], dict[str, str]]] = {
    FORM_URLENCODED: parse_form_urlencoded,
    MULTIPART_FORM_DATA: parse_multipart,
}


def build_received_email(fields: dict[str, str]) -> Result[ReceivedEmail, PayloadError]:
    """Validate a field mapping into a ReceivedEmail.

    Fields outside the eight Mailgun names are ignored.

    Returns:
        Result containing the ReceivedEmail, MISSING_FIELDS if any of the
        eight fields is absent, or INVALID_FIELD if timestamp is not an integer
    """
    missing = [name for name in RECEIVED_EMAIL_FIELDS if name not in fields]
    if missing:
        logger.warning(f"Inbound payload missing fields: {', '.join(missing)}")
        return Err(PayloadError.MISSING_FIELDS)

    try:
        email = ReceivedEmail.model_validate(
            {name: fields[name] for name in RECEIVED_EMAIL_FIELDS}
        )
    except ValidationError as e:
        logger.warning(f"Inbound payload has invalid fields: {e.error_count()} error(s)")
        return Err(PayloadError.INVALID_FIELD)

    return Ok(email)


def normalize_payload(
    body: bytes, content_type: str
) -> Result[ReceivedEmail, PayloadError]:
    """Normalize a raw webhook body into a ReceivedEmail.

    Args:
        body: Raw request body
        content_type: Value of the request's Content-Type header

    Returns:
        Result containing the ReceivedEmail or a PayloadError
    """
    media_type, options = parse_options_header(content_type or "")
    parser = _PARSERS.get(media_type.decode("latin-1").lower())
    if parser is None:
        logger.warning(f"Unsupported content type: {content_type!r}")
        return Err(PayloadError.UNSUPPORTED_MEDIA_TYPE)

    try:
        fields = parser(body, options)
    except MalformedBodyError as e:
        logger.warning(str(e))
        return Err(PayloadError.MALFORMED_BODY)

    return build_received_email(fields)
