"""Message header extraction from Mailgun's ``message-headers`` field.

Mailgun posts the original message headers as a JSON array of
``[name, value]`` pairs, e.g. ``[["Message-Id", "<abc@x>"], ...]``.
"""

import json
from enum import Enum

from result import Err, Ok, Result


class HeaderError(Enum):
    """Error types for header extraction."""

    JSON_PARSE_ERROR = "json_parse_error"
    NOT_FOUND = "not_found"


def iter_header_pairs(headers: list) -> list[tuple[str, str]]:
    """Return the well-formed [name, value] string pairs, skipping the rest."""
    pairs = []
    for item in headers:
        if (
            isinstance(item, list)
            and len(item) == 2
            and isinstance(item[0], str)
            and isinstance(item[1], str)
        ):
            pairs.append((item[0], item[1]))
    return pairs


def get_header(message_headers: str, name: str) -> Result[str, HeaderError]:
    """Find a header value by case-insensitive name.

    Args:
        message_headers: Raw JSON array of [name, value] pairs
        name: Header name to look up

    Returns:
        Result containing the first matching value or a HeaderError
    """
    try:
        headers = json.loads(message_headers)
    except (json.JSONDecodeError, RecursionError):
        # Deeply nested input exhausts the decoder's recursion limit
        return Err(HeaderError.JSON_PARSE_ERROR)

    if not isinstance(headers, list):
        return Err(HeaderError.JSON_PARSE_ERROR)

    wanted = name.lower()
    for header_name, value in iter_header_pairs(headers):
        if header_name.lower() == wanted:
            return Ok(value)

    return Err(HeaderError.NOT_FOUND)


def extract_message_id(message_headers: str) -> Result[str, HeaderError]:
    """Extract the Message-Id header value."""
    return get_header(message_headers, "message-id")
