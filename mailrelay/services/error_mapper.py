"""Mapping of relay errors to client-visible responses."""

from dataclasses import dataclass

from fastapi import status

from mailrelay.services.relay_service import RelayError


@dataclass(frozen=True)
class ErrorResponse:
    """Status code and message returned to the webhook caller."""

    status_code: int
    message: str


RELAY_ERROR_RESPONSES: dict[RelayError, ErrorResponse] = {
    RelayError.MISSING_FIELDS: ErrorResponse(
        status.HTTP_400_BAD_REQUEST, "missing required field(s)"
    ),
    RelayError.INVALID_FIELD: ErrorResponse(
        status.HTTP_400_BAD_REQUEST, "invalid field value"
    ),
    RelayError.MALFORMED_BODY: ErrorResponse(
        status.HTTP_400_BAD_REQUEST, "malformed request body"
    ),
    RelayError.UNSUPPORTED_MEDIA_TYPE: ErrorResponse(
        status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, "unsupported content type"
    ),
    RelayError.HEADER_EXTRACTION: ErrorResponse(
        status.HTTP_400_BAD_REQUEST, "unable to extract message id"
    ),
    RelayError.SIGNATURE_DECODE_ERROR: ErrorResponse(
        status.HTTP_400_BAD_REQUEST, "unable to decode signature"
    ),
    RelayError.SIGNATURE_MISMATCH: ErrorResponse(
        status.HTTP_400_BAD_REQUEST, "bad signature"
    ),
    RelayError.DELIVERY: ErrorResponse(
        status.HTTP_502_BAD_GATEWAY, "unable to send message"
    ),
}

INTERNAL_ERROR_RESPONSE = ErrorResponse(
    status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error"
)


def map_relay_error(error: RelayError) -> ErrorResponse:
    """Return the response for a relay error (500 for unmapped errors)."""
    return RELAY_ERROR_RESPONSES.get(error, INTERNAL_ERROR_RESPONSE)
