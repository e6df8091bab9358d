"""Mailgun inbound-email webhook endpoints.

Provides endpoints for:
- POST /emails/responder/{template} - Answer the email with a Mailgun template
- POST /emails/forward/slack/{channel_id} - Forward the email into a Slack thread
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from mailrelay.config import Settings, get_settings
from mailrelay.services.error_mapper import map_relay_error
from mailrelay.services.relay_service import RelayError, RelayService
from mailrelay.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/emails", tags=["emails"])

MAX_BODY_BYTES = 2 * 1024 * 1024
HTTP_413_CONTENT_TOO_LARGE = 413


def _body_too_large() -> HTTPException:
    return HTTPException(
        status_code=HTTP_413_CONTENT_TOO_LARGE, detail="request body too large"
    )


async def read_capped_body(request: Request) -> bytes:
    """Read the request body, rejecting anything over MAX_BODY_BYTES.

    Raises:
        HTTPException 413: If Content-Length or the streamed body exceeds the cap
    """
    content_length = request.headers.get("content-length", "")
    if content_length.isdigit() and int(content_length) > MAX_BODY_BYTES:
        raise _body_too_large()

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > MAX_BODY_BYTES:
            raise _body_too_large()
    return bytes(body)


def get_relay_service(settings: Settings = Depends(get_settings)) -> RelayService:
    """Build the relay service for a request."""
    return RelayService(settings)


def raise_for_relay_error(error: RelayError) -> None:
    """Convert a relay error into the mapped HTTPException."""
    response = map_relay_error(error)
    raise HTTPException(status_code=response.status_code, detail=response.message)


@router.post("/responder/{template}", response_class=PlainTextResponse)
async def auto_reply_endpoint(
    template: str,
    request: Request,
    body: bytes = Depends(read_capped_body),
    relay_service: RelayService = Depends(get_relay_service),
) -> str:
    """Send a templated auto-reply to a received email.

    Args:
        template: Mailgun template name
        request: Incoming webhook request
        body: Raw (size-capped) request body
        relay_service: Relay service

    Returns:
        Plain-text confirmation

    Raises:
        HTTPException 400: If fields are missing, the signature is bad or
            the Message-Id cannot be extracted
        HTTPException 415: If the body is neither form-encoded nor multipart
        HTTPException 502: If Mailgun rejects the reply
    """
    result = await relay_service.auto_reply(
        body=body,
        content_type=request.headers.get("content-type", ""),
        template=template,
    )

    if result.is_err():
        raise_for_relay_error(result.unwrap_err())

    reply = result.unwrap()
    return f"Auto-reply sent to {reply.recipient}"


@router.post("/forward/slack/{channel_id}", response_class=PlainTextResponse)
async def forward_to_slack_endpoint(
    channel_id: str,
    request: Request,
    body: bytes = Depends(read_capped_body),
    relay_service: RelayService = Depends(get_relay_service),
) -> str:
    """Forward a received email to a Slack channel.

    Args:
        channel_id: Slack channel ID
        request: Incoming webhook request
        body: Raw (size-capped) request body
        relay_service: Relay service

    Returns:
        Plain-text confirmation

    Raises:
        HTTPException 400: If fields are missing or the signature is bad
        HTTPException 415: If the body is neither form-encoded nor multipart
        HTTPException 502: If either Slack post fails
    """
    result = await relay_service.forward_to_slack(
        body=body,
        content_type=request.headers.get("content-type", ""),
        channel_id=channel_id,
    )

    if result.is_err():
        raise_for_relay_error(result.unwrap_err())

    forwarded = result.unwrap()
    return f"Email forwarded to {forwarded.channel}"
