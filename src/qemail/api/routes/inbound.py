"""
Inbound email endpoints.

Both endpoints take the raw message as the request body, with the envelope
addresses in the X-Email-From / X-Email-To headers (the same shape the relay
posts to its own webhook).
"""

from typing import AsyncGenerator, Optional

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ...config import Settings, settings
from ...delivery import InboundMessage, WebhookClient, handle_inbound_email
from ...models.api_models import InboundResponse
from ...models.email_document import ParsedEmail
from ...parsing import parse_inbound_email

logger = structlog.get_logger(__name__)
router = APIRouter()


def get_settings() -> Settings:
    return settings


async def get_webhook_client(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[WebhookClient, None]:
    async with WebhookClient.from_settings(settings) as client:
        yield client


async def read_raw_message(request: Request, settings: Settings) -> bytes:
    """Read the request body and enforce the size limit."""
    raw = await request.body()
    if not raw:
        raise HTTPException(status_code=400, detail="Request body must contain a raw email")

    size_mb = len(raw) / (1024 * 1024)
    if size_mb > settings.max_email_size_mb:
        raise HTTPException(
            status_code=413,
            detail=f"Email size ({size_mb:.1f}MB) exceeds maximum ({settings.max_email_size_mb}MB)",
        )
    return raw


@router.post("/parse", response_model=ParsedEmail)
async def parse_email(
    request: Request,
    x_email_from: Optional[str] = Header(default=""),
    x_email_to: Optional[str] = Header(default=""),
    settings: Settings = Depends(get_settings),
) -> ParsedEmail:
    """
    Decode a raw email and return its headers, subject, message id, text and html.
    """
    raw = await read_raw_message(request, settings)
    parsed = parse_inbound_email(raw, from_address=x_email_from, to_address=x_email_to)

    logger.info(
        "Email parsed",
        message_id=parsed.message_id,
        size_bytes=len(raw),
        has_text=parsed.text is not None,
        has_html=parsed.html is not None,
    )
    return parsed


@router.post("/inbound", response_model=InboundResponse)
async def relay_email(
    request: Request,
    x_email_from: Optional[str] = Header(default=""),
    x_email_to: Optional[str] = Header(default=""),
    settings: Settings = Depends(get_settings),
    client: WebhookClient = Depends(get_webhook_client),
) -> InboundResponse:
    """
    Run the relay for a raw email: forward lookup, then webhook delivery.

    The service has no mail transport, so a forward target is reported but
    the message is not forwarded.
    """
    raw = await read_raw_message(request, settings)
    result = await handle_inbound_email(
        InboundMessage(from_address=x_email_from, to_address=x_email_to, raw=raw),
        settings=settings,
        client=client,
    )
    return InboundResponse(
        success=result.delivered,
        forward_to=result.forward_to,
        forwarded=result.forwarded,
        webhook_status=result.webhook_status,
        message_id=result.message_id,
        error="; ".join(result.errors) or None,
    )
