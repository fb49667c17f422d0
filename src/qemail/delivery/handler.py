"""
Inbound email handler.

Entry point for the mail-delivery trigger: looks up a forward target,
forwards the message when one exists, decodes it and delivers it to the
incoming-email webhook. Nothing raised here escapes to the trigger; every
failure is logged and reported in the InboundResult.
"""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Tuple

import structlog

from ..config import Settings, settings as default_settings
from ..models.api_models import WebhookPayload
from ..parsing import parse_inbound_email
from .webhook_client import WebhookClient, read_error_body

logger = structlog.get_logger(__name__)

ForwardCallable = Callable[[str], Awaitable[None]]


@dataclass
class InboundMessage:
    """A message as handed over by the mail transport."""

    from_address: str
    to_address: str
    raw: bytes
    headers: Optional[List[Tuple[str, str]]] = None
    forward: Optional[ForwardCallable] = None


@dataclass
class InboundResult:
    """What happened to one inbound message."""

    forward_to: Optional[str] = None
    forwarded: bool = False
    delivered: bool = False
    webhook_status: Optional[int] = None
    message_id: Optional[str] = None
    subject: Optional[str] = None
    errors: List[str] = field(default_factory=list)


async def handle_inbound_email(
    message: InboundMessage,
    settings: Optional[Settings] = None,
    client: Optional[WebhookClient] = None,
) -> InboundResult:
    """
    Relay one inbound message.

    Args:
        message: Inbound message with envelope addresses and raw bytes
        settings: Relay configuration (defaults to global settings)
        client: Webhook client; one is created from settings when omitted

    Returns:
        InboundResult describing forwarding and delivery
    """
    settings = settings or default_settings
    result = InboundResult()
    log = logger.bind(from_address=message.from_address, to_address=message.to_address)

    log.info("Processing email")

    if not settings.relay_configured:
        log.error("API_BASE or WEBHOOK_SECRET not configured")
        result.errors.append("relay not configured")
        return result

    owns_client = client is None
    if client is None:
        client = WebhookClient.from_settings(settings)

    try:
        result.forward_to = await client.fetch_forward_target(message.to_address)
        if result.forward_to:
            result.forwarded = await _forward(message, result.forward_to, log, result)

        parsed = parse_inbound_email(
            message.raw,
            headers=message.headers,
            from_address=message.from_address,
            to_address=message.to_address,
        )
        result.message_id = parsed.message_id
        result.subject = parsed.subject

        log.info(
            "Delivering to webhook",
            mode=settings.webhook_payload_mode,
            message_id=parsed.message_id,
        )
        if settings.webhook_payload_mode == "json":
            response = await client.post_json(WebhookPayload.from_parsed(parsed))
        else:
            response = await client.post_raw(
                message.raw, message.from_address, message.to_address
            )

        result.webhook_status = response.status_code
        if not response.is_success:
            body = await read_error_body(response)
            log.error("Backend rejected email", status_code=response.status_code, body=body)
            result.errors.append(f"backend {response.status_code}: {body}")
            return result

        result.delivered = True
        log.info("Webhook processed successfully", message_id=parsed.message_id)

    except Exception as e:
        log.error("Worker error", error=str(e), exc_info=True)
        result.errors.append(str(e))

    finally:
        if owns_client:
            await client.aclose()

    return result


async def _forward(message: InboundMessage, target: str, log, result: InboundResult) -> bool:
    if message.forward is None:
        log.info("Forward target found, transport cannot forward", forward_to=target)
        return False
    try:
        log.info("Forwarding", forward_to=target)
        await message.forward(target)
        return True
    except Exception as e:
        log.error("Forward failed", forward_to=target, error=str(e))
        result.errors.append(f"forward failed: {e}")
        return False
