# Relay glue: forward lookup and webhook delivery

from .handler import InboundMessage, InboundResult, handle_inbound_email
from .webhook_client import WebhookClient

__all__ = [
    "InboundMessage",
    "InboundResult",
    "handle_inbound_email",
    "WebhookClient",
]
