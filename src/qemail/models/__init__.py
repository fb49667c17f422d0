# Data models for the qemail relay

from .email_document import DecodedContent, HeaderMap, HeaderValue, ParsedEmail
from .api_models import (
    ForwardLookupResponse,
    HealthResponse,
    InboundResponse,
    VersionResponse,
    WebhookPayload,
)

__all__ = [
    "DecodedContent",
    "HeaderMap",
    "HeaderValue",
    "ParsedEmail",
    "ForwardLookupResponse",
    "HealthResponse",
    "InboundResponse",
    "VersionResponse",
    "WebhookPayload",
]
