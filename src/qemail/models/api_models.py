"""
API request and response models for the HTTP service and the webhook protocol.

This module defines the Pydantic models used for request/response validation.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field

from .email_document import HeaderValue, ParsedEmail


class WebhookPayload(BaseModel):
    """JSON body posted to the incoming-email webhook in json mode."""

    from_address: str = Field(alias="from", description="Envelope sender")
    to_address: str = Field(alias="to", description="Envelope recipient")
    subject: str
    message_id: str = Field(alias="messageId")
    headers: Dict[str, HeaderValue] = Field(default_factory=dict)
    text: Optional[str] = None
    html: Optional[str] = None

    model_config = {"populate_by_name": True}

    @classmethod
    def from_parsed(cls, parsed: ParsedEmail) -> "WebhookPayload":
        return cls(
            from_address=parsed.from_address,
            to_address=parsed.to_address,
            subject=parsed.subject,
            message_id=parsed.message_id,
            headers=parsed.headers,
            text=parsed.text,
            html=parsed.html,
        )


class ForwardLookupResponse(BaseModel):
    """Response of the forward-lookup endpoint."""

    forward_to: Optional[str] = None


class InboundResponse(BaseModel):
    """Response model for the inbound relay endpoint."""

    success: bool = Field(description="Whether the webhook accepted the message")
    forward_to: Optional[str] = Field(None, description="Forward target, if any")
    forwarded: bool = Field(False, description="Whether the message was forwarded")
    webhook_status: Optional[int] = Field(None, description="Webhook HTTP status")
    message_id: Optional[str] = Field(None, description="Message identifier")
    error: Optional[str] = Field(None, description="Error message if failed")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status", examples=["healthy"])
    version: str = Field(description="API version", examples=["1.0.0"])
    uptime_seconds: float = Field(description="Service uptime")


class VersionResponse(BaseModel):
    """Version information response."""

    api_version: str = Field(description="API version")
    parser_version: str = Field(description="MIME decoding engine version")
    webhook_protocol_version: str = Field(description="Webhook protocol version")
