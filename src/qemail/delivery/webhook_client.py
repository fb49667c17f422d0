"""
HTTP client for the relay backend.

Talks to two endpoints under the configured API base, both authenticated
with a shared-secret header:

- GET  /webhook/forward-lookup   - where (if anywhere) to forward a message
- POST /webhook/incoming-email   - delivery of the message itself
"""

from typing import Optional

import httpx
import structlog

from ..config import Settings
from ..models.api_models import ForwardLookupResponse, WebhookPayload

logger = structlog.get_logger(__name__)

SECRET_HEADER = "X-Webhook-Secret"
FORWARD_LOOKUP_PATH = "/webhook/forward-lookup"
INCOMING_EMAIL_PATH = "/webhook/incoming-email"


class WebhookClient:
    """
    Async client for the forward-lookup and incoming-email webhooks.

    Args:
        api_base: Base URL of the backend
        webhook_secret: Shared secret sent with every request
        timeout_seconds: Per-request timeout
        transport: Optional httpx transport (tests inject a MockTransport)
    """

    def __init__(
        self,
        api_base: str,
        webhook_secret: str,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.api_base,
            headers={SECRET_HEADER: webhook_secret},
            timeout=timeout_seconds,
            transport=transport,
        )
        self.logger = logger.bind(api_base=self.api_base)

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "WebhookClient":
        return cls(
            api_base=settings.api_base,
            webhook_secret=settings.webhook_secret,
            timeout_seconds=settings.webhook_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "WebhookClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_forward_target(self, to_address: str) -> Optional[str]:
        """
        Ask the backend where a message for `to_address` should be forwarded.

        Returns:
            Forward address, or None on no target or any failure
        """
        try:
            response = await self._client.get(FORWARD_LOOKUP_PATH, params={"to": to_address})
            if not response.is_success:
                self.logger.debug(
                    "Forward lookup rejected", status_code=response.status_code
                )
                return None
            return ForwardLookupResponse.model_validate(response.json()).forward_to
        except Exception as e:
            self.logger.debug("Forward lookup failed", error=str(e))
            return None

    async def post_raw(
        self, raw: bytes, from_address: str, to_address: str
    ) -> httpx.Response:
        """Deliver the raw message bytes with envelope addresses in headers."""
        return await self._client.post(
            INCOMING_EMAIL_PATH,
            content=raw,
            headers={
                "Content-Type": "application/octet-stream",
                "X-Email-From": from_address,
                "X-Email-To": to_address,
            },
        )

    async def post_json(self, payload: WebhookPayload) -> httpx.Response:
        """Deliver the decoded message as JSON."""
        return await self._client.post(
            INCOMING_EMAIL_PATH,
            json=payload.model_dump(mode="json", by_alias=True),
        )


async def read_error_body(response: httpx.Response) -> str:
    """Response body for error logs, or '(unreadable)'."""
    try:
        await response.aread()
        return response.text
    except Exception:
        return "(unreadable)"
