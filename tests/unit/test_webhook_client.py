"""
Unit tests for the relay backend client (delivery/webhook_client.py).
"""

import json

import httpx
import pytest

from qemail.delivery.webhook_client import WebhookClient
from qemail.models.api_models import WebhookPayload

pytestmark = pytest.mark.asyncio


class TestFetchForwardTarget:
    """Tests for WebhookClient.fetch_forward_target()."""

    @pytest.mark.unit
    async def test_returns_target(self, make_webhook_client, backend):
        backend.forward_to = "owner@example.net"

        async with make_webhook_client() as client:
            target = await client.fetch_forward_target("a+b@example.com")

        assert target == "owner@example.net"
        request = backend.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/webhook/forward-lookup"
        assert request.url.params["to"] == "a+b@example.com"
        assert request.headers["X-Webhook-Secret"] == "test-secret"

    @pytest.mark.unit
    async def test_null_target(self, make_webhook_client, backend):
        async with make_webhook_client() as client:
            assert await client.fetch_forward_target("a@example.com") is None

    @pytest.mark.unit
    async def test_error_status(self, make_webhook_client, backend):
        backend.forward_to = "owner@example.net"
        backend.lookup_status = 404

        async with make_webhook_client() as client:
            assert await client.fetch_forward_target("a@example.com") is None

    @pytest.mark.unit
    async def test_invalid_json(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))

        async with WebhookClient("https://backend.test", "s", transport=transport) as client:
            assert await client.fetch_forward_target("a@example.com") is None

    @pytest.mark.unit
    async def test_transport_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        transport = httpx.MockTransport(refuse)
        async with WebhookClient("https://backend.test", "s", transport=transport) as client:
            assert await client.fetch_forward_target("a@example.com") is None


class TestDelivery:
    """Tests for raw and JSON delivery."""

    @pytest.mark.unit
    async def test_post_raw(self, make_webhook_client, backend, sample_eml_bytes):
        async with make_webhook_client() as client:
            response = await client.post_raw(
                sample_eml_bytes, "sender@example.com", "inbox@example.org"
            )

        assert response.status_code == 200
        request = backend.requests_to("/webhook/incoming-email")[0]
        assert request.method == "POST"
        assert request.content == sample_eml_bytes
        assert request.headers["Content-Type"] == "application/octet-stream"
        assert request.headers["X-Email-From"] == "sender@example.com"
        assert request.headers["X-Email-To"] == "inbox@example.org"
        assert request.headers["X-Webhook-Secret"] == "test-secret"

    @pytest.mark.unit
    async def test_post_json(self, make_webhook_client, backend):
        payload = WebhookPayload(
            from_address="sender@example.com",
            to_address="inbox@example.org",
            subject="Hi",
            message_id="<id@example.com>",
            headers={"received": ["a", "b"]},
            text="Hi, there",
        )

        async with make_webhook_client() as client:
            await client.post_json(payload)

        request = backend.requests_to("/webhook/incoming-email")[0]
        body = json.loads(request.content)
        assert request.headers["Content-Type"] == "application/json"
        assert body["from"] == "sender@example.com"
        assert body["to"] == "inbox@example.org"
        assert body["messageId"] == "<id@example.com>"
        assert body["headers"] == {"received": ["a", "b"]}
        assert body["text"] == "Hi, there"
        assert body["html"] is None

    @pytest.mark.unit
    async def test_api_base_trailing_slash(self, backend):
        client = WebhookClient(
            "https://backend.test/", "s", transport=httpx.MockTransport(backend)
        )
        async with client:
            await client.post_raw(b"x", "a", "b")

        assert str(backend.requests[0].url) == "https://backend.test/webhook/incoming-email"
