"""
Global pytest fixtures and configuration for test suite.

This module provides reusable fixtures for:
- HTTP clients (ASGI app and mocked webhook backend)
- Test settings
- Sample email data
- Temporary files
"""

import os
from typing import AsyncGenerator, Callable, Generator, List

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from qemail.api.app import app
from qemail.config import Settings
from qemail.delivery import WebhookClient
from .fixtures.emails import SAMPLE_EMAILS


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing FastAPI endpoints.

    Yields:
        AsyncClient instance
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def relay_settings() -> Settings:
    """
    Settings with a configured relay target.

    Returns:
        Settings instance with test configuration
    """
    return Settings(
        api_base="https://backend.test",
        webhook_secret="test-secret",
        webhook_payload_mode="raw",
        log_level="INFO",
        log_json=False,
    )


class RecordingBackend:
    """
    Fake relay backend for httpx.MockTransport.

    Records every request and answers forward lookups and deliveries with
    configurable status codes.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.forward_to = None
        self.lookup_status = 200
        self.delivery_status = 200
        self.delivery_body = "ok"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/webhook/forward-lookup":
            return httpx.Response(self.lookup_status, json={"forward_to": self.forward_to})
        if request.url.path == "/webhook/incoming-email":
            return httpx.Response(self.delivery_status, text=self.delivery_body)
        return httpx.Response(404, text="not found")

    def requests_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture
def backend() -> RecordingBackend:
    """Fake relay backend recording requests."""
    return RecordingBackend()


@pytest.fixture
def make_webhook_client(relay_settings, backend) -> Callable[..., WebhookClient]:
    """Factory for WebhookClients wired to the fake backend."""

    def factory(settings: Settings = None) -> WebhookClient:
        return WebhookClient.from_settings(
            settings or relay_settings, transport=httpx.MockTransport(backend)
        )

    return factory


@pytest.fixture
def sample_eml_bytes() -> bytes:
    """Simple plain text email bytes for basic tests."""
    return SAMPLE_EMAILS["simple_plain_text"]


@pytest.fixture
def multipart_alternative_eml() -> bytes:
    """multipart/alternative email with quoted-printable text and base64 html."""
    return SAMPLE_EMAILS["multipart_alternative"]


@pytest.fixture
def nested_multipart_eml() -> bytes:
    """multipart/mixed wrapping a multipart/alternative."""
    return SAMPLE_EMAILS["nested_multipart"]


@pytest.fixture
def html_only_eml() -> bytes:
    """Email with only HTML content."""
    return SAMPLE_EMAILS["html_only"]


@pytest.fixture
def malformed_eml() -> bytes:
    """Bytes that are not a valid RFC5322 message."""
    return SAMPLE_EMAILS["malformed"]


@pytest.fixture
def tmp_eml_file(tmp_path) -> Generator[str, None, None]:
    """
    Create temporary .eml file for file-based tests.

    Yields:
        Path to temporary .eml file
    """
    eml_path = tmp_path / "test_email.eml"
    eml_path.write_bytes(SAMPLE_EMAILS["simple_plain_text"])
    yield str(eml_path)


@pytest.fixture(autouse=True)
def reset_env_vars():
    """
    Reset environment variables before each test.

    This prevents test pollution from env var changes.
    """
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


def pytest_configure(config):
    """
    Configure pytest with custom markers.
    """
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (API, end-to-end)"
    )
