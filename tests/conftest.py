"""
Shared test fixtures for PayPal client tests.

Provides configuration, sample payloads and an in-memory PayPal API that
answers through ``httpx.MockTransport``.
"""

from __future__ import annotations

import asyncio
import json
from collections import defaultdict
from typing import Any, Callable

import httpx
import pytest

from paypal_client.client import PayPalClient
from paypal_client.config import PayPalConfig, RetryConfig, TelemetryConfig

TOKEN_PATH = "/v1/oauth2/token"

# A response, an exception to raise, or a callable producing either.
Reply = Any


class FakePayPal:
    """Routes requests to queued replies and records what was sent.

    Each route holds a queue of replies; the last reply repeats once the
    queue is down to one. A reply is a response, an exception to raise, or a
    (sync or async) callable taking the request.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Reply]] = {}
        self.requests: list[httpx.Request] = []
        self.calls: dict[tuple[str, str], int] = defaultdict(int)

    def add(self, method: str, path: str, *replies: Reply) -> None:
        self.routes[(method, path)] = list(replies)

    def token(self, access_token: str = "access-token-1", expires_in: int = 32400) -> None:
        self.add("POST", TOKEN_PATH, token_response(access_token, expires_in))

    def count(self, method: str, path: str) -> int:
        return self.calls[(method, path)]

    @property
    def token_requests(self) -> int:
        return self.count("POST", TOKEN_PATH)

    def requests_to(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        key = (request.method, request.url.path)
        self.requests.append(request)
        self.calls[key] += 1

        queue = self.routes.get(key)
        if not queue:
            return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND", "message": "No route"})

        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(request)
            if asyncio.iscoroutine(reply):
                reply = await reply
        # Fresh copy so a repeating reply is never shared between requests.
        return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)


def token_response(access_token: str = "access-token-1", expires_in: int = 32400) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "scope": "https://uri.paypal.com/services/payments/realtimepayment",
            "access_token": access_token,
            "token_type": "Bearer",
            "app_id": "APP-80W284485P519543T",
            "expires_in": expires_in,
            "nonce": "2024-01-01T00:00:00Z-nonce",
        },
    )


def json_body(request: httpx.Request) -> Any:
    return json.loads(request.content)


@pytest.fixture
def retry_config() -> RetryConfig:
    """Provide fast retry configuration for testing."""
    return RetryConfig(
        max_retries=2,
        initial_delay=0.001,
        max_delay=0.01,
        exponential_base=2.0,
        jitter=0.0,
    )


@pytest.fixture
def base_config(retry_config: RetryConfig) -> PayPalConfig:
    """Provide a basic sandbox configuration for testing."""
    return PayPalConfig(
        username="u",
        client_secret="p",
        retry=retry_config,
        telemetry=TelemetryConfig(enabled=False),
    )


@pytest.fixture
def fake_paypal() -> FakePayPal:
    return FakePayPal()


@pytest.fixture
def make_client(
    base_config: PayPalConfig,
    fake_paypal: FakePayPal,
) -> Callable[..., PayPalClient]:
    """Build clients wired to the fake API; call inside the running loop."""

    def factory(config: PayPalConfig | None = None) -> PayPalClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(fake_paypal))
        return PayPalClient(config or base_config, http_client=http)

    return factory


@pytest.fixture
def sample_error_envelope() -> dict[str, Any]:
    """Provide a sample PayPal error body."""
    return {
        "name": "INVALID_REQUEST",
        "message": "Request is not well-formed, syntactically incorrect, or violates schema.",
        "debug_id": "b1d1f06c7246c",
        "details": [
            {
                "field": "/url",
                "value": "ftp://example.com",
                "location": "body",
                "issue": "INVALID_PARAMETER_SYNTAX",
                "description": "The value of a field does not conform to the expected format.",
            }
        ],
        "links": [
            {
                "href": "https://developer.paypal.com/docs/api/v1/webhooks#error-INVALID_PARAMETER_SYNTAX",
                "rel": "information_link",
                "method": "GET",
            }
        ],
    }
