"""Unit tests for the client-credentials handshake."""

from __future__ import annotations

import asyncio
import base64
from typing import Callable

import httpx
import pytest

from conftest import TOKEN_PATH, FakePayPal, token_response
from paypal_client.client import PayPalClient
from paypal_client.config import PayPalConfig, RetryConfig
from paypal_client.errors import (
    ApiError,
    DecodingError,
    ErrorCode,
    TransportError,
    TransportTimeoutError,
)


class TestTokenRequest:
    """Tests for the shape of the token request."""

    def test_sends_form_encoded_client_credentials(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        fake_paypal.token()

        async def scenario() -> None:
            async with make_client() as client:
                await client.authenticate()

        asyncio.run(scenario())

        [request] = fake_paypal.requests_to("POST", TOKEN_PATH)
        expected = base64.b64encode(b"u:p").decode()
        assert str(request.url) == "https://api-m.sandbox.paypal.com/v1/oauth2/token"
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert request.content == b"grant_type=client_credentials"

    def test_populates_auth_data(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        fake_paypal.token("A21AAF", expires_in=32400)

        async def scenario() -> PayPalClient:
            async with make_client() as client:
                token = await client.authenticate()
                assert token.access_token == "A21AAF"
                return client

        client = asyncio.run(scenario())

        assert client.auth_data.access_token == "A21AAF"
        assert client.auth_data.token_type == "Bearer"
        assert client.auth_data.about_to_expire() is False


class TestFailures:
    """Tests for handshake failures."""

    def test_rejected_credentials_raise_api_error(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        fake_paypal.add(
            "POST",
            TOKEN_PATH,
            httpx.Response(
                401,
                json={"error": "invalid_client", "error_description": "Client Authentication failed"},
            ),
        )

        async def scenario() -> None:
            async with make_client() as client:
                await client.authenticate()

        with pytest.raises(ApiError) as exc_info:
            asyncio.run(scenario())

        assert exc_info.value.status_code == 401
        assert exc_info.value.name == "invalid_client"
        assert exc_info.value.message == "Client Authentication failed"
        # Client errors are not retried.
        assert fake_paypal.token_requests == 1

    def test_auth_data_untouched_on_failure(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        fake_paypal.add("POST", TOKEN_PATH, httpx.Response(400, json={"name": "BAD"}))

        async def scenario() -> PayPalClient:
            client = make_client()
            with pytest.raises(ApiError):
                await client.authenticate()
            await client.close()
            return client

        client = asyncio.run(scenario())

        assert client.auth_data.token is None

    def test_malformed_token_body_raises_decoding_error(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        fake_paypal.add("POST", TOKEN_PATH, httpx.Response(200, json={"token_type": "Bearer"}))

        async def scenario() -> None:
            async with make_client() as client:
                await client.authenticate()

        with pytest.raises(DecodingError) as exc_info:
            asyncio.run(scenario())

        assert exc_info.value.code == ErrorCode.DECODING_ERROR
        assert exc_info.value.status_code == 200


class TestRetry:
    """Tests for retrying the token request."""

    def test_retries_transient_status_then_succeeds(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        fake_paypal.add(
            "POST",
            TOKEN_PATH,
            httpx.Response(503),
            httpx.Response(500),
            token_response("after-retry"),
        )

        async def scenario() -> str:
            async with make_client() as client:
                token = await client.authenticate()
                return token.access_token

        assert asyncio.run(scenario()) == "after-retry"
        assert fake_paypal.token_requests == 3

    def test_retries_connection_errors(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        fake_paypal.add(
            "POST",
            TOKEN_PATH,
            httpx.ConnectError("connection refused"),
            token_response(),
        )

        async def scenario() -> None:
            async with make_client() as client:
                await client.authenticate()

        asyncio.run(scenario())

        assert fake_paypal.token_requests == 2

    def test_gives_up_after_retry_count(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        fake_paypal.add("POST", TOKEN_PATH, httpx.ConnectError("connection refused"))

        async def scenario() -> None:
            async with make_client() as client:
                await client.authenticate()

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(scenario())

        assert exc_info.value.code == ErrorCode.TRANSPORT_ERROR
        # One attempt plus max_retries=2.
        assert fake_paypal.token_requests == 3

    def test_last_transient_status_is_reported(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        fake_paypal.add(
            "POST",
            TOKEN_PATH,
            httpx.Response(503, json={"name": "SERVICE_UNAVAILABLE", "message": "Try later"}),
        )

        async def scenario() -> None:
            async with make_client() as client:
                await client.authenticate()

        with pytest.raises(ApiError) as exc_info:
            asyncio.run(scenario())

        assert exc_info.value.status_code == 503
        assert fake_paypal.token_requests == 3

    def test_timeout_maps_to_timeout_error(
        self,
        base_config: PayPalConfig,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        config = base_config.with_overrides(retry=RetryConfig(max_retries=0))
        fake_paypal.add("POST", TOKEN_PATH, httpx.ReadTimeout("timed out"))

        async def scenario() -> None:
            async with make_client(config) as client:
                await client.authenticate()

        with pytest.raises(TransportTimeoutError):
            asyncio.run(scenario())

        assert fake_paypal.token_requests == 1


class TestSingleFlight:
    """Tests for sharing one handshake between concurrent callers."""

    def test_concurrent_callers_share_one_handshake(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        async def slow_token(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.01)
            return token_response("shared")

        fake_paypal.add("POST", TOKEN_PATH, slow_token)

        async def scenario() -> list[str]:
            async with make_client() as client:
                tokens = await asyncio.gather(*(client.authenticate() for _ in range(5)))
                return [t.access_token for t in tokens]

        assert asyncio.run(scenario()) == ["shared"] * 5
        assert fake_paypal.token_requests == 1

    def test_cancelled_waiter_does_not_cancel_handshake(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        """Cancelling one caller leaves the shared handshake running for the rest."""

        async def scenario() -> tuple[str, str, PayPalClient]:
            started = asyncio.Event()
            release = asyncio.Event()

            async def held_token(request: httpx.Request) -> httpx.Response:
                started.set()
                await release.wait()
                return token_response("kept")

            fake_paypal.add("POST", TOKEN_PATH, held_token)

            async with make_client() as client:
                first = asyncio.create_task(client.authenticate())
                second = asyncio.create_task(client.authenticate())
                await started.wait()

                first.cancel()
                with pytest.raises(asyncio.CancelledError):
                    await first
                release.set()

                token = await second
                return token.access_token, client.auth_data.access_token, client

        token, stored, client = asyncio.run(scenario())

        assert (token, stored) == ("kept", "kept")
        assert client.auth_data.about_to_expire() is False
        assert fake_paypal.token_requests == 1

    def test_failure_reaches_every_waiter_and_clears_slot(
        self,
        make_client: Callable[..., PayPalClient],
        fake_paypal: FakePayPal,
    ) -> None:
        async def rejected(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.01)
            return httpx.Response(401, json={"name": "AUTHENTICATION_FAILURE"})

        fake_paypal.add("POST", TOKEN_PATH, rejected)

        async def scenario() -> list[BaseException | object]:
            async with make_client() as client:
                results = await asyncio.gather(
                    *(client.authenticate() for _ in range(3)),
                    return_exceptions=True,
                )
                fake_paypal.add("POST", TOKEN_PATH, token_response("recovered"))
                token = await client.authenticate()
                return [*results, token.access_token]

        *errors, recovered = asyncio.run(scenario())

        assert all(isinstance(e, ApiError) for e in errors)
        assert recovered == "recovered"
        assert fake_paypal.token_requests == 2
