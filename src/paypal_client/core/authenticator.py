"""Client-credentials handshake for the PayPal client.

Exchanges the configured username/secret pair for a bearer token and writes
it into the shared ``AuthData``. Transient failures are retried with
exponential backoff up to the token descriptor's retry count. Concurrent
callers share one in-flight handshake.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..errors import TransportError
from ..http import is_transient_status
from ..models import AuthResponse, TokenData
from .errors import ErrorFactory

if TYPE_CHECKING:
    from ..auth import AuthData, Authenticate
    from ..config import RetryConfig
    from ..http import UrlComposer
    from ..telemetry import Telemetry


class Authenticator:
    """Performs the client-credentials grant and populates ``AuthData``."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        composer: UrlComposer,
        auth_data: AuthData,
        endpoint: Authenticate,
        retry_config: RetryConfig,
        telemetry: Telemetry,
    ) -> None:
        """Initialize the authenticator.

        Args:
            http: Shared HTTP client.
            composer: URL composer for the client's environment.
            auth_data: Token cell to write into.
            endpoint: Token endpoint descriptor carrying credentials and retry count.
            retry_config: Backoff timing between attempts.
            telemetry: Logger and tracer of the owning client.
        """
        self._http = http
        self._composer = composer
        self._auth_data = auth_data
        self._endpoint = endpoint
        self._retry_config = retry_config
        self._inflight: asyncio.Task[TokenData] | None = None
        self._telemetry = telemetry
        self._logger = telemetry.logger

    async def authenticate(self) -> TokenData:
        """Obtain a new bearer token, joining a handshake already in flight.

        Returns:
            The token now stored in ``AuthData``.

        Raises:
            TransportError: If the token endpoint could not be reached.
            ApiError: If the token endpoint answered with an error.
            DecodingError: If the token response was malformed.
        """
        task = self._inflight
        if task is None:
            task = asyncio.ensure_future(self._handshake())
            task.add_done_callback(self._release)
            self._inflight = task
        return await asyncio.shield(task)

    def _release(self, task: asyncio.Task[TokenData]) -> None:
        if self._inflight is task:
            self._inflight = None
        # Mark the outcome as retrieved even if every waiter was cancelled.
        if not task.cancelled():
            task.exception()

    def build_token_request(self) -> httpx.Request:
        """Build the form-encoded POST to the token endpoint."""
        endpoint = self._endpoint
        headers = endpoint.headers().to_dict()
        headers["Authorization"] = endpoint.authorization
        return self._http.build_request(
            endpoint.request_method(),
            self._composer.compose(endpoint.path()),
            content=urlencode(endpoint.request_body()),
            headers=headers,
        )

    async def _handshake(self) -> TokenData:
        url = str(self._composer.compose(self._endpoint.path()))
        with self._telemetry.span("paypal.authenticate", attributes={"http.url": url}):
            response = await self._send_with_retry()

            if not response.is_success:
                error = ErrorFactory.from_http_response(response)
                self._logger.warning(
                    "Authentication rejected",
                    status_code=response.status_code,
                    error=error.message,
                )
                raise error

            try:
                parsed = AuthResponse.model_validate_json(response.text)
            except PydanticValidationError as e:
                raise ErrorFactory.decoding_error(
                    e, response=response, expected="AuthResponse"
                ) from e

            token = await self._auth_data.update(parsed)
            self._logger.info(
                "Authenticated",
                token_type=token.token_type,
                expires_at=token.expires_at.isoformat(),
            )
            return token

    async def _send_with_retry(self) -> httpx.Response:
        retries = self._endpoint.request_strategy().retry_count()

        for attempt in range(retries + 1):
            request = self.build_token_request()
            try:
                response = await self._http.send(request)
            except httpx.TransportError as e:
                if attempt >= retries:
                    raise ErrorFactory.from_exception(e) from e
                delay = self._retry_config.get_delay(attempt)
                self._log_retry("Token request failed", attempt, delay, str(e))
                await asyncio.sleep(delay)
                continue
            except httpx.HTTPError as e:
                raise ErrorFactory.from_exception(e) from e

            if attempt < retries and is_transient_status(response.status_code):
                delay = self._retry_delay(response, attempt)
                self._log_retry(
                    "Token endpoint unavailable",
                    attempt,
                    delay,
                    f"status {response.status_code}",
                )
                await asyncio.sleep(delay)
                continue

            return response

        raise TransportError("Token request failed after retries")

    def _retry_delay(self, response: httpx.Response, attempt: int) -> float:
        retry_after = response.headers.get("Retry-After")
        if response.status_code == 429 and retry_after and retry_after.isdigit():
            return min(float(retry_after), self._retry_config.max_delay)
        return self._retry_config.get_delay(attempt)

    def _log_retry(
        self,
        message: str,
        attempt: int,
        delay: float,
        error: str | None = None,
    ) -> None:
        """Log retry attempt."""
        self._logger.warning(
            message,
            attempt=attempt,
            delay=delay,
            error=error,
        )
