"""Request executor for the PayPal client.

Every API call passes through ``RequestExecutor.execute``: it makes sure a
usable bearer token exists, sends the request exactly once and maps the
outcome onto a typed response or a ``PayPalError``.
"""

from __future__ import annotations

import functools
import time
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..endpoint import AuthStrategy
from .errors import ErrorFactory

if TYPE_CHECKING:
    from ..auth import AuthData
    from ..endpoint import Endpoint
    from ..models import TokenData
    from ..telemetry import Telemetry

T = TypeVar("T")


class TokenProvider(Protocol):
    """Anything that can run the token handshake."""

    async def authenticate(self) -> TokenData:
        """Obtain a new bearer token."""
        ...


@functools.lru_cache(maxsize=128)
def _adapter(model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(model)


def decode_response(model: Any, text: str) -> Any:
    """Deserialize a success body into ``model``.

    A body that is empty (or only whitespace) is decoded as ``{}`` instead,
    so operations that answer with nothing succeed for any response type
    whose fields are all optional.

    Raises:
        pydantic.ValidationError: If the body does not fit ``model``.
    """
    adapter = _adapter(model)
    try:
        return adapter.validate_json(text)
    except PydanticValidationError:
        if text.strip():
            raise
        return adapter.validate_json("{}")


class RequestExecutor:
    """Single choke point through which every API call is sent."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        auth_data: AuthData,
        authenticator: TokenProvider,
        telemetry: Telemetry,
    ) -> None:
        """Initialize the executor.

        Args:
            http: Shared HTTP client.
            auth_data: Token cell read before every call.
            authenticator: Handshake runner used when the token is about to expire.
            telemetry: Logger and tracer of the owning client.
        """
        self._http = http
        self._auth_data = auth_data
        self._authenticator = authenticator
        self._telemetry = telemetry
        self._logger = telemetry.logger

    async def execute(self, endpoint: Endpoint[T], request: httpx.Request) -> T:
        """Send ``request`` on behalf of ``endpoint``.

        Args:
            endpoint: Descriptor of the operation being called.
            request: Prepared request for the descriptor's URL.

        Returns:
            The response body decoded into ``endpoint.response_model``.

        Raises:
            TransportError: On network failure, never retried here.
            ApiError: On a non-2xx response with a readable error envelope.
            DecodingError: If the success or error body cannot be decoded.
        """
        if (
            endpoint.auth_strategy() is AuthStrategy.TOKEN_REFRESH
            and self._auth_data.about_to_expire()
        ):
            await self._authenticator.authenticate()

        request.headers["Authorization"] = f"Bearer {self._auth_data.access_token}"

        attributes = {
            "http.method": request.method,
            "http.url": str(request.url),
            "paypal.endpoint": type(endpoint).__name__,
        }
        with self._telemetry.span("paypal.request", attributes=attributes) as span:
            started = time.perf_counter()
            try:
                response = await self._http.send(request)
            except httpx.HTTPError as e:
                self._logger.warning(
                    "Request failed",
                    method=request.method,
                    url=str(request.url),
                    error=str(e),
                )
                raise ErrorFactory.from_exception(e) from e

            span.set_attribute("http.status_code", response.status_code)
            self._logger.debug(
                "Received response",
                method=request.method,
                url=str(request.url),
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )

            if not response.is_success:
                raise ErrorFactory.from_http_response(response)

            try:
                return decode_response(endpoint.response_model, response.text)
            except PydanticValidationError as e:
                raise ErrorFactory.decoding_error(
                    e,
                    response=response,
                    expected=getattr(endpoint.response_model, "__name__", str(endpoint.response_model)),
                ) from e
