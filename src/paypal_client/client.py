"""PayPal API client.

Owns the configuration, the shared token state and the HTTP transport, and
exposes one coroutine per HTTP verb. Each verb builds a request for an
endpoint descriptor and hands it to the request executor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self, TypeVar

import httpx
from pydantic import TypeAdapter

from .auth import AuthData, Authenticate
from .config import Environment, PayPalConfig
from .core import Authenticator, RequestExecutor
from .errors import ConfigurationError, ErrorCode
from .http import USER_AGENT, UrlComposer, create_async_http_client
from .models import RequestHeaders
from .telemetry import Telemetry

if TYPE_CHECKING:
    from collections.abc import Mapping

    from pydantic import BaseModel

    from .endpoint import Endpoint
    from .models import AppInfo, TokenData

T = TypeVar("T")

_body_adapter: TypeAdapter[Any] = TypeAdapter(Any)


class PayPalClient:
    """Asynchronous PayPal REST API client.

    Example:
        async with PayPalClient.new("client-id", "secret") as client:
            await client.authenticate()
            webhooks = await Webhooks.list(client)
    """

    def __init__(
        self,
        config: PayPalConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize client.

        Args:
            config: Client configuration.
            http_client: Optional transport to use instead of a new one.

        Raises:
            ConfigurationError: If the environment's base URL is invalid.
        """
        self.config = config
        self.default_headers = RequestHeaders()
        self._user_agent = USER_AGENT
        self._composer = UrlComposer(config.base_url)
        self._http = http_client or create_async_http_client(config, user_agent=USER_AGENT)
        self._telemetry = Telemetry.from_config(config.telemetry)
        self._auth_data = AuthData(refresh_margin=config.token_refresh_margin)
        self._authenticator = Authenticator(
            self._http,
            self._composer,
            self._auth_data,
            Authenticate.from_config(config),
            config.retry,
            self._telemetry,
        )
        self._executor = RequestExecutor(
            self._http,
            self._auth_data,
            self._authenticator,
            self._telemetry,
        )

    @classmethod
    def new(
        cls,
        username: str,
        client_secret: str,
        environment: Environment = Environment.SANDBOX,
        **kwargs: Any,
    ) -> Self:
        """Create a client from credentials. Call ``authenticate`` to warm the token."""
        config = PayPalConfig(
            username=username,
            client_secret=client_secret,
            environment=environment,
            **kwargs,
        )
        return cls(config)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._http.aclose()

    @property
    def environment(self) -> Environment:
        return self.config.environment

    @property
    def user_agent(self) -> str:
        return self._user_agent

    @property
    def auth_data(self) -> AuthData:
        """Get the token state shared by every call on this client."""
        return self._auth_data

    @property
    def telemetry(self) -> Telemetry:
        """Get the logger and tracer built from ``config.telemetry``."""
        return self._telemetry

    def with_app_info(self, app_info: AppInfo) -> Self:
        """Append ``app_info`` to the User-Agent sent with every request."""
        self._user_agent = f"{self._user_agent} {app_info}"
        return self

    def compose_url(self, path: str) -> httpx.URL:
        """Compose an absolute URL from the base URL and ``path``."""
        return self._composer.compose(path)

    def compose_url_with_query(
        self,
        path: str,
        query: BaseModel | Mapping[str, Any] | None,
    ) -> httpx.URL:
        """Compose an absolute URL with ``query`` as its query string.

        Raises:
            ConfigurationError: If the query parameters cannot be serialized.
        """
        return self._composer.compose_with_query(path, query)

    async def authenticate(self) -> TokenData:
        """Authenticate with PayPal.

        Runs automatically before calls whose token is about to expire;
        calling it once at startup saves the first request the round trip.

        Raises:
            TransportError: If the token endpoint could not be reached.
            ApiError: If the credentials were rejected.
            DecodingError: If the token response was malformed.
        """
        return await self._authenticator.authenticate()

    async def get(self, endpoint: Endpoint[T]) -> T:
        """Perform a GET request for ``endpoint``."""
        return await self._send("GET", endpoint)

    async def post(self, endpoint: Endpoint[T]) -> T:
        """Perform a POST request for ``endpoint`` with its JSON body."""
        return await self._send("POST", endpoint, with_body=True)

    async def patch(self, endpoint: Endpoint[T]) -> T:
        """Perform a PATCH request for ``endpoint`` with its JSON body."""
        return await self._send("PATCH", endpoint, with_body=True)

    async def delete(self, endpoint: Endpoint[T]) -> T:
        """Perform a DELETE request for ``endpoint``."""
        return await self._send("DELETE", endpoint)

    async def _send(
        self,
        method: str,
        endpoint: Endpoint[T],
        *,
        with_body: bool = False,
    ) -> T:
        url = self.compose_url_with_query(endpoint.path(), endpoint.query())
        content = self._encode_body(endpoint.request_body()) if with_body else None
        request = self._http.build_request(
            method,
            url,
            content=content,
            headers=self._request_headers(endpoint),
        )
        return await self._executor.execute(endpoint, request)

    def _request_headers(self, endpoint: Endpoint[Any]) -> dict[str, str]:
        return {
            "User-Agent": self._user_agent,
            **self.default_headers.to_dict(),
            **endpoint.headers().to_dict(),
        }

    @staticmethod
    def _encode_body(body: Any) -> bytes | None:
        if body is None:
            return None
        try:
            return _body_adapter.dump_json(body, exclude_none=True)
        except ValueError as e:
            raise ConfigurationError(
                f"Request body of type {type(body).__name__} is not JSON serializable",
                field="request_body",
                code=ErrorCode.INVALID_BODY,
            ) from e
