"""Bearer token state and the client-credentials endpoint descriptor.

``AuthData`` is the one piece of mutable state shared by every call made
through a client. Readers see a whole ``TokenData`` snapshot or nothing;
writers replace the snapshot under an exclusive lock.
"""

from __future__ import annotations

import asyncio
import base64
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from .endpoint import AuthStrategy, Endpoint, RequestStrategy
from .models import AuthResponse, RequestHeaders, TokenData

if TYPE_CHECKING:
    from .config import PayPalConfig


class AuthData:
    """Shared bearer token cell.

    Reads are lock-free: the snapshot reference is swapped in one assignment
    so a reader never sees a token from one response paired with the expiry
    of another. ``update`` serializes writers.
    """

    def __init__(self, *, refresh_margin: float = 60.0) -> None:
        """Initialize empty auth data.

        Args:
            refresh_margin: Seconds before expiry at which the token counts as
                about to expire.
        """
        self._margin = timedelta(seconds=refresh_margin)
        self._token: TokenData | None = None
        self._write_lock = asyncio.Lock()

    @property
    def token(self) -> TokenData | None:
        """Get the current token snapshot."""
        return self._token

    @property
    def access_token(self) -> str:
        """Get the current bearer token, empty if never authenticated."""
        token = self._token
        return token.access_token if token else ""

    @property
    def token_type(self) -> str | None:
        token = self._token
        return token.token_type if token else None

    @property
    def expires_at(self) -> datetime | None:
        token = self._token
        return token.expires_at if token else None

    @property
    def refresh_margin(self) -> timedelta:
        return self._margin

    def about_to_expire(self) -> bool:
        """Check if the token is missing or within the safety margin of expiry."""
        token = self._token
        if token is None:
            return True
        return token.expires_within(self._margin)

    async def update(
        self,
        response: AuthResponse,
        *,
        issued_at: datetime | None = None,
    ) -> TokenData:
        """Replace the token with one built from ``response``.

        Args:
            response: Parsed token endpoint response.
            issued_at: Issue instant, defaults to now.

        Returns:
            The new token snapshot.
        """
        token = TokenData.from_response(response, issued_at=issued_at)
        async with self._write_lock:
            self._token = token
        return token

    async def clear(self) -> None:
        """Forget the current token so the next call re-authenticates."""
        async with self._write_lock:
            self._token = None


def basic_auth_header(username: str, client_secret: str) -> str:
    """Build the Basic Authorization header value for the token endpoint."""
    credentials = f"{username}:{client_secret}".encode()
    return f"Basic {base64.b64encode(credentials).decode('ascii')}"


@dataclass(frozen=True)
class Authenticate(Endpoint[AuthResponse]):
    """Client-credentials grant against the OAuth token endpoint."""

    response_model = AuthResponse

    authorization: str = field(repr=False)
    token_path: str = "v1/oauth2/token"
    retry: RequestStrategy = field(default_factory=RequestStrategy)

    @classmethod
    def from_config(cls, config: PayPalConfig) -> Authenticate:
        return cls(
            authorization=basic_auth_header(
                config.username,
                config.client_secret.get_secret_value(),
            ),
            token_path=config.token_endpoint,
            retry=RequestStrategy(max_retries=config.retry.max_retries),
        )

    def path(self) -> str:
        return self.token_path

    def request_method(self) -> str:
        return "POST"

    def headers(self) -> RequestHeaders:
        return RequestHeaders(content_type="application/x-www-form-urlencoded")

    def request_body(self) -> dict[str, str]:
        return {"grant_type": "client_credentials"}

    def auth_strategy(self) -> AuthStrategy:
        return AuthStrategy.NONE

    def request_strategy(self) -> RequestStrategy:
        return self.retry
