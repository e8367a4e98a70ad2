"""Endpoint descriptors.

Every API operation is a small frozen dataclass deriving from ``Endpoint``
that describes where and how to call it. The request executor only ever
talks to this interface, so adding an operation never touches the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, ClassVar, Generic, TypeVar

from .models import QueryParams, RequestHeaders

ResponseT = TypeVar("ResponseT")


class AuthStrategy(StrEnum):
    """Whether an endpoint needs a fresh bearer token before it is sent."""

    NONE = "none"
    TOKEN_REFRESH = "token_refresh"


@dataclass(frozen=True)
class RequestStrategy:
    """Retry policy an endpoint declares for itself."""

    max_retries: int | None = None

    def retry_count(self) -> int:
        """Get the number of retries, 0 when unset."""
        return self.max_retries or 0


class Endpoint(Generic[ResponseT]):
    """Capability set implemented by every API operation.

    Subclasses must set ``response_model`` and implement ``path``; every
    other accessor has a default.
    """

    response_model: ClassVar[Any]

    def path(self) -> str:
        """Get the path relative to the environment's base URL."""
        raise NotImplementedError

    def request_method(self) -> str:
        """Get the HTTP method, GET unless overridden."""
        return "GET"

    def headers(self) -> RequestHeaders:
        """Get the headers this operation sends."""
        return RequestHeaders()

    def query(self) -> QueryParams | Any | None:
        """Get the query parameters, if any."""
        return None

    def request_body(self) -> Any | None:
        """Get the request payload, if any."""
        return None

    def auth_strategy(self) -> AuthStrategy:
        """Get the authentication requirement, token refresh by default."""
        return AuthStrategy.TOKEN_REFRESH

    def request_strategy(self) -> RequestStrategy:
        """Get the retry policy, only honoured by the token handshake."""
        return RequestStrategy()
