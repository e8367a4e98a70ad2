"""Error classes for the PayPal client.

Every failure surfaces to the caller as one of four kinds: the transport
failed, the API answered with an error, a body could not be decoded, or the
client was misconfigured.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import ErrorEnvelope


class ErrorCode(StrEnum):
    """Standardized error codes for the PayPal client."""

    # Transport errors (3xxx)
    TRANSPORT_ERROR = "NET_3001"
    TIMEOUT_ERROR = "NET_3002"

    # Provider-reported errors (4xxx)
    API_ERROR = "API_4001"

    # Decoding errors (5xxx)
    DECODING_ERROR = "DEC_5001"

    # Configuration errors (6xxx)
    INVALID_CONFIG = "CFG_6001"
    INVALID_QUERY = "CFG_6002"
    INVALID_BODY = "CFG_6003"


class PayPalError(Exception):
    """Base error for the PayPal client with structured error information."""

    def __init__(
        self,
        message: str,
        code: ErrorCode | str,
        *,
        status_code: int | None = None,
        debug_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if isinstance(code, str) else code.value
        self.status_code = status_code
        self.debug_id = debug_id
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "debug_id": self.debug_id,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class TransportError(PayPalError):
    """Network or connection failure before a response was received."""

    def __init__(
        self,
        message: str = "Network request failed",
        *,
        cause: Exception | None = None,
        code: ErrorCode = ErrorCode.TRANSPORT_ERROR,
    ) -> None:
        super().__init__(
            message,
            code,
            details={"cause": str(cause)} if cause else None,
        )
        self.__cause__ = cause


class TransportTimeoutError(TransportError):
    """The transport gave up waiting for the server."""

    def __init__(
        self,
        message: str = "Request timed out",
        *,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause, code=ErrorCode.TIMEOUT_ERROR)


class ApiError(PayPalError):
    """Non-2xx response carrying the provider's error envelope."""

    def __init__(
        self,
        envelope: ErrorEnvelope,
        *,
        status_code: int,
    ) -> None:
        message = envelope.message or envelope.name or f"Request failed with status {status_code}"
        super().__init__(
            message,
            ErrorCode.API_ERROR,
            status_code=status_code,
            debug_id=envelope.debug_id,
            details={
                "name": envelope.name,
                "issues": [detail.model_dump(exclude_none=True) for detail in envelope.details],
            },
        )
        self.envelope = envelope

    @property
    def name(self) -> str | None:
        """Get the provider's error name, e.g. ``INVALID_REQUEST``."""
        return self.envelope.name


class DecodingError(PayPalError):
    """A response body could not be deserialized into the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if body is not None:
            details["body"] = body[:200]
        if cause is not None:
            details["cause"] = str(cause)
        super().__init__(
            message,
            ErrorCode.DECODING_ERROR,
            status_code=status_code,
            details=details,
        )
        self.__cause__ = cause


class ConfigurationError(PayPalError):
    """Invalid client configuration or unserializable request input."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        code: ErrorCode = ErrorCode.INVALID_CONFIG,
    ) -> None:
        super().__init__(
            message,
            code,
            details={"field": field} if field else None,
        )
        self.field = field
