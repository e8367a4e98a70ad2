"""Centralized error factory for the PayPal client.

Maps transport exceptions and non-2xx responses onto the client's error
taxonomy so the executor and the authenticator report failures identically.
"""

from __future__ import annotations

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..errors import (
    ApiError,
    DecodingError,
    PayPalError,
    TransportError,
    TransportTimeoutError,
)
from ..models import ErrorEnvelope


class ErrorFactory:
    """Centralized error creation with consistent structure."""

    @staticmethod
    def from_http_response(response: httpx.Response) -> PayPalError:
        """Create an error from a non-2xx response.

        Args:
            response: HTTP response whose body is read already.

        Returns:
            ApiError carrying the parsed envelope, or DecodingError if the
            envelope itself cannot be parsed.
        """
        text = response.text
        try:
            envelope = ErrorEnvelope.model_validate_json(text)
        except PydanticValidationError as e:
            return DecodingError(
                f"Could not decode error response with status {response.status_code}",
                status_code=response.status_code,
                body=text,
                cause=e,
            )

        if envelope.debug_id is None and "PayPal-Debug-Id" in response.headers:
            envelope = envelope.model_copy(
                update={"debug_id": response.headers["PayPal-Debug-Id"]}
            )
        return ApiError(envelope, status_code=response.status_code)

    @staticmethod
    def from_exception(exc: Exception) -> PayPalError:
        """Create an error from a transport exception.

        Args:
            exc: Original exception.

        Returns:
            Appropriate PayPalError subclass.
        """
        if isinstance(exc, PayPalError):
            return exc

        if isinstance(exc, httpx.TimeoutException):
            return TransportTimeoutError(f"Request timed out: {exc}", cause=exc)

        if isinstance(exc, httpx.ConnectError):
            return TransportError(f"Connection failed: {exc}", cause=exc)

        if isinstance(exc, httpx.HTTPError):
            return TransportError(f"HTTP error: {exc}", cause=exc)

        return TransportError(f"Unexpected error: {exc}", cause=exc)

    @staticmethod
    def decoding_error(
        exc: Exception,
        *,
        response: httpx.Response,
        expected: str,
    ) -> DecodingError:
        """Create a decoding error for a success body that did not parse."""
        return DecodingError(
            f"Could not decode response as {expected}",
            status_code=response.status_code,
            body=response.text,
            cause=exc,
        )
