"""PayPal REST API client for Python."""

__version__ = "0.1.0"

from .auth import AuthData, Authenticate, basic_auth_header
from .client import PayPalClient
from .config import Environment, PayPalConfig, RetryConfig, TelemetryConfig
from .endpoint import AuthStrategy, Endpoint, RequestStrategy
from .errors import (
    ApiError,
    ConfigurationError,
    DecodingError,
    ErrorCode,
    PayPalError,
    TransportError,
    TransportTimeoutError,
)
from .models import (
    AppInfo,
    AuthResponse,
    EmptyResponseBody,
    ErrorDetail,
    ErrorEnvelope,
    LinkDescription,
    QueryParams,
    RequestHeaders,
    TokenData,
)
from .telemetry import Telemetry

__all__ = [
    "ApiError",
    "AppInfo",
    "AuthData",
    "AuthResponse",
    "AuthStrategy",
    "Authenticate",
    "ConfigurationError",
    "DecodingError",
    "EmptyResponseBody",
    "Endpoint",
    "Environment",
    "ErrorCode",
    "ErrorDetail",
    "ErrorEnvelope",
    "LinkDescription",
    "PayPalClient",
    "PayPalConfig",
    "PayPalError",
    "QueryParams",
    "RequestHeaders",
    "RequestStrategy",
    "RetryConfig",
    "Telemetry",
    "TelemetryConfig",
    "TokenData",
    "TransportError",
    "TransportTimeoutError",
    "basic_auth_header",
]
