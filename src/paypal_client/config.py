"""Configuration for the PayPal client.

Uses Pydantic v2 for validation with sensible defaults. The environment
selects the API host and is fixed for the lifetime of a client.
"""

from __future__ import annotations

import os
import random
from enum import StrEnum
from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigurationError

SANDBOX_BASE_URL = "https://api-m.sandbox.paypal.com"
LIVE_BASE_URL = "https://api-m.paypal.com"
TOKEN_PATH = "v1/oauth2/token"


class Environment(StrEnum):
    """PayPal API environments."""

    SANDBOX = "sandbox"
    LIVE = "live"

    @property
    def base_url(self) -> str:
        """Get the API host for this environment."""
        if self is Environment.SANDBOX:
            return SANDBOX_BASE_URL
        return LIVE_BASE_URL


class RetryConfig(BaseModel):
    """Retry configuration with exponential backoff."""

    model_config = ConfigDict(frozen=True)

    max_retries: Annotated[int, Field(ge=0, le=10)] = 3
    initial_delay: Annotated[float, Field(gt=0, le=60)] = 0.5
    max_delay: Annotated[float, Field(gt=0, le=300)] = 30.0
    exponential_base: Annotated[float, Field(ge=1.5, le=3.0)] = 2.0
    jitter: Annotated[float, Field(ge=0, le=1.0)] = 0.1

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for given attempt with exponential backoff."""
        delay = min(
            self.initial_delay * (self.exponential_base**attempt),
            self.max_delay,
        )
        jitter_range = delay * self.jitter
        return delay + random.uniform(-jitter_range, jitter_range)  # noqa: S311


class TelemetryConfig(BaseModel):
    """Logging and tracing configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    service_name: str = "paypal-client"
    log_level: str = "INFO"


class PayPalConfig(BaseModel):
    """Main configuration for the PayPal client."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    # Credentials
    username: str = Field(..., min_length=1)
    client_secret: SecretStr
    environment: Environment = Environment.SANDBOX

    # HTTP settings
    timeout: Annotated[float, Field(gt=0, le=300)] = 30.0
    connect_timeout: Annotated[float, Field(gt=0, le=60)] = 10.0

    # Seconds before expiry at which the bearer token is refreshed
    token_refresh_margin: Annotated[int, Field(ge=0, le=3600)] = 60

    retry: RetryConfig = Field(default_factory=RetryConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @property
    def base_url(self) -> str:
        """Get the API host selected by the environment."""
        return self.environment.base_url

    @property
    def token_endpoint(self) -> str:
        """Get the relative path of the OAuth token endpoint."""
        return TOKEN_PATH

    def with_overrides(self, **kwargs: Any) -> Self:
        """Create new config with overridden values."""
        data = self.model_dump()
        data.update(kwargs)
        return self.__class__(**data)

    @classmethod
    def from_env(cls, prefix: str = "PAYPAL_") -> Self:
        """Create config from environment variables.

        Raises:
            ConfigurationError: If a required variable is missing, the
                environment name is unknown or a value is out of range.
        """

        def get_env(key: str, default: Any = None) -> Any:
            return os.environ.get(f"{prefix}{key}", default)

        username = get_env("CLIENT_ID")
        if not username:
            raise ConfigurationError(
                f"{prefix}CLIENT_ID environment variable is required",
                field="username",
            )

        secret = get_env("CLIENT_SECRET")
        if not secret:
            raise ConfigurationError(
                f"{prefix}CLIENT_SECRET environment variable is required",
                field="client_secret",
            )

        env_name = get_env("ENVIRONMENT", Environment.SANDBOX.value).lower()
        try:
            environment = Environment(env_name)
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown environment {env_name!r}, expected 'sandbox' or 'live'",
                field="environment",
            ) from e

        raw_timeout = get_env("TIMEOUT", "30.0")
        try:
            timeout = float(raw_timeout)
        except ValueError as e:
            raise ConfigurationError(
                f"{prefix}TIMEOUT must be a number of seconds, got {raw_timeout!r}",
                field="timeout",
            ) from e

        try:
            return cls(
                username=username,
                client_secret=secret,
                environment=environment,
                timeout=timeout,
            )
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or None
            raise ConfigurationError(
                f"Invalid {field} from environment: {first['msg']}",
                field=field,
            ) from e
