"""Pydantic models for the PayPal client.

Wire types shared by the request engine and the resource modules: the
token response, the error envelope, query parameters and request headers.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AuthResponse(BaseModel):
    """OAuth 2.0 client-credentials response from the token endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    scope: str | None = None
    access_token: str = Field(..., min_length=1)
    token_type: str = "Bearer"
    app_id: str | None = None
    expires_in: Annotated[int, Field(gt=0)]
    nonce: str | None = None


class TokenData(BaseModel):
    """Immutable bearer token snapshot with its expiry instant."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str
    expires_at: datetime
    scope: str | None = None
    app_id: str | None = None

    @classmethod
    def from_response(
        cls,
        response: AuthResponse,
        *,
        issued_at: datetime | None = None,
    ) -> Self:
        """Create TokenData from an AuthResponse, expiring ``expires_in`` after issue."""
        issued_at = issued_at or datetime.now(UTC)
        return cls(
            access_token=response.access_token,
            token_type=response.token_type,
            expires_at=issued_at + timedelta(seconds=response.expires_in),
            scope=response.scope,
            app_id=response.app_id,
        )

    def expires_within(self, margin: timedelta) -> bool:
        """Check if the token expires within ``margin`` from now."""
        return datetime.now(UTC) >= self.expires_at - margin

    def time_until_expiry(self) -> timedelta:
        """Get time remaining until token expires."""
        return self.expires_at - datetime.now(UTC)


class LinkDescription(BaseModel):
    """HATEOAS link returned alongside most resources."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    href: str
    rel: str
    method: str | None = None


class ErrorDetail(BaseModel):
    """A single field-level issue inside an error envelope."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    field: str | None = None
    # Echoes the rejected input, so any JSON type.
    value: Any = None
    location: str | None = None
    issue: str | None = None
    description: str | None = None


class ErrorEnvelope(BaseModel):
    """Structured error body PayPal returns on any non-2xx response."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str | None = None
    message: str | None = None
    debug_id: str | None = None
    information_link: str | None = None
    details: list[ErrorDetail] = Field(default_factory=list)
    links: list[LinkDescription] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def accept_oauth_error(cls, data: Any) -> Any:
        """Map the token endpoint's ``error``/``error_description`` shape."""
        if isinstance(data, dict) and "name" not in data and "error" in data:
            data = dict(data)
            data["name"] = data.pop("error")
            data.setdefault("message", data.pop("error_description", None))
        return data


class EmptyResponseBody(BaseModel):
    """Response type of operations that answer with no body."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class QueryParams(BaseModel):
    """Common list/paging query parameters.

    Unset fields are left out of the query string; declared order is the
    serialization order.
    """

    model_config = ConfigDict(frozen=True)

    count: int | None = None
    end_time: str | None = None
    page: int | None = None
    page_size: int | None = None
    total_count_required: bool | None = None
    sort_by: str | None = None
    sort_order: str | None = None
    start_id: str | None = None
    start_index: int | None = None
    start_time: str | None = None
    fields: str | None = None

    def _with(self, **kwargs: Any) -> Self:
        return self.model_copy(update=kwargs)

    def with_count(self, count: int) -> Self:
        return self._with(count=count)

    def with_end_time(self, end_time: str) -> Self:
        return self._with(end_time=end_time)

    def with_page(self, page: int) -> Self:
        return self._with(page=page)

    def with_page_size(self, page_size: int) -> Self:
        return self._with(page_size=page_size)

    def with_total_count_required(self, required: bool) -> Self:
        return self._with(total_count_required=required)

    def with_sort_by(self, sort_by: str) -> Self:
        return self._with(sort_by=sort_by)

    def with_sort_order(self, sort_order: str) -> Self:
        return self._with(sort_order=sort_order)

    def with_start_id(self, start_id: str) -> Self:
        return self._with(start_id=start_id)

    def with_start_index(self, start_index: int) -> Self:
        return self._with(start_index=start_index)

    def with_start_time(self, start_time: str) -> Self:
        return self._with(start_time=start_time)

    def with_fields(self, fields: str) -> Self:
        return self._with(fields=fields)


_HEADER_NAMES = {
    "content_type": "Content-Type",
    "paypal_request_id": "PayPal-Request-Id",
    "paypal_partner_attribution_id": "PayPal-Partner-Attribution-Id",
    "paypal_client_metadata_id": "PayPal-Client-Metadata-Id",
    "paypal_auth_assertion": "PayPal-Auth-Assertion",
    "prefer": "Prefer",
}


class RequestHeaders(BaseModel):
    """Per-request headers an endpoint can declare."""

    model_config = ConfigDict(frozen=True)

    content_type: str = "application/json"
    paypal_request_id: str | None = None
    paypal_partner_attribution_id: str | None = None
    paypal_client_metadata_id: str | None = None
    paypal_auth_assertion: str | None = None
    prefer: str | None = None

    def to_dict(self) -> dict[str, str]:
        """Get the set headers keyed by their HTTP names."""
        return {
            _HEADER_NAMES[key]: value
            for key, value in self.model_dump(exclude_none=True).items()
        }


class AppInfo(BaseModel):
    """Identifies the application built on top of this client."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    version: str | None = None
    url: str | None = None

    def __str__(self) -> str:
        text = self.name
        if self.version:
            text = f"{text}/{self.version}"
        if self.url:
            text = f"{text} ({self.url})"
        return text
