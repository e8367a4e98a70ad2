"""Notification webhooks.

Endpoint descriptors and DTOs for managing webhooks, simulating events and
verifying webhook signatures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from ..endpoint import Endpoint
from ..models import EmptyResponseBody, LinkDescription
from .enums import AnchorType, Op, VerificationStatus

if TYPE_CHECKING:
    from ..client import PayPalClient

WEBHOOKS_PATH = "v1/notifications/webhooks"


class CreateWebhookEventType(BaseModel):
    """Event a new webhook subscribes to."""

    model_config = ConfigDict(frozen=True)

    # "*" subscribes to all events, including ones added later.
    name: str


class ShowWebhookEventType(BaseModel):
    """Event type as reported by the API."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    description: str | None = None
    status: str | None = None
    resource_versions: list[str] | None = None


class Webhook(BaseModel):
    """A configured webhook."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    url: str
    event_types: list[ShowWebhookEventType]
    links: list[LinkDescription] | None = None


class VerifyWebhookSignatureDto(BaseModel):
    """Signature headers of a received notification plus its body.

    Each field comes from the matching ``PAYPAL-*`` header of the incoming
    notification; ``webhook_event`` is the notification body itself.
    """

    model_config = ConfigDict(frozen=True)

    auth_algo: str
    cert_url: str
    transmission_id: str
    transmission_sig: str
    transmission_time: str
    webhook_event: dict[str, Any]
    webhook_id: str


class VerifyWebhookSignatureResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    verification_status: VerificationStatus


class ListWebhooksQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    anchor_type: AnchorType | None = None


class ListWebhooksResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    webhooks: list[Webhook] = Field(default_factory=list)
    links: list[LinkDescription] | None = None


class ShowWebhookDetailsResponse(BaseModel):
    """Webhook details returned by show, create and update."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    url: str
    event_types: list[ShowWebhookEventType]
    links: list[LinkDescription] | None = None


class CreateWebhookDto(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    event_types: list[CreateWebhookEventType]


class UpdateWebhookDtoItem(BaseModel):
    """One JSON Patch operation against a webhook."""

    model_config = ConfigDict(frozen=True)

    op: Op
    path: str
    value: Any | None = None
    # Required for the move operation.
    from_: str | None = Field(default=None, serialization_alias="from")


class SimulateWebhookEventDto(BaseModel):
    """Simulated event request; one of ``webhook_id`` or ``url`` is required."""

    model_config = ConfigDict(frozen=True)

    webhook_id: str | None = None
    url: str | None = None
    event_type: str
    resource_version: str | None = None


class SimulateWebhookEventResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    create_time: str | None = None
    resource_type: str | None = None
    event_version: str | None = None
    event_type: str | None = None
    summary: str | None = None
    resource_version: str | None = None
    resource: dict[str, Any] | None = None
    links: list[LinkDescription] | None = None


class ListAvailableWebhookEventsResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    event_types: list[ShowWebhookEventType] = Field(default_factory=list)


@dataclass(frozen=True)
class VerifyWebhookSignature(Endpoint[VerifyWebhookSignatureResponse]):
    response_model = VerifyWebhookSignatureResponse

    body: VerifyWebhookSignatureDto

    def path(self) -> str:
        return "v1/notifications/verify-webhook-signature"

    def request_method(self) -> str:
        return "POST"

    def request_body(self) -> VerifyWebhookSignatureDto:
        return self.body


@dataclass(frozen=True)
class ListWebhooks(Endpoint[ListWebhooksResponse]):
    response_model = ListWebhooksResponse

    query_params: ListWebhooksQuery

    def path(self) -> str:
        return WEBHOOKS_PATH

    def query(self) -> ListWebhooksQuery:
        return self.query_params


@dataclass(frozen=True)
class ShowWebhookDetails(Endpoint[ShowWebhookDetailsResponse]):
    response_model = ShowWebhookDetailsResponse

    webhook_id: str

    def path(self) -> str:
        return f"{WEBHOOKS_PATH}/{self.webhook_id}"


@dataclass(frozen=True)
class CreateWebhook(Endpoint[ShowWebhookDetailsResponse]):
    response_model = ShowWebhookDetailsResponse

    body: CreateWebhookDto

    def path(self) -> str:
        return WEBHOOKS_PATH

    def request_method(self) -> str:
        return "POST"

    def request_body(self) -> CreateWebhookDto:
        return self.body


@dataclass(frozen=True)
class UpdateWebhook(Endpoint[ShowWebhookDetailsResponse]):
    response_model = ShowWebhookDetailsResponse

    webhook_id: str
    body: tuple[UpdateWebhookDtoItem, ...]

    def path(self) -> str:
        return f"{WEBHOOKS_PATH}/{self.webhook_id}"

    def request_method(self) -> str:
        return "PATCH"

    def request_body(self) -> list[dict[str, Any]]:
        return [item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in self.body]


@dataclass(frozen=True)
class DeleteWebhook(Endpoint[EmptyResponseBody]):
    response_model = EmptyResponseBody

    webhook_id: str

    def path(self) -> str:
        return f"{WEBHOOKS_PATH}/{self.webhook_id}"

    def request_method(self) -> str:
        return "DELETE"


@dataclass(frozen=True)
class SimulateWebhookEvent(Endpoint[SimulateWebhookEventResponse]):
    response_model = SimulateWebhookEventResponse

    body: SimulateWebhookEventDto

    def path(self) -> str:
        return "v1/notifications/simulate-event"

    def request_method(self) -> str:
        return "POST"

    def request_body(self) -> SimulateWebhookEventDto:
        return self.body


@dataclass(frozen=True)
class ListAvailableWebhookEvents(Endpoint[ListAvailableWebhookEventsResponse]):
    response_model = ListAvailableWebhookEventsResponse

    def path(self) -> str:
        return "v1/notifications/webhooks-event-types"


class Webhooks:
    """Webhook operations, each a single call through the client."""

    @staticmethod
    async def verify(
        client: PayPalClient,
        dto: VerifyWebhookSignatureDto,
    ) -> VerifyWebhookSignatureResponse:
        """Verify a webhook signature."""
        return await client.post(VerifyWebhookSignature(dto))

    @staticmethod
    async def list(
        client: PayPalClient,
        query: ListWebhooksQuery | None = None,
    ) -> ListWebhooksResponse:
        """List webhooks, optionally filtered by anchor type."""
        return await client.get(ListWebhooks(query or ListWebhooksQuery()))

    @staticmethod
    async def show(client: PayPalClient, webhook_id: str) -> ShowWebhookDetailsResponse:
        return await client.get(ShowWebhookDetails(webhook_id))

    @staticmethod
    async def create(client: PayPalClient, dto: CreateWebhookDto) -> ShowWebhookDetailsResponse:
        return await client.post(CreateWebhook(dto))

    @staticmethod
    async def update(
        client: PayPalClient,
        webhook_id: str,
        operations: list[UpdateWebhookDtoItem],
    ) -> ShowWebhookDetailsResponse:
        """Apply JSON Patch operations to a webhook."""
        return await client.patch(UpdateWebhook(webhook_id, tuple(operations)))

    @staticmethod
    async def delete(client: PayPalClient, webhook_id: str) -> None:
        """Delete a webhook. The API answers with an empty body."""
        await client.delete(DeleteWebhook(webhook_id))

    @staticmethod
    async def simulate(
        client: PayPalClient,
        dto: SimulateWebhookEventDto,
    ) -> SimulateWebhookEventResponse:
        return await client.post(SimulateWebhookEvent(dto))

    @staticmethod
    async def list_available(client: PayPalClient) -> ListAvailableWebhookEventsResponse:
        """List the event types webhooks can subscribe to."""
        return await client.get(ListAvailableWebhookEvents())
