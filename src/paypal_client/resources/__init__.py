"""API resources built on the request engine."""

from .enums import AnchorType, Op, VerificationStatus
from .webhooks import (
    CreateWebhookDto,
    CreateWebhookEventType,
    ListAvailableWebhookEventsResponse,
    ListWebhooksQuery,
    ListWebhooksResponse,
    ShowWebhookDetailsResponse,
    ShowWebhookEventType,
    SimulateWebhookEventDto,
    SimulateWebhookEventResponse,
    UpdateWebhookDtoItem,
    VerifyWebhookSignatureDto,
    VerifyWebhookSignatureResponse,
    Webhook,
    Webhooks,
)

__all__ = [
    "AnchorType",
    "CreateWebhookDto",
    "CreateWebhookEventType",
    "ListAvailableWebhookEventsResponse",
    "ListWebhooksQuery",
    "ListWebhooksResponse",
    "Op",
    "ShowWebhookDetailsResponse",
    "ShowWebhookEventType",
    "SimulateWebhookEventDto",
    "SimulateWebhookEventResponse",
    "UpdateWebhookDtoItem",
    "VerificationStatus",
    "VerifyWebhookSignatureDto",
    "VerifyWebhookSignatureResponse",
    "Webhook",
    "Webhooks",
]
