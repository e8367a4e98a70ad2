"""Enumerations used by the notification resources."""

from __future__ import annotations

from enum import StrEnum


class AnchorType(StrEnum):
    """Filters listed webhooks by the entity type of their anchor."""

    APPLICATION = "APPLICATION"
    ACCOUNT = "ACCOUNT"


class VerificationStatus(StrEnum):
    """Outcome of a webhook signature verification."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class Op(StrEnum):
    """JSON Patch operation."""

    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    MOVE = "move"
    COPY = "copy"
    TEST = "test"
