"""HTTP utilities for the PayPal client.

Builds the shared ``httpx.AsyncClient`` and composes absolute request URLs
from the environment's base URL, a relative path and optional query
parameters.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlencode

import httpx
from pydantic import BaseModel

from . import __version__
from .errors import ConfigurationError, ErrorCode

if TYPE_CHECKING:
    from .config import PayPalConfig

USER_AGENT = f"PayPal/v2 Python Bindings/{__version__}"

TRANSIENT_STATUS_CODES = frozenset({408, 429})

# Left unescaped in paths; "%" keeps pre-encoded segments intact.
_PATH_SAFE = "/:@!$&'()*+,;=%"


def is_transient_status(status_code: int) -> bool:
    """Check if a status code is worth retrying."""
    return status_code in TRANSIENT_STATUS_CODES or status_code >= 500


def create_async_http_client(
    config: PayPalConfig,
    *,
    user_agent: str = USER_AGENT,
) -> httpx.AsyncClient:
    """Create configured async HTTP client.

    Args:
        config: Client configuration.
        user_agent: Value of the User-Agent header.

    Returns:
        Configured httpx.AsyncClient.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=config.connect_timeout,
            read=config.timeout,
            write=config.timeout,
            pool=config.timeout,
        ),
        headers={
            "User-Agent": user_agent,
            "Accept": "application/json",
        },
        follow_redirects=False,
    )


def encode_query(query: BaseModel | Mapping[str, Any] | None) -> str:
    """Serialize query parameters into a query string.

    ``None`` values are dropped, booleans render as ``true``/``false``, lists
    as ``key[0]=..`` and nested mappings as ``key[sub]=..``. Key order follows
    the model's field order (or the mapping's insertion order).

    Raises:
        ConfigurationError: If a value cannot be encoded.
    """
    if query is None:
        return ""

    if isinstance(query, BaseModel):
        data = query.model_dump(mode="json", exclude_none=True)
    elif isinstance(query, Mapping):
        data = dict(query)
    else:
        raise ConfigurationError(
            f"Query parameters must be a model or mapping, got {type(query).__name__}",
            field="query",
            code=ErrorCode.INVALID_QUERY,
        )

    pairs: list[tuple[str, str]] = []
    for key, value in data.items():
        _flatten(str(key), value, pairs)
    return urlencode(pairs)


def _flatten(key: str, value: Any, pairs: list[tuple[str, str]]) -> None:
    if value is None:
        return
    if isinstance(value, bool):
        pairs.append((key, "true" if value else "false"))
    elif isinstance(value, Enum):
        _flatten(key, value.value, pairs)
    elif isinstance(value, (str, int, float)):
        pairs.append((key, str(value)))
    elif isinstance(value, BaseModel):
        _flatten(key, value.model_dump(mode="json", exclude_none=True), pairs)
    elif isinstance(value, Mapping):
        for sub_key, sub_value in value.items():
            _flatten(f"{key}[{sub_key}]", sub_value, pairs)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten(f"{key}[{index}]", item, pairs)
    else:
        raise ConfigurationError(
            f"Cannot encode query parameter {key!r} of type {type(value).__name__}",
            field=key,
            code=ErrorCode.INVALID_QUERY,
        )


class UrlComposer:
    """Builds absolute URLs against a fixed base URL."""

    def __init__(self, base_url: str) -> None:
        try:
            self._base_url = httpx.URL(base_url)
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"Invalid base URL: {base_url}", field="base_url") from e

        if self._base_url.scheme not in ("http", "https") or not self._base_url.host:
            raise ConfigurationError(f"Invalid base URL: {base_url}", field="base_url")

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    def compose(self, path: str) -> httpx.URL:
        """Get the base URL with its path replaced by ``path``.

        Characters that would end the path, such as ``?`` and ``#``, are
        percent-encoded, so identifiers embedded in ``path`` cannot leak into
        the query or fragment.
        """
        encoded = quote(path.lstrip("/"), safe=_PATH_SAFE)
        return self._base_url.copy_with(path="/" + encoded)

    def compose_with_query(
        self,
        path: str,
        query: BaseModel | Mapping[str, Any] | None,
    ) -> httpx.URL:
        """Get the composed URL with ``query`` as its query string.

        An empty query yields a URL without a query component.

        Raises:
            ConfigurationError: If the query cannot be serialized.
        """
        url = self.compose(path)
        params = encode_query(query)
        if not params:
            return url
        return url.copy_with(query=params.encode("ascii"))
