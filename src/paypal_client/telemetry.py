"""Logging and tracing for the PayPal client.

Each client builds one ``Telemetry`` from its ``TelemetryConfig`` and hands it
to the authenticator and the request executor. Nothing here touches global
structlog or OpenTelemetry configuration; rendering and exporting stay the
application's choice. Tokens and secrets are never logged.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from . import __version__

if TYPE_CHECKING:
    from collections.abc import Iterator, MutableMapping

    from .config import TelemetryConfig


def log_level(name: str) -> int:
    """Resolve a level name such as ``"debug"`` to its number, INFO if unknown."""
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _drop(_logger: Any, _method: str, _event: MutableMapping[str, Any]) -> Any:
    raise structlog.DropEvent


class Telemetry:
    """Logger and tracer pair owned by one client."""

    def __init__(self, logger: Any, tracer: trace.Tracer) -> None:
        self.logger = logger
        self.tracer = tracer

    @classmethod
    def from_config(cls, config: TelemetryConfig) -> Telemetry:
        """Build telemetry for ``config``.

        Enabled telemetry logs through the application's structlog setup,
        filtered at ``config.log_level``, and traces under
        ``config.service_name``. Disabled telemetry drops every event and
        records no spans.
        """
        if not config.enabled:
            return cls(
                structlog.wrap_logger(structlog.PrintLogger(), processors=[_drop]),
                trace.NoOpTracer(),
            )

        logger = structlog.wrap_logger(
            None,
            wrapper_class=structlog.make_filtering_bound_logger(log_level(config.log_level)),
            logger_factory_args=(config.service_name,),
        )
        return cls(logger, trace.get_tracer(config.service_name, __version__))

    @contextmanager
    def span(
        self,
        name: str,
        *,
        attributes: dict[str, Any] | None = None,
    ) -> Iterator[trace.Span]:
        """Run the block inside a span, marking it failed if the block raises.

        ``None`` attribute values are skipped.
        """
        with self.tracer.start_as_current_span(name) as span:
            for key, value in (attributes or {}).items():
                if value is not None:
                    span.set_attribute(key, value)
            try:
                yield span
            except Exception as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                raise
