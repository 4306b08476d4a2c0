"""Tracing and structured logging around handshake operations."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .config import ObservabilityConfig
from .exceptions import HandshakeError


class Observability:
    """Wrap handshake operations in OpenTelemetry spans and JSON log lines."""

    def __init__(
        self,
        config: ObservabilityConfig | None = None,
        *,
        tracer_provider: trace.TracerProvider | None = None,
    ) -> None:
        self.config = config or ObservabilityConfig()
        self._tracer = trace.get_tracer(self.config.tracer, tracer_provider=tracer_provider)
        self._logger = logging.getLogger(self.config.logger)

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @contextmanager
    def observe(self, operation: str, **attributes: Any) -> Iterator[dict[str, Any]]:
        """Trace ``operation``; the yielded dict collects fields for the success log line."""

        fields: dict[str, Any] = {key: value for key, value in attributes.items() if value is not None}
        if not self.enabled:
            yield fields
            return
        with self._tracer.start_as_current_span(
            f"sigil.{operation}",
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            try:
                yield fields
            except HandshakeError as exc:
                span.set_attribute("sigil.error.code", exc.code)
                span.set_status(Status(StatusCode.ERROR, exc.code))
                self.log(
                    "handshake.failed",
                    {**fields, "operation": operation, "code": exc.code, "detail": exc.message},
                    level=logging.WARNING,
                )
                raise
            except Exception as exc:
                span.record_exception(exc)
                span.set_status(Status(StatusCode.ERROR, type(exc).__name__))
                raise
            for key, value in fields.items():
                if isinstance(value, (str, bool, int, float)):
                    span.set_attribute(f"sigil.{key}", value)
            span.set_status(Status(StatusCode.OK))
            self.log(f"handshake.{operation}", fields)

    def log(self, event: str, extra: Mapping[str, Any] | None = None, *, level: int = logging.INFO) -> None:
        if not self.enabled:
            return
        payload: dict[str, Any] = {}
        if extra:
            for key, value in extra.items():
                if value is not None:
                    payload[key] = value
        payload["event"] = event
        self._logger.log(level, json.dumps(payload, separators=(",", ":"), default=str))


__all__ = ["Observability"]
