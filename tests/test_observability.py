from __future__ import annotations

import json
import logging

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from sigil.config import IdentityProviderConfig, ObservabilityConfig
from sigil.exceptions import SignatureMismatchError
from sigil.identity import IdentityProvider
from sigil.observability import Observability
from sigil.providers import StaticCredentialResolver, StaticSecretStore
from tests.support import NOW, SP_SECRET, request_params, signed_request_fields


@pytest.fixture
def exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def observability(exporter: InMemorySpanExporter) -> Observability:
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return Observability(ObservabilityConfig(), tracer_provider=provider)


def _json_records(caplog: pytest.LogCaptureFixture) -> list[dict[str, object]]:
    return [json.loads(record.getMessage()) for record in caplog.records if record.name == "sigil.handshake"]


def _identity_provider(observability: Observability, credentials: object = None) -> IdentityProvider:
    return IdentityProvider(
        IdentityProviderConfig(name="accounts"),
        secrets=StaticSecretStore({"shop": SP_SECRET}),
        credentials=StaticCredentialResolver(credentials),
        observability=observability,
    )


def test_successful_operations_emit_spans_and_json_logs(
    observability: Observability,
    exporter: InMemorySpanExporter,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="sigil.handshake")
    idp = _identity_provider(observability, {"uid": "42"})
    idp.handle_request(request_params(signed_request_fields()), now=NOW)

    spans = {span.name: span for span in exporter.get_finished_spans()}
    assert set(spans) == {"sigil.check_request", "sigil.handle_request"}
    assert spans["sigil.check_request"].attributes["sigil.sp"] == "shop"
    assert spans["sigil.handle_request"].attributes["sigil.outcome"] == "dispatched"
    assert spans["sigil.handle_request"].status.status_code is StatusCode.OK

    records = _json_records(caplog)
    assert [record["event"] for record in records] == ["handshake.check_request", "handshake.handle_request"]
    assert records[1]["outcome"] == "dispatched"
    assert all("sig" not in record for record in records)


def test_failures_mark_span_and_log_error_code(
    observability: Observability,
    exporter: InMemorySpanExporter,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="sigil.handshake")
    idp = _identity_provider(observability)
    with pytest.raises(SignatureMismatchError):
        idp.check_request(request_params(signed_request_fields(secret="wrong")), now=NOW)

    (span,) = exporter.get_finished_spans()
    assert span.status.status_code is StatusCode.ERROR
    assert span.attributes["sigil.error.code"] == "signature_mismatch"

    (record,) = _json_records(caplog)
    assert record["event"] == "handshake.failed"
    assert record["operation"] == "check_request"
    assert record["code"] == "signature_mismatch"
    assert record["sp"] == "shop"
    assert [r.levelno for r in caplog.records if r.name == "sigil.handshake"] == [logging.WARNING]


def test_unexpected_errors_are_recorded_and_propagate(
    observability: Observability,
    exporter: InMemorySpanExporter,
) -> None:
    with pytest.raises(RuntimeError):
        with observability.observe("explode"):
            raise RuntimeError("boom")
    (span,) = exporter.get_finished_spans()
    assert span.status.status_code is StatusCode.ERROR
    assert span.events[0].name == "exception"


def test_disabled_observability_is_silent(
    exporter: InMemorySpanExporter,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="sigil.handshake")
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    quiet = Observability(ObservabilityConfig(enabled=False), tracer_provider=provider)
    with quiet.observe("noop") as fields:
        fields["value"] = 1
    quiet.log("ignored")
    assert exporter.get_finished_spans() == ()
    assert _json_records(caplog) == []
