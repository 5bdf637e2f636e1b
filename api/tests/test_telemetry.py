from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI
from opentelemetry.sdk.trace import TracerProvider

from marketjobs.core.config import Settings
from marketjobs.core.telemetry import _correlated_record, setup_api_telemetry, shutdown_api_telemetry


def _record() -> logging.LogRecord:
    return _correlated_record("marketjobs.test", logging.INFO, __file__, 1, "hello", (), None)


def test_log_records_carry_zero_ids_outside_a_span() -> None:
    record = _record()
    assert record.trace_id == "0" * 32
    assert record.span_id == "0" * 16


def test_log_records_carry_active_span_ids() -> None:
    tracer = TracerProvider().get_tracer(__name__)
    with tracer.start_as_current_span("request") as span:
        record = _record()
        context = span.get_span_context()

    assert record.trace_id == format(context.trace_id, "032x")
    assert record.span_id == format(context.span_id, "016x")


def test_telemetry_disabled_leaves_app_untouched() -> None:
    runtime = setup_api_telemetry(FastAPI(), Settings(otel_enabled=False))
    assert runtime.enabled is False
    assert runtime.provider is None


def test_telemetry_without_endpoint_traces_locally(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT", raising=False)
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
    app = FastAPI()

    runtime = setup_api_telemetry(app, Settings(otel_enabled=True, otel_exporter_otlp_endpoint=None))

    assert runtime.enabled is True
    assert runtime.provider is not None
    shutdown_api_telemetry(app, runtime)
