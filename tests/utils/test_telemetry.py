"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from opentelemetry import trace

from toolbridge.core.config import ConnectionConfig
from toolbridge.utils import telemetry
from toolbridge.utils.telemetry import (
    _INSTRUMENTATION_NAME,
    ATTR_CONNECTION,
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    ATTR_TRANSPORT,
    configure_telemetry,
    connection_attributes,
    get_tracer,
    traced,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        tracer = get_tracer("test.module")
        assert isinstance(tracer, trace.Tracer)

    def test_default_name(self) -> None:
        tracer = get_tracer()
        assert isinstance(tracer, trace.Tracer)

    def test_noop_span(self) -> None:
        """Without SDK configured, spans should be no-ops."""
        tracer = get_tracer("test.noop")
        with tracer.start_as_current_span("toolbridge.rpc") as span:
            span.set_attribute(telemetry.ATTR_RPC_METHOD, "tools/list")


class TestTraced:
    def test_sets_attributes_skipping_none(self) -> None:
        span = MagicMock()
        tracer = MagicMock()
        tracer.start_as_current_span.return_value.__enter__.return_value = span

        with traced(tracer, "toolbridge.rpc", {ATTR_RPC_METHOD: "ping", ATTR_RPC_ID: None}) as got:
            assert got is span

        tracer.start_as_current_span.assert_called_once_with("toolbridge.rpc")
        span.set_attribute.assert_called_once_with(ATTR_RPC_METHOD, "ping")

    def test_without_attributes(self) -> None:
        with traced(get_tracer("test.traced"), "toolbridge.invoke"):
            pass

    def test_connection_attributes(self) -> None:
        config = ConnectionConfig(name="rube", url="wss://x")
        assert connection_attributes(config) == {
            ATTR_CONNECTION: "rube",
            ATTR_TRANSPORT: "websocket",
        }


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match=r"toolbridge\[otel\]"):
                configure_telemetry()

    def test_configures_with_console(self) -> None:
        try:
            from opentelemetry.sdk.trace import TracerProvider
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        original = trace.get_tracer_provider()
        try:
            configure_telemetry(service_name="test-svc", export_to_console=True)
            provider = trace.get_tracer_provider()
            assert provider is not original or isinstance(provider, TracerProvider)
        finally:
            trace.set_tracer_provider(original)

    def test_otlp_raises_without_exporter(self) -> None:
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        with patch.dict(
            "sys.modules",
            {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None},
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(
                    export_to_console=False,
                    otlp_endpoint="http://localhost:4317",
                )


class TestAttributeConstants:
    @pytest.mark.parametrize(
        "name",
        [
            "ATTR_CONNECTION",
            "ATTR_TRANSPORT",
            "ATTR_RPC_METHOD",
            "ATTR_RPC_ID",
            "ATTR_TOOL_NAME",
            "ATTR_ARGS_RAW",
            "ATTR_ARGS_MISSING",
        ],
    )
    def test_constants_are_namespaced(self, name: str) -> None:
        assert getattr(telemetry, name).startswith("toolbridge.")

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "toolbridge"
