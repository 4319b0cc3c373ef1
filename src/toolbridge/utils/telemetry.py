"""OpenTelemetry spans for RPC calls and tool invocations.

Everything goes through the OpenTelemetry API, which hands out no-op
tracers until an SDK provider is installed.  Instrumented code opens spans
with :func:`traced`::

    _tracer = get_tracer(__name__)

    with traced(_tracer, "toolbridge.rpc", {ATTR_RPC_METHOD: "tools/list"}):
        ...

Real export is opt-in: call :func:`configure_telemetry` once (the CLI does
so for ``--telemetry``).  It needs the ``otel`` extra,
``pip install toolbridge[otel]``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry import trace

if TYPE_CHECKING:
    from toolbridge.core.config import ConnectionConfig

ATTR_CONNECTION = "toolbridge.connection"
ATTR_TRANSPORT = "toolbridge.transport"
ATTR_RPC_METHOD = "toolbridge.rpc.method"
ATTR_RPC_ID = "toolbridge.rpc.id"
ATTR_TOOL_NAME = "toolbridge.tool.name"
ATTR_ARGS_RAW = "toolbridge.args.raw_count"
ATTR_ARGS_MISSING = "toolbridge.args.missing_required"

_INSTRUMENTATION_NAME = "toolbridge"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a tracer for *name* (a no-op tracer until telemetry is configured)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def connection_attributes(config: ConnectionConfig) -> dict[str, str]:
    """Span attributes identifying the server a call goes to."""
    return {ATTR_CONNECTION: config.name, ATTR_TRANSPORT: config.transport or ""}


@contextmanager
def traced(
    tracer: trace.Tracer,
    name: str,
    attributes: Mapping[str, Any] | None = None,
) -> Iterator[trace.Span]:
    """Open span *name* with *attributes*, skipping ``None`` values.

    Exceptions escaping the block are recorded on the span and re-raised.
    """
    with tracer.start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        yield span


def configure_telemetry(
    *,
    service_name: str = "toolbridge",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider with the requested exporters.

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    export_to_console:
        Print finished spans as JSON to stdout.
    otlp_endpoint:
        Also ship spans over OTLP/gRPC to this endpoint.

    Raises
    ------
    ImportError
        If the ``otel`` extra is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install toolbridge[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    for processor in _span_processors(export_to_console, otlp_endpoint):
        provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


def _span_processors(export_to_console: bool, otlp_endpoint: str | None) -> list[Any]:
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    processors: list[Any] = []
    if export_to_console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter()))
    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            msg = (
                "opentelemetry-exporter-otlp is required for OTLP export. "
                "Install it with: pip install toolbridge[otel]"
            )
            raise ImportError(msg) from exc
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    return processors
