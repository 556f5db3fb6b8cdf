"""OpenTelemetry tracing for the JSON-RPC server.

The dispatcher opens two kinds of span:

- ``mdagent.rpc`` around every request, tagged with :data:`ATTR_RPC_METHOD`,
  :data:`ATTR_RPC_REQUEST_ID` and, on failure, :data:`ATTR_RPC_ERROR_CODE`;
- ``mdagent.tool`` inside ``tools/call``, tagged with :data:`ATTR_TOOL_NAME`.

Tracers come from :func:`get_tracer` and stay no-ops until ``mdagent serve
--trace`` (or ``--otlp-endpoint``) calls :func:`configure_telemetry`. Spans are
never exported to stdout, since stdout carries the protocol stream.
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace

ATTR_RPC_METHOD = "mdagent.rpc.method"
ATTR_RPC_REQUEST_ID = "mdagent.rpc.request_id"
ATTR_RPC_ERROR_CODE = "mdagent.rpc.error_code"
ATTR_TOOL_NAME = "mdagent.tool.name"

SPAN_RPC = "mdagent.rpc"
SPAN_TOOL = "mdagent.tool"

_INSTRUMENTATION_NAME = "mdagent"

_SDK_MISSING = (
    "opentelemetry-sdk is required for configure_telemetry(). "
    "Install it with: pip install mdagent[otel]"
)
_OTLP_MISSING = (
    "opentelemetry-exporter-otlp is required for OTLP export. "
    "Install it with: pip install mdagent[otel]"
)


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return the tracer for *name* (a no-op until telemetry is configured)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def build_tracer_provider(
    *,
    service_name: str = "mdagent",
    service_version: str | None = None,
    export_to_console: bool = False,
    otlp_endpoint: str | None = None,
) -> Any:
    """Create an SDK tracer provider with the requested exporters attached.

    Console spans are written as JSON to stderr, one per finished span.
    OTLP spans are batched and sent over gRPC to *otlp_endpoint*.

    Raises:
        ImportError: If ``opentelemetry-sdk`` (or, for OTLP, the exporter
            package) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        raise ImportError(_SDK_MISSING) from exc

    attributes = {"service.name": service_name}
    if service_version:
        attributes["service.version"] = service_version
    provider = TracerProvider(resource=Resource.create(attributes))  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]

    if export_to_console:
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor  # pyright: ignore[reportMissingImports,reportUnknownVariableType]

        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))

    if otlp_endpoint:
        provider.add_span_processor(_otlp_processor(otlp_endpoint))

    return provider


def configure_telemetry(
    *,
    service_name: str = "mdagent",
    service_version: str | None = None,
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> Any:
    """Install a tracer provider globally so the server's spans get exported.

    Takes the same arguments as :func:`build_tracer_provider` and returns
    the installed provider. Requires the ``otel`` extra.
    """
    provider = build_tracer_provider(
        service_name=service_name,
        service_version=service_version,
        export_to_console=export_to_console,
        otlp_endpoint=otlp_endpoint,
    )
    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]
    return provider


def _otlp_processor(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        raise ImportError(_OTLP_MISSING) from exc
    from opentelemetry.sdk.trace.export import BatchSpanProcessor  # pyright: ignore[reportMissingImports,reportUnknownVariableType]

    return BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint))
