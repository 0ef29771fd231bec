"""OpenTelemetry tracing for command execution.

Every command runs inside a ``tabdb.command`` span. Until ``setup_tracing``
installs an SDK provider, the API's no-op provider is used and spans cost
next to nothing.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from tabdb import __version__

TRACER_NAME = "tabdb"


def setup_tracing(
    service_name: str = "tabdb",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> None:
    """Install an SDK tracer provider exporting to OTLP and/or the console.

    Args:
        service_name: ``service.name`` resource attribute.
        otlp_endpoint: OTLP gRPC collector, e.g. ``http://localhost:4317``.
        console_export: Also print finished spans to stdout.
    """
    provider = TracerProvider(
        resource=Resource.create({"service.name": service_name, "service.version": __version__})
    )
    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)


@contextmanager
def trace_span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """Run the enclosed block inside a span carrying ``attributes``."""
    tracer = trace.get_tracer(TRACER_NAME, __version__)
    with tracer.start_as_current_span(name, attributes=attributes) as span:
        yield span
