"""
OpenTelemetry tracing setup for flamerank.

The parser always opens a ``flamerank.parse`` span through the global
OpenTelemetry API; without a configured provider that span is a no-op. This
module installs an SDK TracerProvider so those spans (and any spans created
by the analyze service) are actually exported.

Example:
    >>> from flamerank.integrations import setup_tracing, get_tracer
    >>>
    >>> setup_tracing(service_name="flamerank-api", console_output=True)
    >>>
    >>> tracer = get_tracer("my-module")
    >>> with tracer.start_as_current_span("analyze-upload") as span:
    ...     span.set_attribute("upload.bytes", 1024)
"""

from __future__ import annotations

import logging
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SimpleSpanProcessor,
    SpanExporter,
    ConsoleSpanExporter,
)

logger = logging.getLogger(__name__)

# Global reference to the configured provider
_tracer_provider: Optional[TracerProvider] = None


def setup_tracing(
    service_name: str,
    console_output: bool = False,
    use_batch_processor: bool = True,
    additional_exporters: Optional[list[SpanExporter]] = None,
) -> TracerProvider:
    """Setup OpenTelemetry tracing for parse and service spans.

    Args:
        service_name: Name of the service reported on every span.
        console_output: Whether to print finished spans to stdout.
        use_batch_processor: Use BatchSpanProcessor (True) or SimpleSpanProcessor.
        additional_exporters: SpanExporters to attach, e.g. an OTLP exporter.

    Returns:
        The configured TracerProvider.
    """
    global _tracer_provider

    resource = Resource.create({
        SERVICE_NAME: service_name,
    })
    provider = TracerProvider(resource=resource)

    exporters: list[SpanExporter] = []
    if console_output:
        exporters.append(ConsoleSpanExporter())
    if additional_exporters:
        exporters.extend(additional_exporters)

    for exporter in exporters:
        if use_batch_processor:
            provider.add_span_processor(BatchSpanProcessor(exporter))
        else:
            provider.add_span_processor(SimpleSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    _tracer_provider = provider

    logger.info(
        "Tracing configured: service=%s, exporters=%d",
        service_name,
        len(exporters),
    )

    return provider


def get_tracer(name: str, version: Optional[str] = None) -> trace.Tracer:
    """Get a tracer from the configured provider.

    Args:
        name: Name of the tracer (usually module name).
        version: Optional version of the tracer.

    Returns:
        A Tracer instance for creating spans.
    """
    provider = trace.get_tracer_provider()
    return provider.get_tracer(name, version)


def shutdown_tracing() -> None:
    """Flush pending spans and shut down the TracerProvider."""
    global _tracer_provider

    if _tracer_provider:
        logger.info("Shutting down tracing...")
        _tracer_provider.shutdown()
        _tracer_provider = None
        logger.info("Tracing shutdown complete")
