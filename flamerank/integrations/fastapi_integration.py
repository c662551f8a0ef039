"""
FastAPI tracing integration for the flamerank analyze service.

This module wires OpenTelemetry auto-instrumentation into a FastAPI app so
every request span and the nested ``flamerank.parse`` span land in the same
trace.

Example:
    >>> from flamerank.integrations import setup_fastapi_tracing
    >>> from flamerank.integrations.service import create_app
    >>>
    >>> app = create_app()
    >>> setup_fastapi_tracing(app, service_name="flamerank-api", excluded_urls="/health")
"""

from __future__ import annotations

import logging
from typing import Optional

from flamerank.integrations.setup import setup_tracing

logger = logging.getLogger(__name__)


def setup_fastapi_tracing(
    app,  # FastAPI app - type hint omitted to avoid import
    service_name: str,
    console_output: bool = False,
    excluded_urls: Optional[str] = None,
    additional_exporters: Optional[list] = None,
) -> None:
    """Setup automatic tracing for a FastAPI application.

    Args:
        app: The FastAPI application instance.
        service_name: Name of the service reported on every span.
        console_output: Whether to print finished spans to stdout.
        excluded_urls: Regex pattern for URLs to exclude from tracing.
        additional_exporters: SpanExporters to attach alongside the console one.

    Raises:
        ImportError: If opentelemetry-instrumentation-fastapi is not installed.
    """
    setup_tracing(
        service_name=service_name,
        console_output=console_output,
        additional_exporters=additional_exporters,
    )

    try:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(
            app,
            excluded_urls=excluded_urls,
        )

        logger.info(
            "FastAPI auto-instrumentation enabled for service '%s'",
            service_name,
        )

    except ImportError:
        logger.warning(
            "opentelemetry-instrumentation-fastapi not installed. "
            "Install with: pip install flamerank[tracing]"
        )
        raise ImportError(
            "FastAPI instrumentation requires additional dependencies. "
            "Install with: pip install flamerank[tracing]"
        )


def instrument_logging() -> bool:
    """Inject trace_id and span_id into log records.

    Returns:
        True if logging instrumentation was enabled.
    """
    try:
        from opentelemetry.instrumentation.logging import LoggingInstrumentor
        LoggingInstrumentor().instrument()
        logger.info("Logging instrumentation enabled")
        return True
    except ImportError:
        logger.warning(
            "opentelemetry-instrumentation-logging not installed. "
            "Install with: pip install flamerank[tracing]"
        )
        return False
