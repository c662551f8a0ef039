"""
flamerank.integrations - HTTP service and tracing setup around the parser.

This subpackage provides the pieces that sit outside the metrics engine:
an OpenTelemetry TracerProvider setup, FastAPI instrumentation, and the
FastAPI analyze service itself.

Example:
    >>> from flamerank.integrations import setup_tracing
    >>> from flamerank.integrations.service import create_app
    >>>
    >>> setup_tracing(service_name="flamerank-api", console_output=True)
    >>> app = create_app()
"""

from flamerank.integrations.setup import setup_tracing, get_tracer, shutdown_tracing
from flamerank.integrations.fastapi_integration import (
    setup_fastapi_tracing,
    instrument_logging,
)

__all__ = [
    "setup_tracing",
    "get_tracer",
    "shutdown_tracing",
    "setup_fastapi_tracing",
    "instrument_logging",
]
