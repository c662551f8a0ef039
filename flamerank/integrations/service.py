"""
FastAPI analyze service for Speedscope profiles.

This module exposes the parser over HTTP. It owns the transport concerns the
parser deliberately leaves out: upload size limits, JSON decoding, and
mapping parse failures to client (400) or server (500) responses.

Endpoints:
    GET /health - Health check endpoint
    POST /api/analyze - Analyze a Speedscope JSON document sent as the body

Configuration comes from the environment:
    FLAMERANK_MAX_UPLOAD_BYTES - Largest accepted body (default 10 MiB)
    FLAMERANK_CORS_ORIGIN - Comma separated allowed origins (default "*")
    FLAMERANK_SERVICE_NAME - Service name for tracing (default "flamerank-api")
    FLAMERANK_ENABLE_TRACING - "1"/"true" to enable OpenTelemetry export
    FLAMERANK_HOST / FLAMERANK_PORT - Bind address for run() (default 0.0.0.0:3001)

Example:
    Run the service with uvicorn:

        $ uvicorn flamerank.integrations.service:create_app --factory

    Then post a profile:

        $ curl -H 'Content-Type: application/json' \\
            --data-binary @profile.json http://localhost:8000/api/analyze
"""

from __future__ import annotations

import json
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flamerank import __version__
from flamerank.core.errors import is_speedscope_parse_error
from flamerank.core.parser import ProfileSummary, SpeedscopeParser
from flamerank.integrations.setup import shutdown_tracing

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ServiceSettings:
    """Runtime settings of the analyze service.

    Attributes:
        max_upload_bytes: Largest request body accepted by /api/analyze
        cors_origins: Origins allowed by the CORS middleware
        service_name: Service name reported to OpenTelemetry
        enable_tracing: Whether to install FastAPI tracing instrumentation
        host: Bind host used by run()
        port: Bind port used by run()
    """
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    service_name: str = "flamerank-api"
    enable_tracing: bool = False
    host: str = "0.0.0.0"
    port: int = 3001

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.max_upload_bytes <= 0:
            raise ValueError("max_upload_bytes must be positive")
        if not 0 < self.port < 65536:
            raise ValueError("port must be between 1 and 65535")

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ServiceSettings":
        """Build settings from FLAMERANK_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            ServiceSettings with defaults for unset variables

        Raises:
            ValueError: If a numeric variable does not parse
        """
        env = os.environ if environ is None else environ
        origins = env.get("FLAMERANK_CORS_ORIGIN", "*")
        return cls(
            max_upload_bytes=int(env.get("FLAMERANK_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
            service_name=env.get("FLAMERANK_SERVICE_NAME", "flamerank-api"),
            enable_tracing=env.get("FLAMERANK_ENABLE_TRACING", "").lower() in _TRUTHY,
            host=env.get("FLAMERANK_HOST", "0.0.0.0"),
            port=int(env.get("FLAMERANK_PORT", 3001)),
        )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _read_body(request: Request, limit: int) -> Optional[bytes]:
    """Read the request body, stopping as soon as it exceeds the limit.

    Returns:
        The body, or None when it is larger than ``limit`` bytes
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        return None

    chunks: List[bytes] = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > limit:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


def build_analysis_response(summary: ProfileSummary) -> Dict[str, Any]:
    """Shape a ProfileSummary into the analyze response body.

    Args:
        summary: Parsed profile summary

    Returns:
        Dict with ``summary`` totals and the ranked ``hotspots``
    """
    return {
        "summary": {
            "totalSamples": summary.totalSamples,
            "profileCount": summary.profileCount,
        },
        "hotspots": [hotspot.to_dict() for hotspot in summary.hotspots],
    }


def create_app(settings: Optional[ServiceSettings] = None) -> FastAPI:
    """Create the analyze service application.

    Args:
        settings: Service settings, read from the environment when None

    Returns:
        Configured FastAPI application
    """
    settings = settings or ServiceSettings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Flush any pending spans
        shutdown_tracing()

    app = FastAPI(title="flamerank", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    parser = SpeedscopeParser()

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/analyze")
    async def analyze(request: Request):
        content_type = request.headers.get("content-type", "")
        if "json" not in content_type:
            return _error(400, "Expected a JSON upload")

        raw = await _read_body(request, settings.max_upload_bytes)
        if raw is None:
            logger.warning("Rejected upload over %d bytes", settings.max_upload_bytes)
            return _error(
                413, f"Profile exceeds the upload limit of {settings.max_upload_bytes} bytes"
            )
        if not raw:
            return _error(400, "No file uploaded")

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return _error(400, "Uploaded file is not valid JSON")

        try:
            # The parser never yields, so keep it off the event loop
            summary = await run_in_threadpool(parser.parse, payload)
        except Exception as error:
            if is_speedscope_parse_error(error):
                logger.warning("Rejected profile: %s", error)
                return _error(400, str(error))
            logger.exception("Failed to analyze profile")
            return _error(500, "Failed to analyze profile")

        logger.info(
            "Analyzed profile: profiles=%d hotspots=%d total=%d",
            summary.profileCount,
            summary.hotspot_count,
            summary.totalSamples,
        )
        return build_analysis_response(summary)

    if settings.enable_tracing:
        from flamerank.integrations.fastapi_integration import (
            instrument_logging,
            setup_fastapi_tracing,
        )

        setup_fastapi_tracing(app, service_name=settings.service_name)
        instrument_logging()

    logger.info(
        "flamerank service created: max_upload_bytes=%d, tracing=%s",
        settings.max_upload_bytes,
        settings.enable_tracing,
    )
    return app


def run(settings: Optional[ServiceSettings] = None) -> None:
    """Serve the analyze API with uvicorn."""
    import uvicorn

    settings = settings or ServiceSettings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
