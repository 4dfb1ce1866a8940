"""FastAPI application exposing the pdftool pipeline over HTTP."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import anyio.to_thread
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pdftool import __version__
from pdftool.config import Config
from pdftool.core.utils import get_logger
from pdftool.engine import TransformEngine
from pdftool.telemetry import OperationMetrics, configure_logging

from .errors import register_exception_handlers
from .health import router as health_router
from .middleware import RateLimitMiddleware, RequestLoggingMiddleware, TokenBucketLimiter
from .pdf import batch_router, pdf_router

LOGGER = get_logger("pdftool.http")


def create_app(config: Config | None = None, *, engine: TransformEngine | None = None) -> FastAPI:
    """Build the HTTP application around an explicitly supplied config.

    When *config* is omitted it is loaded from ``PDF_TOOL_*`` environment
    variables (and ``PDF_TOOL_CONFIG_FILE`` when set).
    """

    if config is None:
        config = engine.config if engine is not None else Config.load()
    configure_logging(config.log_level, config.log_format)

    metrics = None
    if engine is None:
        metrics = OperationMetrics() if config.metrics_enabled else None
        engine = TransformEngine(config, metrics=metrics)
    else:
        metrics = engine.metrics

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        anyio.to_thread.current_default_thread_limiter().total_tokens = config.worker_threads
        LOGGER.info(
            "PDF tool service starting",
            extra={"environment": config.environment, "temp_dir": str(config.temp_dir)},
        )
        yield
        LOGGER.info("PDF tool service stopped")

    app = FastAPI(title="PDF Tool API", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.engine = engine
    app.state.metrics = metrics

    # Starlette runs the last added middleware first.
    app.add_middleware(RequestLoggingMiddleware)
    if config.rate_limit_enabled:
        limiter = TokenBucketLimiter(config.rate_limit_requests_per_minute, config.rate_limit_burst)
        app.add_middleware(RateLimitMiddleware, limiter=limiter)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_allowed_origins),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Original-Size", "X-Compressed-Size", "X-Compression-Ratio"],
    )

    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(pdf_router, prefix=config.api_prefix)
    app.include_router(batch_router, prefix=config.api_prefix)
    return app


__all__ = ["create_app"]
