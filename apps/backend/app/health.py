"""Liveness, readiness and metrics endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from pdftool.engine import TransformEngine

from .pdf.dependencies import get_engine

SERVICE_NAME = "pdf-tool"

router = APIRouter(tags=["health"])


@router.get("/health", response_class=JSONResponse)
async def health() -> dict[str, str]:
    """Liveness check, independent of pipeline state."""

    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/ready", response_class=JSONResponse)
async def ready(engine: TransformEngine = Depends(get_engine)) -> JSONResponse:
    if not await run_in_threadpool(engine.scratch.is_writable):
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return JSONResponse(content={"status": "ready"})


@router.get("/metrics", include_in_schema=False)
async def metrics(request: Request) -> Response:
    operation_metrics = request.app.state.metrics
    if operation_metrics is None:
        return Response(status_code=404)
    payload, content_type = operation_metrics.exposition()
    return Response(content=payload, media_type=content_type)


__all__ = ["router"]
