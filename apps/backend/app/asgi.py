"""ASGI entry point for external servers: ``uvicorn apps.backend.app.asgi:app``.

Configuration comes from ``PDF_TOOL_*`` variables and ``PDF_TOOL_CONFIG_FILE``.
"""

from __future__ import annotations

from .main import create_app

app = create_app()

__all__ = ["app"]
