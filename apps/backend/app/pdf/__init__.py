"""PDF pipeline routes for the backend."""

from .routes import batch_router, router as pdf_router

__all__ = ["pdf_router", "batch_router"]
