"""Namespace for pluggable pdftool tools."""

from __future__ import annotations

from .common.pipeline import registry


def load_builtin_plugins() -> None:
    from .merger import merge  # noqa: F401
    from .splitter import split  # noqa: F401
    from .compressor import compress  # noqa: F401
    from .watermark import overlay  # noqa: F401
    from .rasterizer import render  # noqa: F401
    from .extractor import metadata, text  # noqa: F401
    from . import placeholders  # noqa: F401


__all__ = ["registry", "load_builtin_plugins"]
