"""Command line interface for pdftool."""

from .main import main

__all__ = ["main"]
