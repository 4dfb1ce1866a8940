"""Command line interface for the pdftool pipeline."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from ..config import Config
from ..exceptions import PdfToolError
from ..telemetry import configure_logging
from .commands import documents, serve

COMMAND_MODULES = [serve, documents]


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pdftool", description="PDF processing pipeline")
    parser.add_argument("--config", help="YAML or JSON config file", default=None)
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True
    for module in COMMAND_MODULES:
        module.configure_parser(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _create_parser()
    args = parser.parse_args(argv)
    try:
        config = Config.load(args.config)
        configure_logging(config.log_level, "text")
        args.handler(args, config)
    except PdfToolError as exc:
        print(f"error: {exc} ({exc.code.value})", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
