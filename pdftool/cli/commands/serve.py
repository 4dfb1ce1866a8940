"""CLI helper running the HTTP service."""

from __future__ import annotations

from argparse import ArgumentParser, Namespace, _SubParsersAction

import uvicorn

from ...config import Config

_UVICORN_LEVELS = {"warn": "warning"}


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    parser = subparsers.add_parser("serve", help="Run the HTTP API")
    parser.add_argument("--host", default=None, help="Override the configured host")
    parser.add_argument("--port", type=int, default=None, help="Override the configured port")
    parser.set_defaults(handler=_run)


def _run(args: Namespace, config: Config) -> None:
    from apps.backend.app.main import create_app

    app = create_app(config)
    uvicorn.run(
        app,
        host=args.host or config.host,
        port=args.port or config.port,
        timeout_keep_alive=int(config.server_idle_timeout),
        log_level=_UVICORN_LEVELS.get(config.log_level, config.log_level),
    )
