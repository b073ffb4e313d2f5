from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from cinestream.infrastructure.config import load_config
from cinestream.infrastructure.logging.setup import configure_logging
from cinestream.interfaces.app import create_app

log = structlog.get_logger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 7000


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="cinestream")

    # bind
    parser.add_argument(
        "--host",
        default=None,
        help="Bind host (overrides HOST env).",
    )
    parser.add_argument(
        "--port",
        default=None,
        type=int,
        help="Bind port (overrides PORT env).",
    )

    # config layers
    parser.add_argument(
        "--config",
        default=None,
        help="Sectioned YAML config (logging/cinemaos/cinemeta).",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help=".env file with CINESTREAM_* variables.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    return parser.parse_args(None if argv is None else list(argv))


def resolve_bind(args: argparse.Namespace) -> tuple[str, int]:
    """CLI flags win over HOST/PORT env vars, which win over defaults."""
    host = args.host or os.getenv("HOST", DEFAULT_HOST)
    port = int(args.port or os.getenv("PORT", str(DEFAULT_PORT)))
    return host, port


def start(argv: Iterable[str] | None = None) -> None:
    """Run the addon under uvicorn with config loaded once at startup."""
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)
    host, port = resolve_bind(args)

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )

    log_config = configure_logging(config)
    log.info(
        "addon_starting",
        host=host,
        port=port,
        manifest_url=f"http://localhost:{port}/manifest.json",
    )

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_config=log_config,
    )


if __name__ == "__main__":
    raise SystemExit(start())
