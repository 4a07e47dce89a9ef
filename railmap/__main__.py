"""Command line entry point: load the datasets and serve them with uvicorn."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Sequence

import uvicorn

from railmap.config import ServerConfig
from railmap.errors import RailmapError
from railmap.logging_config import configure_logging, get_logger
from railmap.main import create_app

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="railmap", description="Serve N05 rail lines and stations over HTTP"
    )
    parser.add_argument("--host", help="Override RAILMAP_HOST (listen address)")
    parser.add_argument("--port", type=int, help="Override RAILMAP_PORT")
    parser.add_argument("--utf8-dir", help="Override RAILMAP_UTF8_DIR (UTF-8 dataset directory)")
    parser.add_argument("--static-dir", help="Override RAILMAP_STATIC_DIR (static asset directory)")
    parser.add_argument("--log-level", help="Override RAILMAP_LOG_LEVEL")
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Rebuild filtered payloads on every request",
    )
    parser.add_argument(
        "--cache-max-years",
        type=int,
        help="Override RAILMAP_CACHE_MAX_YEARS (filtered years kept per endpoint)",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> ServerConfig:
    """Apply command line overrides on top of the environment config."""
    config = ServerConfig.from_env()
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.utf8_dir:
        overrides["utf8_dir"] = Path(args.utf8_dir).expanduser()
    if args.static_dir:
        overrides["static_dir"] = Path(args.static_dir).expanduser()
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.no_cache:
        overrides["cache_filtered_responses"] = False
    if args.cache_max_years is not None:
        overrides["cache_max_years"] = args.cache_max_years
    config = replace(config, **overrides)
    config.validate()
    return config


def main(argv: Sequence[str] | None = None) -> int:
    """Run the server.

    Returns:
        Process exit code; 1 when configuration or dataset loading fails.
    """
    args = build_parser().parse_args(argv)
    try:
        config = resolve_config(args)
        configure_logging(config.log_level)
        app = create_app(config)
    except RailmapError as error:
        logger.error("startup_failed", error=str(error))
        return 1

    logger.info("server_starting", host=config.host, port=config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.strip().lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
