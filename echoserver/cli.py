"""echoserver command deck."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from typing import List, Optional

from echoserver import __version__
from echoserver.base.config import get_config, set_config, setup_logging
from echoserver.errors import EchoServerError

logger = logging.getLogger(__name__)


def run_server(args) -> int:
    """Bind and serve until interrupted."""
    from echoserver.server.api import serve

    cfg = get_config()
    if args.log_level:
        cfg = dataclasses.replace(cfg, log=dataclasses.replace(cfg.log, level=args.log_level))
    if args.host:
        cfg = dataclasses.replace(cfg, api_host=args.host)
    if args.port is not None:
        cfg = dataclasses.replace(cfg, api_port=args.port)
    cfg.validate()
    set_config(cfg)

    setup_logging(cfg)
    serve(config=cfg)
    return 0


def show_config(args) -> int:
    """Print the effective configuration as JSON."""
    cfg = get_config()
    print(json.dumps(dataclasses.asdict(cfg), indent=2, default=str))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="echoserver", description="echoserver Command Deck")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve Command
    serve_parser = subparsers.add_parser("serve", help="Start the HTTP server")
    serve_parser.add_argument("--host", help="Bind address (default 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, help="Bind port (default 8080)")
    serve_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Override ECHOSERVER_LOG_LEVEL",
    )
    serve_parser.set_defaults(func=run_server)

    # Config Command
    config_parser = subparsers.add_parser("config", help="Print the effective configuration")
    config_parser.set_defaults(func=show_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 2

    try:
        return args.func(args)
    except EchoServerError as exc:
        logger.debug(f"[CLI] {exc.code.value} details: {exc.details}")
        print(f"echoserver: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
