"""
Heracles command line.

Usage:
    heracles serve [--dashboards PATH] [--listen HOST:PORT]
    heracles validate [--dashboards PATH]
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Sequence

from heracles.config import Settings, get_settings
from heracles.core.errors import ConfigurationError, main_with_error_handling
from heracles.logging import configure_logging


def _parse_listen(value: str) -> tuple[str, int]:
    host, sep, port = value.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise argparse.ArgumentTypeError(f"expected HOST:PORT, got {value!r}")
    return host, int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="heracles",
        description="Dashboards over Prometheus, Loki and VictoriaLogs",
    )
    parser.add_argument(
        "--dashboards",
        help="Path to the dashboards YAML file (env: HERACLES_DASHBOARDS_PATH)",
    )
    parser.add_argument("--log-level", help="Log level (env: HERACLES_LOG_LEVEL)")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-query backend timeout in seconds (env: HERACLES_REQUEST_TIMEOUT)",
    )

    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Serve the dashboards API")
    serve_parser.add_argument(
        "--listen",
        type=_parse_listen,
        help="Address to listen on as HOST:PORT (default 127.0.0.1:3000)",
    )

    subparsers.add_parser("validate", help="Run every configured query once and exit")

    return parser


def settings_from_args(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    """Overlay command line options on the environment settings."""
    overrides: dict[str, Any] = {}
    if args.dashboards:
        overrides["dashboards_path"] = args.dashboards
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ConfigurationError("--timeout must be positive")
        overrides["request_timeout"] = args.timeout
    listen = getattr(args, "listen", None)
    if listen:
        overrides["listen_host"], overrides["listen_port"] = listen
    base = base or get_settings()
    return base.model_copy(update=overrides)


@main_with_error_handling()
def run(args: argparse.Namespace) -> int:
    settings = settings_from_args(args)
    configure_logging(settings.log_level)

    if args.command == "validate":
        from heracles.cli.validate import validate_command

        return validate_command(settings)

    from heracles.cli.serve import serve_command

    return serve_command(settings)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(2)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
