"""CLI command that runs every configured query once."""

from __future__ import annotations

import asyncio

from heracles.cli.ux import console, error, header, info, success
from heracles.config import Settings, load_dashboards
from heracles.core.errors import QueryValidationError, format_error_message
from heracles.query.orchestrator import validate_dashboards


def validate_command(settings: Settings) -> int:
    """Validate the dashboards file against the live backends.

    Loads the dashboards file and issues every panel query once, stopping
    at the first failure.

    Returns:
        Exit code (0 when every query succeeded)

    Raises:
        ConfigurationError: If the dashboards file is malformed
        QueryValidationError: On the first failing query
    """
    header("Dashboard Query Validation")
    console.print(f"[muted]Dashboards:[/muted] {settings.dashboards_path}")

    dashboards = load_dashboards(settings.dashboards_path)
    info(f"Loaded {len(dashboards)} dashboard(s)")

    try:
        checked = asyncio.run(
            validate_dashboards(dashboards, timeout=settings.request_timeout)
        )
    except QueryValidationError as e:
        error(format_error_message(e))
        raise

    success(f"All {checked} panel queries succeeded")
    return 0
