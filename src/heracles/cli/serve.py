"""CLI command that serves the dashboards API."""

from __future__ import annotations

import uvicorn

from heracles.api.main import create_app
from heracles.config import Settings, load_dashboards


def serve_command(settings: Settings) -> int:
    """Load the dashboards and serve the API until interrupted.

    The dashboards file is read before the server starts so a malformed
    file fails fast with a configuration error.
    """
    dashboards = load_dashboards(settings.dashboards_path)
    app = create_app(settings, dashboards)
    uvicorn.run(
        app,
        host=settings.listen_host,
        port=settings.listen_port,
        log_level=settings.log_level.lower(),
    )
    return 0
