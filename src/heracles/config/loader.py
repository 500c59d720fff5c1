"""
Dashboard configuration loading.

The dashboards file is a YAML list of dashboards. It is read once at
startup; any structural problem is fatal and reported with its location.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from heracles.core.errors import ConfigurationError
from heracles.dashboards.models import Dashboard

logger = structlog.get_logger()


def parse_dashboards(data: Any) -> tuple[Dashboard, ...]:
    """
    Build dashboards from already decoded YAML.

    Args:
        data: The decoded document, expected to be a list of mappings

    Returns:
        Immutable tuple of dashboards

    Raises:
        ConfigurationError: If the document does not describe dashboards
    """
    if data is None:
        return ()
    if not isinstance(data, list):
        raise ConfigurationError("dashboards file must contain a list of dashboards")
    return tuple(
        Dashboard.from_dict(item, f"dashboards[{idx}]") for idx, item in enumerate(data)
    )


def load_dashboards(path: str | Path) -> tuple[Dashboard, ...]:
    """
    Load the dashboards file.

    Args:
        path: Path to the YAML dashboards file

    Returns:
        Immutable tuple of dashboards

    Raises:
        ConfigurationError: If the file is missing, is not valid YAML or is malformed
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"dashboards file not found: {path}", {"path": str(path)}) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {path}: {e}", {"path": str(path)}) from e

    dashboards = parse_dashboards(data)
    logger.debug("loaded_dashboards", path=str(path), count=len(dashboards))
    return dashboards
