"""Dashboard definitions: metrics panels, log panels and their spans."""

from heracles.dashboards.models import (
    AxisDefinition,
    Backend,
    Dashboard,
    Graph,
    LogStream,
    PlotMeta,
    SpanConfig,
    SubPlot,
)

__all__ = [
    "AxisDefinition",
    "Backend",
    "Dashboard",
    "Graph",
    "LogStream",
    "PlotMeta",
    "SpanConfig",
    "SubPlot",
]
