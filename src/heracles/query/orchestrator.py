"""
Panel query orchestration.

Runs every sub-plot of a metrics panel (or the single query of a log panel)
through span resolution, the matching connector and the normalizer.
Sub-plots run concurrently; results come back in declaration order. The
first failing sub-plot fails the panel and cancels its siblings.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Iterable, Mapping, Sequence, TypeVar

import structlog

from heracles.core.errors import BackendError, QueryValidationError
from heracles.dashboards.models import Dashboard, Graph, LogStream, SpanConfig, SubPlot
from heracles.query.connectors import create_connector
from heracles.query.connectors.base import DEFAULT_TIMEOUT
from heracles.query.models import Backend, PanelKind, QueryResult, QueryType, TimeSpan
from heracles.query.normalizer import normalize_logsql, normalize_loki, normalize_metrics
from heracles.query.span import resolve_span

logger = structlog.get_logger()

T = TypeVar("T")


async def gather_in_order(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Await all awaitables concurrently, cancelling the rest on the first failure."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def run_plot(
    plot: SubPlot,
    query_type: QueryType,
    span: TimeSpan,
    filters: Mapping[str, str] | None = None,
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> QueryResult:
    """Query one sub-plot and normalize its payload."""
    connector = create_connector(
        plot.backend,
        PanelKind.METRICS,
        source=plot.source,
        query=plot.query,
        query_type=query_type,
        span=span,
        filters=filters,
        timeout=timeout,
    )
    data = await connector.execute()
    return normalize_metrics(data, plot.meta)


async def run_panel(
    graph: Graph,
    dashboard_span: SpanConfig | None = None,
    query_span: SpanConfig | None = None,
    filters: Mapping[str, str] | None = None,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    now: datetime | None = None,
) -> list[QueryResult]:
    """
    Run every sub-plot of a metrics panel.

    Args:
        graph: The metrics panel
        dashboard_span: Span declared on the owning dashboard
        query_span: Span supplied with the request
        filters: Request label filters for the filter placeholder
        timeout: Per-connector request deadline in seconds
        now: Reference instant for span resolution

    Returns:
        One QueryResult per sub-plot, in declaration order

    Raises:
        BackendError: From the first sub-plot that fails
    """
    span = resolve_span(query_span, graph.span, dashboard_span, now)
    logger.debug(
        "running_panel",
        panel=graph.title,
        plots=len(graph.plots),
        start=span.start.isoformat(),
        end=span.end.isoformat(),
        step_seconds=span.step_seconds,
    )
    return await gather_in_order(
        run_plot(plot, graph.query_type, span, filters, timeout=timeout) for plot in graph.plots
    )


async def run_log_panel(
    stream: LogStream,
    dashboard_span: SpanConfig | None = None,
    query_span: SpanConfig | None = None,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    now: datetime | None = None,
) -> QueryResult:
    """
    Run the query of a log panel.

    Raises:
        BackendError: If the backend call fails
    """
    span = resolve_span(query_span, stream.span, dashboard_span, now)
    connector = create_connector(
        stream.backend,
        PanelKind.LOGS,
        source=stream.source,
        query=stream.query,
        query_type=stream.query_type,
        span=span,
        limit=stream.limit,
        timeout=timeout,
    )
    data: Any = await connector.execute()
    if stream.backend is Backend.LOGSQL:
        return normalize_logsql(data)
    return normalize_loki(data)


async def validate_dashboards(
    dashboards: Sequence[Dashboard],
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> int:
    """
    Run every configured query once.

    Returns:
        Number of panels checked

    Raises:
        QueryValidationError: On the first panel whose query fails
    """
    checked = 0
    for dash_idx, dashboard in enumerate(dashboards):
        for graph_idx, graph in enumerate(dashboard.graphs):
            try:
                await run_panel(graph, dashboard.span, timeout=timeout)
            except BackendError as exc:
                raise _validation_error(dashboard, graph.title, dash_idx, graph_idx, exc) from exc
            logger.info("panel_valid", dashboard=dashboard.title, panel=graph.title)
            checked += 1
        for log_idx, stream in enumerate(dashboard.logs):
            try:
                await run_log_panel(stream, dashboard.span, timeout=timeout)
            except BackendError as exc:
                raise _validation_error(dashboard, stream.title, dash_idx, log_idx, exc) from exc
            logger.info("panel_valid", dashboard=dashboard.title, panel=stream.title)
            checked += 1
    return checked


def _validation_error(
    dashboard: Dashboard,
    panel: str,
    dash_idx: int,
    panel_idx: int,
    exc: BackendError,
) -> QueryValidationError:
    return QueryValidationError(
        f"query for panel {panel!r} in dashboard {dashboard.title!r} failed: {exc.message}",
        {
            "dashboard": dash_idx,
            "panel": panel_idx,
            "cause": type(exc).__name__,
        },
    )
