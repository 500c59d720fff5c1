"""JSON endpoints serving panel query results to the dashboard renderer."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from heracles.api.deps import get_app_settings, get_dashboard, get_dashboards
from heracles.config import Settings
from heracles.dashboards.models import Dashboard
from heracles.logging import bind_context
from heracles.query.orchestrator import run_log_panel, run_panel
from heracles.query.params import filters_from_params, span_from_params

router = APIRouter()


class PanelSummary(BaseModel):
    index: int
    title: str


class DashboardSummary(BaseModel):
    index: int
    title: str
    graphs: list[PanelSummary]
    logs: list[PanelSummary]


@router.get("/dashboards", response_model=list[DashboardSummary])
async def list_dashboards(
    dashboards: tuple[Dashboard, ...] = Depends(get_dashboards),  # noqa: B008
) -> list[DashboardSummary]:
    """List dashboards with the titles of their panels."""
    return [
        DashboardSummary(
            index=dash_idx,
            title=dashboard.title,
            graphs=[PanelSummary(index=i, title=g.title) for i, g in enumerate(dashboard.graphs)],
            logs=[PanelSummary(index=i, title=s.title) for i, s in enumerate(dashboard.logs)],
        )
        for dash_idx, dashboard in enumerate(dashboards)
    ]


@router.get("/dash/{dash_idx}/graph/{graph_idx}")
async def graph_query(
    dash_idx: int,
    graph_idx: int,
    request: Request,
    dashboard: Dashboard = Depends(get_dashboard),  # noqa: B008
    settings: Settings = Depends(get_app_settings),  # noqa: B008
) -> dict[str, Any]:
    """Query every sub-plot of a metrics panel."""
    if graph_idx < 0 or graph_idx >= len(dashboard.graphs):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No such graph in dashboard {dash_idx}: {graph_idx}",
        )
    graph = dashboard.graphs[graph_idx]
    params = dict(request.query_params)

    log = bind_context(dashboard=dash_idx, graph=graph_idx)
    log.debug("graph_query")
    plots = await run_panel(
        graph,
        dashboard.span,
        span_from_params(params),
        filters_from_params(params),
        timeout=settings.request_timeout,
    )
    return {
        "Metrics": {
            "legend_orientation": graph.legend_orientation,
            "yaxes": [axis.to_dict() for axis in graph.yaxes],
            "d3_tickformat": graph.d3_tickformat,
            "plots": [result.to_dict() for result in plots],
        }
    }


@router.get("/dash/{dash_idx}/log/{log_idx}")
async def log_query(
    dash_idx: int,
    log_idx: int,
    request: Request,
    dashboard: Dashboard = Depends(get_dashboard),  # noqa: B008
    settings: Settings = Depends(get_app_settings),  # noqa: B008
) -> dict[str, Any]:
    """Query a log panel."""
    if log_idx < 0 or log_idx >= len(dashboard.logs):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No such log in dashboard {dash_idx}: {log_idx}",
        )
    stream = dashboard.logs[log_idx]
    params = dict(request.query_params)

    log = bind_context(dashboard=dash_idx, log=log_idx)
    log.debug("log_query")
    result = await run_log_panel(
        stream,
        dashboard.span,
        span_from_params(params),
        timeout=settings.request_timeout,
    )
    return {
        "Logs": {
            "legend_orientation": stream.legend_orientation,
            "lines": result.to_dict(),
        }
    }
