from __future__ import annotations

from fastapi import HTTPException, Request, status

from heracles.config import Settings
from heracles.dashboards.models import Dashboard


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_dashboards(request: Request) -> tuple[Dashboard, ...]:
    dashboards = request.app.state.dashboards
    if dashboards is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dashboards are not loaded",
        )
    return dashboards


def get_dashboard(dash_idx: int, request: Request) -> Dashboard:
    dashboards = get_dashboards(request)
    if dash_idx < 0 or dash_idx >= len(dashboards):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No such dashboard: {dash_idx}",
        )
    return dashboards[dash_idx]
