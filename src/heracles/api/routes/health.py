from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from heracles.api.deps import get_dashboards
from heracles.dashboards.models import Dashboard

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str = "0.1.0"


class ReadinessResponse(BaseModel):
    status: str
    dashboards: int


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="healthy")


@router.get("/ready", response_model=ReadinessResponse, status_code=status.HTTP_200_OK)
async def readiness_check(
    dashboards: tuple[Dashboard, ...] = Depends(get_dashboards),  # noqa: B008
) -> ReadinessResponse:
    """Ready once the dashboards file has been loaded."""
    return ReadinessResponse(status="ready", dashboards=len(dashboards))
