"""Operational JSON endpoints served next to the HTML views."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import SettingsDependency
from ...schemas.system import HealthCheckResponse, RootResponse

router = APIRouter(tags=["system"])


@router.get("/healthz", response_model=HealthCheckResponse, status_code=status.HTTP_200_OK)
async def read_health() -> HealthCheckResponse:
    # Liveness only; the task API is not probed.
    return HealthCheckResponse(status="ok")


@router.get("/api/metadata", response_model=RootResponse, summary="Service metadata")
async def read_metadata(settings: SettingsDependency) -> RootResponse:
    """Identify this deployment and the task API it is configured against."""

    return RootResponse(
        name=settings.project_name,
        environment=settings.environment,
        version=settings.version,
        api_base_url=settings.api_base_url,
    )
