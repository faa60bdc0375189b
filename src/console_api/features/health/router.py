"""Operational liveness endpoint."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from console_api.api.deps import ReadSessionDep, SettingsDep
from console_api.common.problem_details import ApiError

from .schemas import HealthCheckResponse, HealthComponentStatus

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Service liveness probe",
    response_model_exclude_none=True,
)
def read_health(settings: SettingsDep, db: ReadSessionDep) -> HealthCheckResponse:
    """Return liveness status after pinging the database."""

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise ApiError(
            error_type="service_unavailable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from exc

    return HealthCheckResponse(
        status="ok",
        timestamp=datetime.now(UTC),
        components=[
            HealthComponentStatus(
                name="api",
                status="available",
                detail=f"v{settings.app_version}",
            ),
            HealthComponentStatus(name="database", status="available"),
        ],
    )


__all__ = ["router"]
