"""Monitoring endpoints: application logs and metrics, provider source availability."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from cloudcore.api.routes.auth import get_current_user
from cloudcore.schemas.auth import UserOut
from cloudcore.schemas.monitoring import LogEntry, MetricData, SourceName, SourceStatus
from cloudcore.services.monitoring import MonitoringService, SourceUnavailableError

router = APIRouter()


def get_monitoring(request: Request) -> MonitoringService:
    return request.app.state.monitoring


@router.get("/monitoring/sources", response_model=list[SourceStatus])
def list_sources(
    _user: Annotated[UserOut, Depends(get_current_user)],
    monitoring: Annotated[MonitoringService, Depends(get_monitoring)],
) -> list[SourceStatus]:
    return monitoring.source_status()


@router.get("/logs", response_model=list[LogEntry])
def get_logs(
    _user: Annotated[UserOut, Depends(get_current_user)],
    monitoring: Annotated[MonitoringService, Depends(get_monitoring)],
    source: Annotated[SourceName, Query()] = "app",
    vm_id: Annotated[str | None, Query(max_length=255)] = None,
) -> list[LogEntry]:
    """Logs from one source, newest first. 503 for providers without an integration."""
    try:
        return monitoring.get_logs(source, vm_id=vm_id)
    except SourceUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message) from e


@router.get("/metrics", response_model=list[MetricData])
def get_metrics(
    _user: Annotated[UserOut, Depends(get_current_user)],
    monitoring: Annotated[MonitoringService, Depends(get_monitoring)],
    source: Annotated[SourceName, Query()] = "app",
) -> list[MetricData]:
    try:
        return monitoring.get_metrics(source)
    except SourceUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message) from e
