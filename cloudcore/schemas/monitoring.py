"""Schemas for application and provider monitoring data."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

LogLevel = Literal["info", "warn", "error", "debug"]
SourceName = Literal["app", "aws", "azure", "proxmox"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LogEntry(BaseModel):
    """A single log line from the application or a cloud provider."""

    timestamp: datetime = Field(default_factory=_utcnow)
    level: LogLevel
    message: str
    metadata: dict[str, Any] | None = None
    source: SourceName
    vm_id: str | None = None
    user_id: str | None = None


class MetricData(BaseModel):
    """A single metric sample."""

    timestamp: datetime = Field(default_factory=_utcnow)
    metric_name: str
    value: float
    unit: str
    dimensions: dict[str, str] | None = None


class SourceStatus(BaseModel):
    """Availability of one monitoring source."""

    name: SourceName
    logs_available: bool
    metrics_available: bool
