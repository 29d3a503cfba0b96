"""Schemas for audit log listing."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AuditLogItem(BaseModel):
    """One audit record as returned by GET /audit-logs."""

    id: int
    user_id: str | None = None
    action: str
    resource_type: str
    resource_id: str | None = None
    details: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)
