"""Pydantic request/response schemas."""

from cloudcore.schemas.audit import AuditLogItem
from cloudcore.schemas.auth import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    Role,
    UserOut,
)
from cloudcore.schemas.health import HealthResponse
from cloudcore.schemas.monitoring import LogEntry, MetricData, SourceStatus

__all__ = [
    "AuditLogItem",
    "ErrorResponse",
    "HealthResponse",
    "LogEntry",
    "LoginRequest",
    "LoginResponse",
    "MetricData",
    "RegisterRequest",
    "Role",
    "SourceStatus",
    "UserOut",
]
