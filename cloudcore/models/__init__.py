"""SQLAlchemy ORM models."""

from cloudcore.models.audit_log import AuditLog
from cloudcore.models.base import Base
from cloudcore.models.user import DEFAULT_ROLE, USER_ROLES, User

__all__ = ["AuditLog", "Base", "DEFAULT_ROLE", "USER_ROLES", "User"]
