"""ORM model for dashboard users (auth and RBAC)."""

import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String, func

from cloudcore.models.base import Base

USER_ROLES = ("admin", "operator", "viewer")
DEFAULT_ROLE = "viewer"


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    User account for bearer-token authentication and role-based access control.

    role: 'admin', 'operator' or 'viewer'. Inactive users are invisible to login.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'operator', 'viewer')",
            name="ck_users_role",
        ),
    )

    id = Column(String(36), primary_key=True, default=_new_user_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=DEFAULT_ROLE)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    last_login_at = Column(DateTime(timezone=True), nullable=True)
