"""Credential store: parameterized single-row reads and writes on users and audit_logs."""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cloudcore.models import DEFAULT_ROLE, AuditLog, User

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the database is unreachable, misconfigured, or a statement fails."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class DuplicateEmailError(Exception):
    """Raised when inserting a user whose email is already taken."""

    def __init__(self, email: str) -> None:
        self.email = email
        self.message = "A user with this email already exists."
        super().__init__(self.message)


class CredentialStore:
    """User and audit-log access for the auth flow. One instance per DB session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _fail(self, operation: str, exc: SQLAlchemyError) -> StoreError:
        self.session.rollback()
        logger.error(
            "Credential store operation failed",
            extra={"operation": operation, "error_type": type(exc).__name__},
        )
        return StoreError(f"{operation} failed", cause=exc)

    def find_active_user_by_email(self, email: str) -> User | None:
        try:
            return (
                self.session.query(User)
                .filter(User.email == email, User.is_active.is_(True))
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail("find_active_user_by_email", e) from e

    def get_active_user_by_id(self, user_id: str) -> User | None:
        try:
            return (
                self.session.query(User)
                .filter(User.id == user_id, User.is_active.is_(True))
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail("get_active_user_by_id", e) from e

    def touch_last_login(self, user_id: str) -> None:
        """Set last_login_at to now for user_id."""
        try:
            self.session.query(User).filter(User.id == user_id).update(
                {User.last_login_at: datetime.now(timezone.utc)},
                synchronize_session=False,
            )
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("touch_last_login", e) from e

    def insert_user(
        self,
        email: str,
        password_hash: str,
        role: str = DEFAULT_ROLE,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Insert an active user. Raises DuplicateEmailError if the email is taken."""
        user = User(
            email=email,
            password_hash=password_hash,
            role=role,
            first_name=first_name,
            last_name=last_name,
            is_active=True,
        )
        try:
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
        except IntegrityError as e:
            self.session.rollback()
            # Unique index on email; the role check constraint is guarded by the schemas.
            raise DuplicateEmailError(email) from e
        except SQLAlchemyError as e:
            raise self._fail("insert_user", e) from e
        return user

    def add_audit_log(
        self,
        action: str,
        resource_type: str,
        user_id: str | None = None,
        resource_id: str | None = None,
        details: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditLog:
        entry = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        try:
            self.session.add(entry)
            self.session.commit()
            self.session.refresh(entry)
        except SQLAlchemyError as e:
            raise self._fail("add_audit_log", e) from e
        return entry

    def list_audit_logs(self, user_id: str | None = None, limit: int = 100) -> list[AuditLog]:
        """Newest first; all users when user_id is None."""
        try:
            query = self.session.query(AuditLog)
            if user_id is not None:
                query = query.filter(AuditLog.user_id == user_id)
            return query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
        except SQLAlchemyError as e:
            raise self._fail("list_audit_logs", e) from e
