"""Auth service: login, registration and bearer-token authentication over the credential store."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from cloudcore.core.security import hash_password, issue_token, verify_password, verify_token
from cloudcore.models import DEFAULT_ROLE, User
from cloudcore.schemas.auth import UserOut
from cloudcore.services.credential_store import CredentialStore, DuplicateEmailError, StoreError
from cloudcore.services.monitoring import MonitoringService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


class InvalidCredentials(Exception):
    """Wrong email, wrong password, inactive or vanished user. Deliberately one message."""

    def __init__(self, message: str = INVALID_CREDENTIALS_MESSAGE) -> None:
        self.message = message
        super().__init__(message)


class UserAlreadyExists(Exception):
    """Registration email is already taken."""

    def __init__(self, message: str = "User already exists") -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class LoginResult:
    """Successful authentication: public user fields and a signed bearer token."""

    user: UserOut
    token: str


class AuthService:
    """
    Orchestrates credential checks and token issuance.

    Stateless between calls; the store is the only shared resource. Construct one per
    request with that request's CredentialStore.
    """

    def __init__(
        self,
        store: CredentialStore,
        token_secret: str,
        monitoring: MonitoringService | None = None,
    ) -> None:
        self.store = store
        self.token_secret = token_secret
        self.monitoring = monitoring

    def login(
        self,
        email: str,
        password: str,
        client_ip: str | None = None,
        user_agent: str | None = None,
    ) -> LoginResult:
        """
        Lookup, verify, touch, audit, issue.

        Raises InvalidCredentials for an unknown/inactive email or a wrong password
        (indistinguishable to the caller) and StoreError if the store fails on lookup.
        """
        user = self.store.find_active_user_by_email(email)
        if user is None:
            self._record_login_failure("unknown_or_inactive_user")
            raise InvalidCredentials()

        try:
            password_ok = verify_password(password, user.password_hash)
        except ValueError as e:
            logger.error("Stored credential is unreadable", extra={"user_id": user.id})
            raise StoreError("stored credential is unreadable", cause=e) from e
        if not password_ok:
            self._record_login_failure("wrong_password", user_id=user.id)
            raise InvalidCredentials()

        # Detached snapshot: a failed touch or audit rolls back and expires the ORM row.
        public = UserOut.model_validate(user)
        token = issue_token(public, self.token_secret)

        try:
            self.store.touch_last_login(public.id)
        except StoreError as e:
            logger.warning("Could not update last login: %s", e.message, extra={"user_id": public.id})

        self._audit("login", public.id, client_ip=client_ip, user_agent=user_agent)
        if self.monitoring is not None:
            self.monitoring.log_event("info", "User logged in", user_id=public.id)
            self.monitoring.record_metric("auth.login.success", 1)
        return LoginResult(user=public, token=token)

    def register(
        self,
        email: str,
        password: str,
        role: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        client_ip: str | None = None,
        user_agent: str | None = None,
    ) -> LoginResult:
        """
        Create an active user (role defaults to viewer) and sign them in.

        Raises UserAlreadyExists if the email is taken.
        """
        if self.store.find_active_user_by_email(email) is not None:
            raise UserAlreadyExists()
        try:
            user = self.store.insert_user(
                email=email,
                password_hash=hash_password(password),
                role=role or DEFAULT_ROLE,
                first_name=first_name,
                last_name=last_name,
            )
        except DuplicateEmailError as e:
            # Taken by an inactive account, or a concurrent registration won the race.
            raise UserAlreadyExists() from e

        public = UserOut.model_validate(user)
        token = issue_token(public, self.token_secret)
        self._audit("register", public.id, client_ip=client_ip, user_agent=user_agent)
        if self.monitoring is not None:
            self.monitoring.log_event(
                "info", "User registered", metadata={"role": public.role}, user_id=public.id
            )
        return LoginResult(user=public, token=token)

    def authenticate_token(self, token: str) -> UserOut:
        """
        Verify a bearer token and re-check that its user is still active.

        Raises TokenError subclasses for bad tokens and InvalidCredentials when the
        user no longer exists or was deactivated.
        """
        payload = verify_token(token, self.token_secret)
        user: User | None = self.store.get_active_user_by_id(payload["userId"])
        if user is None:
            raise InvalidCredentials()
        return UserOut.model_validate(user)

    def _audit(
        self,
        action: str,
        user_id: str,
        client_ip: str | None,
        user_agent: str | None,
    ) -> None:
        """Best-effort audit record; a failure here never fails the request."""
        try:
            self.store.add_audit_log(
                action=action,
                resource_type="user",
                user_id=user_id,
                resource_id=user_id,
                ip_address=client_ip or "unknown",
                user_agent=user_agent or "unknown",
            )
        except StoreError as e:
            logger.warning("Could not write audit log: %s", e.message, extra={"action": action})

    def _record_login_failure(self, reason: str, user_id: str | None = None) -> None:
        # reason stays server-side; the caller only ever sees INVALID_CREDENTIALS_MESSAGE
        logger.info("Login rejected", extra={"reason": reason})
        if self.monitoring is not None:
            self.monitoring.log_event(
                "warn", "Login rejected", metadata={"reason": reason}, user_id=user_id
            )
            self.monitoring.record_metric("auth.login.failure", 1)
