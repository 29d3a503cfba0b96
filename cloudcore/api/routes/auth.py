"""Login, registration and auth dependencies (get_current_user, require_admin)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from cloudcore.core.database import get_db
from cloudcore.core.security import TokenError
from cloudcore.models import DEFAULT_ROLE
from cloudcore.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, UserOut
from cloudcore.services.auth import AuthService, InvalidCredentials
from cloudcore.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

UNAUTHORIZED = "Unauthorized"


def get_auth_service(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> AuthService:
    """Dependency: an AuthService bound to this request's session and the app's secret."""
    settings = request.app.state.settings
    return AuthService(
        CredentialStore(db),
        settings.JWT_SECRET.get_secret_value(),
        monitoring=request.app.state.monitoring,
    )


def _client_ip(request: Request) -> str | None:
    """Peer address, or the proxy-supplied client IP when TRUST_PROXY_HEADERS is set."""
    if request.app.state.settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("CF-Connecting-IP") or request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _authenticate(auth: AuthService, credentials: HTTPAuthorizationCredentials) -> UserOut:
    try:
        return auth.authenticate_token(credentials.credentials)
    except TokenError as e:
        # Reason is for operators only; every caller gets the same 401.
        logger.info("Bearer token rejected", extra={"reason": type(e).__name__})
    except InvalidCredentials:
        logger.info("Bearer token rejected", extra={"reason": "user_inactive_or_missing"})
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=UNAUTHORIZED,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> UserOut:
    """Dependency: require a valid Bearer token for an active user. Raises 401 otherwise."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _authenticate(auth, credentials)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> UserOut | None:
    """Dependency: the current user if a Bearer token was sent, else None. A bad token is still 401."""
    if credentials is None:
        return None
    return _authenticate(auth, credentials)


def require_admin(
    current_user: Annotated[UserOut, Depends(get_current_user)],
) -> UserOut:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns a bearer token and the user.
    Include the token in the Authorization header as: Bearer <token>
    """
    result = auth.login(
        body.email,
        body.password,
        client_ip=_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
    return LoginResponse(token=result.token, user=result.user)


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    request: Request,
    auth: Annotated[AuthService, Depends(get_auth_service)],
    caller: Annotated[UserOut | None, Depends(get_optional_user)],
) -> LoginResponse:
    """Create an account and sign it in. Only admins may create operator or admin accounts."""
    if body.role not in (None, DEFAULT_ROLE) and (caller is None or caller.role != "admin"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    result = auth.register(
        body.email,
        body.password,
        role=body.role,
        first_name=body.first_name,
        last_name=body.last_name,
        client_ip=_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
    return LoginResponse(token=result.token, user=result.user)


@router.get("/me", response_model=UserOut)
def me(current_user: Annotated[UserOut, Depends(get_current_user)]) -> UserOut:
    """Return the user behind the Bearer token."""
    return current_user
