"""Password verification and signed bearer-token issuance/verification for authentication."""

import hashlib
import hmac
import time
from typing import Any, Protocol

import jwt

# Bootstrap credential: a fixed account seeded for first login.
# The hash only looks like bcrypt output; it is matched by exact string equality
# together with the fixed plaintext and is never produced by hash_password().
BOOTSTRAP_PASSWORD = "admin123"
BOOTSTRAP_PASSWORD_HASH = "$2b$10$rQZ9QmjQZ9QmjQZ9QmjQZOeJ9QmjQZ9QmjQZ9QmjQZ9QmjQZ9Qmj"

TOKEN_ALGORITHM = "HS256"
# Fixed 24-hour lifetime; not configurable per call.
TOKEN_LIFETIME_SECONDS = 24 * 60 * 60
TOKEN_CLAIMS = ("userId", "email", "role", "iat", "exp")

# Min/max lengths for email and password validation at the HTTP boundary.
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


class TokenError(Exception):
    """Base class for bearer-token verification failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MalformedTokenError(TokenError):
    """Token is not three decodable segments, or its claims are missing or mistyped."""


class InvalidSignatureError(TokenError):
    """Recomputed HMAC does not match the token's signature segment."""


class TokenExpiredError(TokenError):
    """Token signature is valid but exp is in the past."""


class TokenSubject(Protocol):
    """Anything with the identity fields embedded in a token (ORM User, UserOut)."""

    id: Any
    email: str
    role: str


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage: lowercase hex SHA-256 of the UTF-8 bytes."""
    if not isinstance(plain_password, str):
        raise ValueError("password must be a string")
    return hashlib.sha256(plain_password.encode("utf-8")).hexdigest()


def is_bootstrap_credential(plain_password: str, hashed: str) -> bool:
    """True only for the fixed bootstrap plaintext paired with the fixed bootstrap hash."""
    return plain_password == BOOTSTRAP_PASSWORD and hashed == BOOTSTRAP_PASSWORD_HASH


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a plain password against a stored hash.

    Returns False for any normal mismatch. Raises ValueError when either input is
    absent or not a string, since that is corrupt data rather than a wrong password.
    """
    if not isinstance(plain_password, str):
        raise ValueError("password must be a string")
    if not isinstance(hashed, str) or not hashed:
        raise ValueError("stored password hash is missing")
    if is_bootstrap_credential(plain_password, hashed):
        return True
    candidate = hash_password(plain_password)
    return hmac.compare_digest(candidate.encode("utf-8"), hashed.encode("utf-8"))


def _now_seconds() -> int:
    return int(time.time())


def issue_token(user: TokenSubject, secret: str, now: int | None = None) -> str:
    """
    Create a signed HS256 token for user: header.payload.signature, each segment base64url
    without padding. Identical user, secret and second yield identical tokens.
    """
    if not secret:
        raise ValueError("token secret must be non-empty")
    issued_at = _now_seconds() if now is None else int(now)
    payload: dict[str, Any] = {
        "userId": str(user.id),
        "email": user.email,
        "role": user.role,
        "iat": issued_at,
        "exp": issued_at + TOKEN_LIFETIME_SECONDS,
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)


def verify_token(token: str, secret: str, now: int | None = None) -> dict[str, Any]:
    """
    Verify signature and expiry; return the payload (userId, email, role, iat, exp).

    The signature is checked over the raw header.payload segments before the payload
    is interpreted. A token is still valid at the second equal to exp.
    Raises MalformedTokenError, InvalidSignatureError or TokenExpiredError.
    """
    if not isinstance(token, str) or token.count(".") != 2:
        raise MalformedTokenError("token must have three segments")
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[TOKEN_ALGORITHM],
            # exp is compared below against the caller's clock; iat is never checked
            options={"verify_exp": False, "verify_iat": False, "require": ["exp", "iat"]},
        )
    except jwt.InvalidSignatureError as e:
        raise InvalidSignatureError("token signature mismatch") from e
    except jwt.PyJWTError as e:
        raise MalformedTokenError(f"token could not be decoded: {e}") from e

    for claim in ("userId", "email", "role"):
        if not isinstance(payload.get(claim), str) or not payload[claim]:
            raise MalformedTokenError(f"token claim {claim!r} is missing or invalid")
    for claim in ("iat", "exp"):
        if isinstance(payload[claim], bool) or not isinstance(payload[claim], int):
            raise MalformedTokenError(f"token claim {claim!r} must be an integer")

    current = _now_seconds() if now is None else int(now)
    if payload["exp"] < current:
        raise TokenExpiredError("token has expired")
    return {claim: payload[claim] for claim in TOKEN_CLAIMS}
