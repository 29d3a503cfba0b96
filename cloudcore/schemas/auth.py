"""Request/response schemas for auth endpoints."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["admin", "operator", "viewer"]


class LoginRequest(BaseModel):
    """Credentials for login. No minimum password length: a short password is just wrong."""

    email: str = Field(..., min_length=1, max_length=255, description="Account email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class RegisterRequest(BaseModel):
    """New account details. Roles other than viewer require an admin caller."""

    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=128, description="Password")
    role: Role | None = Field(default=None, description="Defaults to viewer")
    first_name: str | None = Field(default=None, max_length=255, alias="firstName")
    last_name: str | None = Field(default=None, max_length=255, alias="lastName")

    model_config = ConfigDict(populate_by_name=True)


class UserOut(BaseModel):
    """Public user fields. Never carries the password hash."""

    id: str
    email: str
    role: str
    first_name: str | None = None
    last_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    """Bearer token plus the authenticated user, returned by login and register."""

    token: str = Field(..., description="Signed bearer token")
    user: UserOut


class ErrorResponse(BaseModel):
    """Every error body: a single generic message."""

    error: str
