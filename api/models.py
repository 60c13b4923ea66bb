"""
API response models for UserDirectory REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from directory/models.py (the domain dataclass) and
directory/validation.py (the request schemas). Route handlers map between them.

The password never appears here: UserResponse is built from User.public().
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from directory.models import User


class UserResponse(BaseModel):
    """Sanitized user record. created_at is serialized as "createdAt"."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    role: str
    created_at: datetime = Field(serialization_alias="createdAt")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(**user.public())


class LoginResponse(BaseModel):
    """Response body for POST /api/login."""

    model_config = ConfigDict(frozen=True)

    token: str
    user: UserResponse


class SuccessResponse(BaseModel):
    """Response body for POST /api/logout."""

    model_config = ConfigDict(frozen=True)

    success: bool = True


class DeleteResponse(BaseModel):
    """Response body for DELETE /api/users/{id} -- echoes the removed record."""

    model_config = ConfigDict(frozen=True)

    success: bool = True
    user: UserResponse


class StatusResponse(BaseModel):
    """Response for GET /."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    message: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload.

    details carries the field -> message map for validation failures.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    details: Optional[dict[str, str]] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail
