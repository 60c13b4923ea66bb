"""
directory/validation.py -- Input schemas and the Ok/Err validation result.

Pydantic v2 models own the per-field rules. validate() never raises: it
returns Ok(model) or Err(fields), and callers branch on the result type
explicitly before touching the store:

    result = validate(UserCreate, payload)
    if isinstance(result, Err):
        raise ValidationFailed(result.fields)
    directory.create(result.value)

Messages are raised as PydanticCustomError so they reach the client verbatim
(a plain ValueError would be prefixed with "Value error, ").

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ValidationError, field_validator
from pydantic_core import PydanticCustomError

ModelT = TypeVar("ModelT", bound=BaseModel)

ROOT_FIELD = "root"

# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ok(Generic[ModelT]):
    value: ModelT


@dataclass(frozen=True)
class Err:
    """Field path -> message. One entry per failing field."""

    fields: dict[str, str]


ValidationResult = Union[Ok[ModelT], Err]


# ---------------------------------------------------------------------------
# Field rules
# ---------------------------------------------------------------------------


class RoleEnum(str, Enum):
    user = "user"
    manager = "manager"
    viewer = "viewer"
    admin = "admin"


def _check_name(value: str) -> str:
    value = value.strip()
    if len(value) < 2:
        raise PydanticCustomError("name_too_short", "Name must be at least 2 characters")
    return value


def _check_email(value: str, normalize: bool = True) -> str:
    if normalize:
        value = value.strip().lower()
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("email_invalid", "Valid email is required") from None
    return value


def _check_password(value: str) -> str:
    if len(value) < 6:
        raise PydanticCustomError("password_too_short", "Password must be at least 6 characters")
    return value


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Body of POST /api/login. The email is checked but not normalized."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_valid(cls, value: str) -> str:
        return _check_email(value, normalize=False)

    @field_validator("password")
    @classmethod
    def password_present(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("password_required", "Password is required")
        return value


class UserCreate(BaseModel):
    """New user input. role defaults to "user"; email is stored trimmed and lower-cased.

    Email syntax is checked by email-validator, which is stricter than a bare
    pattern match: addresses on special-use domains (a@b.test, x@y.local,
    localhost) are rejected with "Valid email is required".
    """

    name: str
    email: str
    role: RoleEnum = RoleEnum.user
    password: str

    @field_validator("name")
    @classmethod
    def name_valid(cls, value: str) -> str:
        return _check_name(value)

    @field_validator("email")
    @classmethod
    def email_valid(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def password_valid(cls, value: str) -> str:
        return _check_password(value)


class UserUpdate(BaseModel):
    """Partial update. Every field is optional and None means "keep current".

    An empty string for name, role or password is also read as "keep
    current" rather than rejected. Clients relying on this cannot clear or
    mistype those fields into an error, which may be a product defect; it
    is kept because existing clients send blank passwords on every edit.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[RoleEnum] = None
    password: Optional[str] = None

    @field_validator("name", "role", "password", mode="before")
    @classmethod
    def blank_is_unchanged(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @field_validator("name")
    @classmethod
    def name_valid(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_name(value)

    @field_validator("email")
    @classmethod
    def email_valid(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_email(value)

    @field_validator("password")
    @classmethod
    def password_valid(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_password(value)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def field_errors(errors: list[dict], skip_prefix: Optional[str] = None) -> dict[str, str]:
    """Collapse pydantic error dicts into a field -> message mapping.

    The location tuple is dot-joined; an empty location becomes "root".
    skip_prefix drops a leading location segment such as FastAPI's "body".
    The first error reported for a field wins.
    """
    fields: dict[str, str] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if skip_prefix is not None and loc and loc[0] == skip_prefix:
            loc = loc[1:]
        if error.get("type") == "json_invalid":
            loc = []
        key = ".".join(loc) or ROOT_FIELD
        fields.setdefault(key, error.get("msg", "Invalid value"))
    return fields


def validate(model: type[ModelT], payload: Any) -> ValidationResult[ModelT]:
    """Validate payload against model. A missing body validates as {}."""
    try:
        return Ok(model.model_validate({} if payload is None else payload))
    except ValidationError as exc:
        return Err(field_errors(exc.errors()))
