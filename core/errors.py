"""
core/errors.py -- Error taxonomy shared by the auth and directory layers.

Services raise these; the request boundary (api/main.py exception handler,
web/routes.py form handlers) turns them into responses. Each class carries
the HTTP status and machine-readable code it maps to, so the boundary needs
no per-class branching.

No failure path mutates state before raising -- every operation either
completes or leaves the store untouched.
"""

from __future__ import annotations


class DirectoryError(Exception):
    """Base class for all expected, client-facing failures."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def details(self) -> dict[str, str] | None:
        return None


class ValidationFailed(DirectoryError):
    """Request input violated the schema.

    fields maps a dot-joined field path (or "root") to a human-readable
    message, one entry per failing field.
    """

    status_code = 400
    code = "validation_failed"
    default_message = "Validation failed"

    def __init__(self, fields: dict[str, str], message: str | None = None) -> None:
        self.fields = dict(fields)
        super().__init__(message)

    @property
    def details(self) -> dict[str, str]:
        return self.fields


class Unauthorized(DirectoryError):
    """Missing, malformed, foreign-signed, or expired session token."""

    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class InvalidCredentials(DirectoryError):
    """Login email/password did not match a user record."""

    status_code = 401
    code = "bad_credentials"
    default_message = "Invalid email or password"


class NotFound(DirectoryError):
    status_code = 404
    code = "not_found"
    default_message = "User not found"


class Conflict(DirectoryError):
    status_code = 409
    code = "conflict"
    default_message = "Email already exists"
