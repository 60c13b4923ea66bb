"""
directory/models.py -- Domain dataclass for the user directory.

Pure data container. Validation lives in directory/validation.py and the
uniqueness and lifecycle rules live in directory/store.py.
"""

from dataclasses import dataclass
from datetime import datetime

ROLES: tuple[str, ...] = ("user", "manager", "viewer", "admin")
DEFAULT_ROLE = "user"


@dataclass
class User:
    """A directory record.

    email is stored lower-cased; uniqueness is case-insensitive.
    password is plaintext -- this directory is a demo and never hashes.
    id and created_at are assigned by the store and never change afterwards.
    """

    id: str
    name: str
    email: str
    password: str
    created_at: datetime
    role: str = DEFAULT_ROLE  # "user" | "manager" | "viewer" | "admin"

    def public(self) -> dict:
        """Return the sanitized view: every field except password."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at,
        }
