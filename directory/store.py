"""
directory/store.py -- In-memory repository for directory users.

Pattern: Repository. UserStore owns the only list of User records. It is
created in the FastAPI lifespan, kept on app.state, and handed to handlers
through Depends(get_user_store) -- there is no module-level instance, so
tests build their own and a persistent backend can replace it later.

Inputs arrive already validated (UserCreate / UserUpdate from
directory/validation.py); the store enforces what a schema cannot see:
id existence and case-insensitive email uniqueness.

Every mutating method finishes without awaiting, so under the single event
loop no request can observe a half-applied change. No locks are needed.

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from core.errors import Conflict, NotFound
from directory.models import User
from directory.validation import UserCreate, UserUpdate

logger = logging.getLogger("userdir.store")

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "password"  # noqa: S105 -- published demo credential
_SAMPLE_ROLES = ("user", "manager", "viewer")
_SAMPLE_COUNT = 7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore()
        store.seed()
        user = store.create_user(UserCreate(name="Ann", email="ann@x.com", password="secret1"))
        store.delete_user(user.id)
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._users: list[User] = []
        self._clock = clock

    def __len__(self) -> int:
        return len(self._users)

    # ------------------------------------------------------------------
    # Seed
    # ------------------------------------------------------------------

    def seed(self) -> int:
        """Load the demo admin and seven sample users. Returns records added.

        No-op when the store already holds records. Timestamps are staggered
        one minute apart, oldest first, so the admin lists last.
        """
        if self._users:
            return 0
        now = self._clock()
        self._users.append(
            User(
                id=str(uuid.uuid4()),
                name="Demo Admin",
                email=DEMO_EMAIL,
                role="admin",
                password=DEMO_PASSWORD,
                created_at=now - timedelta(minutes=10),
            )
        )
        for i in range(1, _SAMPLE_COUNT + 1):
            self._users.append(
                User(
                    id=str(uuid.uuid4()),
                    name=f"User {i}",
                    email=f"user{i}@example.com",
                    role=_SAMPLE_ROLES[i % len(_SAMPLE_ROLES)],
                    password=DEMO_PASSWORD,
                    created_at=now - timedelta(minutes=10 - i),
                )
            )
        logger.info("Seeded %d users", len(self._users))
        return len(self._users)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_users(self) -> list[User]:
        """Snapshot of all users, newest first. Ties keep insertion order."""
        return sorted(self._users, key=lambda u: u.created_at, reverse=True)

    def get_user(self, user_id: str) -> User:
        """Return the user with user_id or raise NotFound."""
        for user in self._users:
            if user.id == user_id:
                return user
        raise NotFound()

    def get_by_email(self, email: str) -> User | None:
        """Case-insensitive email lookup. Returns None when absent."""
        wanted = email.lower()
        for user in self._users:
            if user.email.lower() == wanted:
                return user
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_user(self, data: UserCreate) -> User:
        """Insert a new user. Raises Conflict if the email is taken."""
        if self.get_by_email(data.email) is not None:
            raise Conflict()
        user = User(
            id=str(uuid.uuid4()),
            name=data.name,
            email=data.email,
            role=data.role.value,
            password=data.password,
            created_at=self._clock(),
        )
        self._users.append(user)
        logger.info("Created user %s (%s)", user.id, user.email)
        return user

    def update_user(self, user_id: str, changes: UserUpdate) -> User:
        """Apply a partial update in place.

        Raises NotFound for an unknown id and Conflict when a changed email
        collides with another record. Both checks run before any field is
        written. name, role and password only overwrite when truthy.
        """
        user = self.get_user(user_id)

        new_email = None
        if changes.email and changes.email.lower() != user.email.lower():
            if self.get_by_email(changes.email) is not None:
                raise Conflict()
            new_email = changes.email

        if new_email:
            user.email = new_email
        if changes.name:
            user.name = changes.name
        if changes.role:
            user.role = changes.role.value
        if changes.password:
            user.password = changes.password

        logger.info("Updated user %s", user.id)
        return user

    def delete_user(self, user_id: str) -> User:
        """Remove and return the user with user_id. Raises NotFound."""
        for index, user in enumerate(self._users):
            if user.id == user_id:
                del self._users[index]
                logger.info("Deleted user %s (%s)", user.id, user.email)
                return user
        raise NotFound()
