"""
auth/tokens.py -- Session tokens and credential checks.

JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
     user_id, iat, and exp. Verification returns None on any failure --
     bad signature, malformed input, expiry, or a missing user_id claim.
     The dependency layer turns None into Unauthorized.

Tokens are stateless. Nothing is recorded server-side at issue time, so
logout cannot revoke a token; it stays valid until exp. Revocation would
need a denylist or a rotating key, neither of which exists here.

Passwords are compared in plaintext. The directory stores them that way
by design (demo data, no hashing).

Layer rule: no imports from api/ or web/. Import from core/ and directory/
is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from jose import JWTError, jwt

from core.config import get_settings
from core.errors import InvalidCredentials

if TYPE_CHECKING:
    from directory.models import User
    from directory.store import UserStore

logger = logging.getLogger("userdir.auth")

_settings = get_settings()

_ALGORITHM = "HS256"

COOKIE_NAME = "access_token"

# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: str, issued_at: datetime | None = None) -> str:
    """Encode a signed JWT for user_id, valid for token_expire_seconds.

    issued_at defaults to now. Passing a past time yields a token that
    expires correspondingly earlier.
    """
    iat = issued_at or datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "iat": iat,
        "exp": iat + timedelta(seconds=_settings.token_expire_seconds),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure."""
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if not isinstance(payload.get("user_id"), str):
        return None
    return payload


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Return the user whose email matches case-insensitively and whose password matches."""
    user = store.get_by_email(email)
    if user is None:
        return None
    if user.password != password:
        return None
    return user


def issue_session(store: UserStore, email: str, password: str) -> tuple[str, User]:
    """Check credentials and return (token, user). Raises InvalidCredentials."""
    user = authenticate_user(store, email, password)
    if user is None:
        logger.info("Login failed for %s", email)
        raise InvalidCredentials()
    logger.info("Login succeeded for %s", user.email)
    return create_access_token(user.id), user


# ---------------------------------------------------------------------------
# Cookie helper
# ---------------------------------------------------------------------------


def set_auth_cookie(response, token: str) -> None:
    """Write the JWT as an httpOnly cookie on the response.

    max_age matches the JWT expiry so both expire together.
    """
    response.set_cookie(
        COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=_settings.secure_cookies,
        max_age=_settings.token_expire_seconds,
    )
