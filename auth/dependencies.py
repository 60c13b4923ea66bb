"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Two token sources are checked in priority order:
  1. Authorization: Bearer <token> header -- API clients.
  2. JWT cookie ("access_token") -- set by the web UI login flow.
A Bearer header, when present, is used even if a cookie is also sent.

Verification is stateless: signature and expiry only. The user record is
not looked up, so a token for a deleted user stays valid until it expires.

try_get_current_user_id() is the soft variant (returns None on failure).
get_current_user_id() wraps it and raises Unauthorized.

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

from fastapi import Request

from auth.tokens import COOKIE_NAME, decode_access_token
from core.errors import Unauthorized
from directory.store import UserStore


def get_user_store(request: Request) -> UserStore:
    """Return the store created by the application lifespan."""
    return request.app.state.user_store


def extract_token(request: Request) -> str | None:
    """Return the raw token from the Bearer header, else the cookie, if any."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return request.cookies.get(COOKIE_NAME) or None


def try_get_current_user_id(request: Request) -> str | None:
    """Return the user id bound to a valid token, None otherwise. Never raises."""
    token = extract_token(request)
    if token is None:
        return None
    payload = decode_access_token(token)
    if payload is None:
        return None
    return payload["user_id"]


def get_current_user_id(request: Request) -> str:
    """Require a valid token. Raises Unauthorized (HTTP 401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user_id: str = Depends(get_current_user_id)): ...
    """
    token = extract_token(request)
    if token is None:
        raise Unauthorized()
    payload = decode_access_token(token)
    if payload is None:
        raise Unauthorized("Invalid or expired token")
    return payload["user_id"]
