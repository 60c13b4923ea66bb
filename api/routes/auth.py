"""
api/routes/auth.py -- Session endpoints.

Routes:
  POST /api/login   -- email/password login; returns {token, user}
  POST /api/logout  -- requires a valid token; returns {success: true}

Logout is advisory. Tokens are stateless, so the server has nothing to
invalidate; the client is expected to discard its token.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Response

from api.models import LoginResponse, SuccessResponse, UserResponse
from auth.dependencies import get_current_user_id, get_user_store
from auth.tokens import issue_session
from core.errors import ValidationFailed
from directory.store import UserStore
from directory.validation import Err, LoginRequest, validate

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    response: Response,
    payload: Optional[dict[str, Any]] = Body(default=None),  # noqa: B008
    store: UserStore = Depends(get_user_store),  # noqa: B008
) -> LoginResponse:
    """Authenticate with email and password.

    Unknown email and wrong password produce the same InvalidCredentials
    error so the response does not reveal which one was wrong.
    """
    result = validate(LoginRequest, payload)
    if isinstance(result, Err):
        raise ValidationFailed(result.fields)

    token, user = issue_session(store, result.value.email, result.value.password)
    response.headers["Cache-Control"] = "no-store"
    return LoginResponse(token=token, user=UserResponse.from_user(user))


@router.post("/logout", response_model=SuccessResponse, dependencies=[Depends(get_current_user_id)])
async def logout() -> SuccessResponse:
    return SuccessResponse()
