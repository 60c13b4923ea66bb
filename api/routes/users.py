"""
api/routes/users.py -- User directory CRUD endpoints.

Routes:
  GET    /api/users       -- all users, newest first
  GET    /api/users/{id}  -- one user
  POST   /api/users       -- create; 201
  PUT    /api/users/{id}  -- partial update
  DELETE /api/users/{id}  -- remove; echoes the deleted record

Every route requires a valid token (router-level dependency). Request bodies
are taken as raw dicts and run through directory.validation.validate(), so
schema failures surface as ValidationFailed (400) with a field map rather
than FastAPI's default 422.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends

from api.models import DeleteResponse, UserResponse
from auth.dependencies import get_current_user_id, get_user_store
from core.errors import ValidationFailed
from directory.store import UserStore
from directory.validation import Err, UserCreate, UserUpdate, validate

router = APIRouter(prefix="/users", dependencies=[Depends(get_current_user_id)])


@router.get("", response_model=list[UserResponse])
async def list_users(store: UserStore = Depends(get_user_store)) -> list[UserResponse]:  # noqa: B008
    return [UserResponse.from_user(u) for u in store.list_users()]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, store: UserStore = Depends(get_user_store)) -> UserResponse:  # noqa: B008
    return UserResponse.from_user(store.get_user(user_id))


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    payload: Optional[dict[str, Any]] = Body(default=None),  # noqa: B008
    store: UserStore = Depends(get_user_store),  # noqa: B008
) -> UserResponse:
    """Create a user. role defaults to "user"; email is stored lower-cased."""
    result = validate(UserCreate, payload)
    if isinstance(result, Err):
        raise ValidationFailed(result.fields)
    return UserResponse.from_user(store.create_user(result.value))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    payload: Optional[dict[str, Any]] = Body(default=None),  # noqa: B008
    store: UserStore = Depends(get_user_store),  # noqa: B008
) -> UserResponse:
    """Apply a partial update. Unknown ids fail with 404 before the body is validated."""
    store.get_user(user_id)
    result = validate(UserUpdate, payload)
    if isinstance(result, Err):
        raise ValidationFailed(result.fields)
    return UserResponse.from_user(store.update_user(user_id, result.value))


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(user_id: str, store: UserStore = Depends(get_user_store)) -> DeleteResponse:  # noqa: B008
    deleted = store.delete_user(user_id)
    return DeleteResponse(user=UserResponse.from_user(deleted))
