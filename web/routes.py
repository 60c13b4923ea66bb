"""
web/routes.py -- Jinja2 template routes for the UserDirectory web UI.

These routes serve server-rendered HTML forms over the same UserStore the
API uses. Authentication rides on the httpOnly "access_token" cookie that
POST /ui/login sets; verification is the same stateless JWT check.

Routes:
  GET  /ui                          -- redirect to /ui/users
  GET  /ui/login                    -- login form
  POST /ui/login                    -- handle login, set cookie
  POST /ui/logout                   -- clear cookie, redirect /ui/login
  GET  /ui/users                    -- user table + create form (?edit=<id> for edit form)
  POST /ui/users                    -- create, 303 to /ui/users
  POST /ui/users/{user_id}          -- update, 303 to /ui/users
  POST /ui/users/{user_id}/delete   -- delete, 303 to /ui/users

Session teardown: a request that carries a cookie the server rejects
(expired or foreign-signed) gets the cookie deleted and is sent back to the
login form with expired=1.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from auth.dependencies import get_user_store, try_get_current_user_id
from auth.tokens import COOKIE_NAME, issue_session, set_auth_cookie
from core.errors import Conflict, InvalidCredentials, NotFound
from directory.models import ROLES, User
from directory.store import DEMO_EMAIL, DEMO_PASSWORD
from directory.validation import Err, LoginRequest, UserCreate, UserUpdate, validate

logger = logging.getLogger("userdir.web")


def _current_user(request: Request) -> Optional[User]:
    """Return the signed-in User, or None. Exposed to templates for the navbar."""
    user_id = try_get_current_user_id(request)
    if user_id is None:
        return None
    try:
        return get_user_store(request).get_user(user_id)
    except NotFound:
        return None


templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.globals["current_user"] = _current_user
router = APIRouter(prefix="/ui")

# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------

# Whitelist for ?error= on /ui/login. The raw query value never reaches
# the template.
_ERROR_MESSAGES: dict[str, str] = {
    "bad_credentials": "Invalid email or password.",
}

_EMPTY_FORM: dict[str, str] = {"name": "", "email": "", "role": "user", "password": ""}


def _safe_next(next_url: Optional[str]) -> str:
    """Accept only server-local relative paths as a post-login target."""
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return "/ui/users"


def _require_auth(request: Request) -> Optional[RedirectResponse]:
    """Return a redirect to the login form if the request is not authenticated.

    Call at the top of protected route handlers:
        if redirect := _require_auth(request):
            return redirect
    """
    if try_get_current_user_id(request) is not None:
        return None
    path = request.url.path
    if request.cookies.get(COOKIE_NAME):
        resp = RedirectResponse(f"/ui/login?next={path}&expired=1", status_code=302)
        resp.delete_cookie(COOKIE_NAME)
        return resp
    return RedirectResponse(f"/ui/login?next={path}", status_code=302)


def _render_users(
    request: Request,
    editing: Optional[User] = None,
    form_data: Optional[dict] = None,
    field_errors: Optional[dict] = None,
    status_code: int = 200,
) -> HTMLResponse:
    if form_data is None:
        if editing is not None:
            form_data = {"name": editing.name, "email": editing.email, "role": editing.role, "password": ""}
        else:
            form_data = dict(_EMPTY_FORM)
    return templates.TemplateResponse(
        request,
        "users.html",
        {
            "users": get_user_store(request).list_users(),
            "editing": editing,
            "form_data": form_data,
            "field_errors": field_errors or {},
            "roles": ROLES,
        },
        status_code=status_code,
    )


def _not_found() -> HTMLResponse:
    return HTMLResponse("<h1>User not found</h1>", status_code=404)


# ---------------------------------------------------------------------------
# Login / logout
# ---------------------------------------------------------------------------


@router.get("", response_class=HTMLResponse)
def index(request: Request) -> RedirectResponse:
    return RedirectResponse("/ui/users", status_code=302)


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request) -> HTMLResponse:
    """Render the login form, prefilled with the demo credentials."""
    if try_get_current_user_id(request) is not None:
        return RedirectResponse("/ui/users", status_code=302)
    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "error_msg": _ERROR_MESSAGES.get(request.query_params.get("error", "")),
            "expired": request.query_params.get("expired") == "1",
            "form_data": {"email": DEMO_EMAIL, "password": DEMO_PASSWORD},
            "field_errors": {},
        },
    )


@router.post("/login", response_class=HTMLResponse)
async def login_post(
    request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
) -> HTMLResponse:
    """Handle the login form. Field errors re-render; bad credentials redirect."""
    result = validate(LoginRequest, {"email": email, "password": password})
    if isinstance(result, Err):
        return templates.TemplateResponse(
            request,
            "login.html",
            {
                "error_msg": None,
                "expired": False,
                "form_data": {"email": email, "password": ""},
                "field_errors": result.fields,
            },
            status_code=400,
        )

    try:
        token, _user = issue_session(get_user_store(request), result.value.email, result.value.password)
    except InvalidCredentials:
        return RedirectResponse("/ui/login?error=bad_credentials", status_code=302)

    resp = RedirectResponse(_safe_next(request.query_params.get("next")), status_code=302)
    set_auth_cookie(resp, token)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/logout")
def logout(request: Request) -> RedirectResponse:
    """Discard the token cookie. Nothing is revoked server-side."""
    resp = RedirectResponse("/ui/login", status_code=302)
    resp.delete_cookie(COOKIE_NAME)
    return resp


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@router.get("/users", response_class=HTMLResponse)
def users_page(request: Request, edit: Optional[str] = None) -> HTMLResponse:
    """User table with the create form, or the edit form when ?edit=<id>."""
    if redirect := _require_auth(request):
        return redirect
    editing = None
    if edit:
        try:
            editing = get_user_store(request).get_user(edit)
        except NotFound:
            editing = None
    return _render_users(request, editing=editing)


@router.post("/users", response_class=HTMLResponse)
async def user_create(
    request: Request,
    name: str = Form(default=""),
    email: str = Form(default=""),
    role: str = Form(default="user"),
    password: str = Form(default=""),
) -> HTMLResponse:
    if redirect := _require_auth(request):
        return redirect
    form_data = {"name": name, "email": email, "role": role, "password": ""}

    result = validate(UserCreate, {"name": name, "email": email, "role": role, "password": password})
    if isinstance(result, Err):
        return _render_users(request, form_data=form_data, field_errors=result.fields, status_code=400)

    try:
        get_user_store(request).create_user(result.value)
    except Conflict as exc:
        return _render_users(request, form_data=form_data, field_errors={"email": exc.message}, status_code=409)

    return RedirectResponse("/ui/users", status_code=303)


@router.post("/users/{user_id}", response_class=HTMLResponse)
async def user_update(
    request: Request,
    user_id: str,
    name: str = Form(default=""),
    email: str = Form(default=""),
    role: str = Form(default=""),
    password: str = Form(default=""),
) -> HTMLResponse:
    """Handle the edit form. A blank password keeps the current one."""
    if redirect := _require_auth(request):
        return redirect
    store = get_user_store(request)
    try:
        editing = store.get_user(user_id)
    except NotFound:
        return _not_found()
    form_data = {"name": name, "email": email, "role": role, "password": ""}

    result = validate(UserUpdate, {"name": name, "email": email, "role": role, "password": password})
    if isinstance(result, Err):
        return _render_users(
            request, editing=editing, form_data=form_data, field_errors=result.fields, status_code=400
        )

    try:
        store.update_user(user_id, result.value)
    except Conflict as exc:
        return _render_users(
            request, editing=editing, form_data=form_data, field_errors={"email": exc.message}, status_code=409
        )

    return RedirectResponse("/ui/users", status_code=303)


@router.post("/users/{user_id}/delete", response_class=HTMLResponse)
async def user_delete(request: Request, user_id: str) -> HTMLResponse:
    if redirect := _require_auth(request):
        return redirect
    try:
        get_user_store(request).delete_user(user_id)
    except NotFound:
        return _not_found()
    return RedirectResponse("/ui/users", status_code=303)
