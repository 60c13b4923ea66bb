"""
tests/test_web_routes.py -- Integration tests for the /ui form front-end.

Uses web_client (follow_redirects=False) so redirect Location headers and
Set-Cookie deletions can be asserted directly.

Coverage:
  - Auth redirect chain: never logged in -> /ui/login?next=..., rejected
    cookie -> cookie deleted + expired=1
  - Login form: field errors re-render (400), bad credentials redirect,
    success sets the httpOnly cookie
  - User table and create / edit / delete forms, including 409 on duplicate
    email and the blank-password-keeps-current rule on edit
  - Logout clears the cookie
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from auth.tokens import COOKIE_NAME, create_access_token
from directory.store import DEMO_PASSWORD, UserStore


def _set_cookie_headers(resp) -> list[str]:
    return [v for k, v in resp.headers.multi_items() if k.lower() == "set-cookie"]


def _cookie_deleted(resp, name: str) -> bool:
    return any(
        h.startswith(f"{name}=") and ("max-age=0" in h.lower() or "expires=" in h.lower())
        for h in _set_cookie_headers(resp)
    )


class TestAuthRedirectChain:
    def test_unauthenticated_redirects_to_login(self, web_client: tuple[TestClient, str]) -> None:
        client, _ = web_client
        resp = client.get("/ui/users")
        assert resp.status_code == 302
        assert resp.headers["location"] == "/ui/login?next=/ui/users"

    def test_rejected_cookie_is_torn_down(self, web_client: tuple[TestClient, str]) -> None:
        client, _ = web_client
        stale = create_access_token("whoever", issued_at=datetime.now(timezone.utc) - timedelta(hours=2))
        client.cookies.set(COOKIE_NAME, stale)
        resp = client.get("/ui/users")
        assert resp.status_code == 302
        assert "expired=1" in resp.headers["location"]
        assert _cookie_deleted(resp, COOKIE_NAME)

    def test_index_redirects_to_users(self, web_client: tuple[TestClient, str]) -> None:
        client, _ = web_client
        resp = client.get("/ui")
        assert resp.status_code == 302
        assert resp.headers["location"] == "/ui/users"


class TestLoginForm:
    def test_form_prefilled_with_demo_account(self, web_client: tuple[TestClient, str]) -> None:
        client, _ = web_client
        resp = client.get("/ui/login")
        assert resp.status_code == 200
        assert 'value="demo@example.com"' in resp.text

    def test_expired_notice(self, web_client: tuple[TestClient, str]) -> None:
        client, _ = web_client
        resp = client.get("/ui/login?expired=1")
        assert "session has expired" in resp.text

    def test_unknown_error_code_not_reflected(self, web_client: tuple[TestClient, str]) -> None:
        client, _ = web_client
        resp = client.get("/ui/login?error=<script>alert(1)</script>")
        assert resp.status_code == 200
        assert "<script>alert(1)</script>" not in resp.text

    def test_successful_login_sets_cookie(self, web_client: tuple[TestClient, str]) -> None:
        client, _ = web_client
        resp = client.post("/ui/login", data={"email": "demo@example.com", "password": DEMO_PASSWORD})
        assert resp.status_code == 302
        assert resp.headers["location"] == "/ui/users"
        cookies = _set_cookie_headers(resp)
        assert any(h.startswith(f"{COOKIE_NAME}=") and "httponly" in h.lower() for h in cookies)

    def test_login_honours_safe_next(self, web_client: tuple[TestClient, str]) -> None:
        client, _ = web_client
        resp = client.post(
            "/ui/login?next=//evil.example.com",
            data={"email": "demo@example.com", "password": DEMO_PASSWORD},
        )
        assert resp.headers["location"] == "/ui/users"

    def test_bad_credentials_redirect(self, web_client: tuple[TestClient, str]) -> None:
        client, _ = web_client
        resp = client.post("/ui/login", data={"email": "demo@example.com", "password": "wrong"})
        assert resp.status_code == 302
        assert resp.headers["location"] == "/ui/login?error=bad_credentials"

    def test_field_errors_rerender(self, web_client: tuple[TestClient, str]) -> None:
        client, _ = web_client
        resp = client.post("/ui/login", data={"email": "nope", "password": ""})
        assert resp.status_code == 400
        assert "Valid email is required" in resp.text
        assert "Password is required" in resp.text

    def test_logged_in_user_skips_login_form(self, web_client: tuple[TestClient, str]) -> None:
        client, token = web_client
        client.cookies.set(COOKIE_NAME, token)
        resp = client.get("/ui/login")
        assert resp.status_code == 302
        assert resp.headers["location"] == "/ui/users"


class TestUserForms:
    def test_table_lists_seed(self, web_client: tuple[TestClient, str]) -> None:
        client, token = web_client
        client.cookies.set(COOKIE_NAME, token)
        resp = client.get("/ui/users")
        assert resp.status_code == 200
        assert "Demo Admin" in resp.text
        assert "user7@example.com" in resp.text
        assert "Create User" in resp.text

    def test_create(self, web_client: tuple[TestClient, str], store: UserStore) -> None:
        client, token = web_client
        client.cookies.set(COOKIE_NAME, token)
        form = {"name": "Ann Lee", "email": "ANN@X.COM", "role": "viewer", "password": "secret1"}
        resp = client.post("/ui/users", data=form)
        assert resp.status_code == 303
        assert resp.headers["location"] == "/ui/users"
        created = store.get_by_email("ann@x.com")
        assert created is not None
        assert created.role == "viewer"

    def test_create_duplicate_shows_email_error(self, web_client: tuple[TestClient, str]) -> None:
        client, token = web_client
        client.cookies.set(COOKIE_NAME, token)
        form = {"name": "Dup", "email": "user1@example.com", "role": "user", "password": "secret1"}
        resp = client.post("/ui/users", data=form)
        assert resp.status_code == 409
        assert "Email already exists" in resp.text
        assert 'value="Dup"' in resp.text

    def test_create_validation_errors(self, web_client: tuple[TestClient, str], store: UserStore) -> None:
        client, token = web_client
        client.cookies.set(COOKIE_NAME, token)
        resp = client.post("/ui/users", data={"name": "A", "email": "x", "role": "user", "password": "1"})
        assert resp.status_code == 400
        assert "Name must be at least 2 characters" in resp.text
        assert len(store) == 8

    def test_edit_form_prefilled(self, web_client: tuple[TestClient, str], store: UserStore) -> None:
        client, token = web_client
        client.cookies.set(COOKIE_NAME, token)
        target = store.get_by_email("user1@example.com")
        resp = client.get(f"/ui/users?edit={target.id}")
        assert resp.status_code == 200
        assert "Edit User" in resp.text
        assert 'value="user1@example.com"' in resp.text

    def test_edit_blank_password_keeps_current(self, web_client: tuple[TestClient, str], store: UserStore) -> None:
        client, token = web_client
        client.cookies.set(COOKIE_NAME, token)
        target = store.get_by_email("user1@example.com")
        form = {"name": "User One", "email": "user1@example.com", "role": "admin", "password": ""}
        resp = client.post(f"/ui/users/{target.id}", data=form)
        assert resp.status_code == 303
        after = store.get_user(target.id)
        assert after.name == "User One"
        assert after.role == "admin"
        assert after.password == DEMO_PASSWORD

    def test_edit_email_conflict(self, web_client: tuple[TestClient, str], store: UserStore) -> None:
        client, token = web_client
        client.cookies.set(COOKIE_NAME, token)
        target = store.get_by_email("user1@example.com")
        form = {"name": "User 1", "email": "user2@example.com", "role": "user", "password": ""}
        resp = client.post(f"/ui/users/{target.id}", data=form)
        assert resp.status_code == 409
        assert store.get_user(target.id).email == "user1@example.com"

    def test_edit_unknown_user(self, web_client: tuple[TestClient, str]) -> None:
        client, token = web_client
        client.cookies.set(COOKIE_NAME, token)
        form = {"name": "Ghost", "email": "ghost@example.com", "role": "user", "password": ""}
        assert client.post("/ui/users/missing", data=form).status_code == 404

    def test_delete(self, web_client: tuple[TestClient, str], store: UserStore) -> None:
        client, token = web_client
        client.cookies.set(COOKIE_NAME, token)
        target = store.get_by_email("user3@example.com")
        resp = client.post(f"/ui/users/{target.id}/delete")
        assert resp.status_code == 303
        assert store.get_by_email("user3@example.com") is None
        assert client.post(f"/ui/users/{target.id}/delete").status_code == 404

    def test_mutation_requires_auth(self, web_client: tuple[TestClient, str], store: UserStore) -> None:
        client, _ = web_client
        target = store.get_by_email("user3@example.com")
        resp = client.post(f"/ui/users/{target.id}/delete")
        assert resp.status_code == 302
        assert store.get_by_email("user3@example.com") is not None


def test_logout_clears_cookie(web_client: tuple[TestClient, str]) -> None:
    client, token = web_client
    client.cookies.set(COOKIE_NAME, token)
    resp = client.post("/ui/logout")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/ui/login"
    assert _cookie_deleted(resp, COOKIE_NAME)
