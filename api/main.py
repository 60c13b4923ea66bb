"""
api/main.py -- FastAPI application entry point for UserDirectory.

Run with:      python main.py
               uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware     -- adds CORS headers for configured browser origins
  2. log_requests       -- one log line per request with latency

Lifespan creates and seeds the UserStore on startup. The store lives on
app.state and is injected into handlers with Depends(get_user_store); it is
discarded at shutdown, so every process start begins from the same seed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse, StatusResponse
from api.routes.auth import router as auth_router
from api.routes.users import router as users_router
from core.config import get_settings
from core.errors import DirectoryError, ValidationFailed
from directory.store import UserStore
from directory.validation import field_errors

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("userdir.api")

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the seeded store before the first request; drop it at shutdown."""
    logger.info("UserDirectory API starting up")
    app.state.user_store = UserStore()
    app.state.user_store.seed()

    yield

    app.state.user_store = None
    logger.info("UserDirectory API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="UserDirectory API",
    description="Authenticated CRUD over an in-memory user directory.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(users_router, prefix="/api", tags=["Users"])
# Web UI router is mounted by asgi.py, not here.


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, details: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, details=details)).model_dump(),
    )


@app.exception_handler(DirectoryError)
async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
    """Map the domain error taxonomy (core/errors.py) onto HTTP."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    response = _error_response(exc.status_code, exc.code, exc.message, exc.details)
    if headers:
        response.headers.update(headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with a field map when the body is not a JSON object."""
    return _error_response(
        400,
        "validation_failed",
        "Validation failed",
        field_errors(list(exc.errors()), skip_prefix="body"),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (unknown route, wrong method) in the envelope.

    FastAPI reports an unreadable request body (bad encoding, broken form
    data) as a bare 400; that is a body validation failure like any other.
    """
    if exc.status_code == 400:
        return await directory_error_handler(request, ValidationFailed({"root": str(exc.detail)}))
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected server errors. Internals are logged, never returned."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Status endpoint
# ---------------------------------------------------------------------------


@app.get("/", tags=["Health"])
async def root() -> StatusResponse:
    """Liveness check."""
    return StatusResponse(message="CRUD API demo server running")
