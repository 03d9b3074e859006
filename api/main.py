"""
api/main.py -- FastAPI application entry point for the user directory.

Run with:  python main.py
           uvicorn asgi:app --reload --port 3002

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for the frontend origins
  3. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan builds the Database, creates tables, and wires AuthTokens, UserStore
and UserService onto app.state; shutdown disposes the engine.
"""

from __future__ import annotations

import logging
import time
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.users import router as users_router
from auth.tokens import AuthTokens
from core.config import get_settings
from core.errors import ApiError
from db.engine import Database
from users.service import UserService
from users.store import UserStore

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("userdir.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


async def init_state(app: FastAPI, database: Database) -> None:
    """Create tables and attach every per-process collaborator to app.state."""
    settings = get_settings()
    await database.create_all()
    app.state.db = database
    app.state.tokens = AuthTokens(settings.secret_key, settings.token_expire_seconds)
    app.state.user_store = UserStore(database)
    app.state.user_service = UserService(app.state.user_store, app.state.tokens)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Everything before yield runs on startup; everything after on shutdown."""
    settings = get_settings()
    logger.info("User directory API starting up")
    await init_state(app, Database(settings.database_url))
    logger.info("Database initialized (%s)", app.state.db.engine.url.render_as_string(hide_password=True))

    yield

    await app.state.db.close()
    logger.info("User directory API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="User Directory API",
    description="Signup, login and CRUD over the users directory.",
    version=VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Register in the order you want the request to encounter them:
# TrustedHost -> CORS -> SlowAPI.
# ---------------------------------------------------------------------------

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=get_settings().allowed_hosts,
)

# allow_credentials: the frontend sends the Authorization cookie cross-origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "X-Requested-With", "Accept", "Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


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

app.include_router(auth_router, prefix="/v1", tags=["Auth"])
app.include_router(users_router, prefix="/v1", tags=["Users"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope
# {success, status, message, stack} so clients parse errors uniformly.
# ---------------------------------------------------------------------------


def _error_response(status: int, message: str, exc: BaseException | None = None) -> JSONResponse:
    stack = None
    if exc is not None and get_settings().debug:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(status=status, message=message, stack=stack).model_dump(),
    )


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render a core/service/auth error. Deletes a cookie when the error asks for it."""
    response = _error_response(exc.status_code, exc.message, exc)
    if exc.clear_cookie:
        response.delete_cookie(exc.clear_cookie)
    return response


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After when the login rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error_response(429, "Too many requests.")
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with a readable message when the body or path fails validation."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "path", "query"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return _error_response(400, "; ".join(parts) or "Request validation failed.")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Structured error for router-level HTTP errors (unknown route, bad method)."""
    message = str(exc.detail)
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Route Not found"
    return _error_response(exc.status_code, message)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The traceback goes to the log. The response carries it only in DEBUG.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "Something went wrong", exc)


# ---------------------------------------------------------------------------
# Health endpoint
#
# No rate limit and no auth -- load balancers must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and database reachability."""
    db_ok = await request.app.state.db.ping()
    return HealthResponse(
        version=VERSION,
        components={"app": "ok", "database": "ok" if db_ok else "error"},
    )
