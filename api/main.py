"""
api/main.py -- FastAPI application factory for Stockroom.

create_app(settings) builds a fully wired application from an explicit
Settings object. Nothing in this module reads the environment: asgi.py
calls get_settings() once and passes the result in; tests pass their own.

Run with:      uvicorn asgi:app --reload
               python main.py serve
               make run

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. SlowAPIMiddleware     -- hosts api.limiter; per-route limits run in the
                              @limiter.limit wrappers on each route

Lifespan handles startup (engine, stores, services) and shutdown (engine
disposal) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse, ReadyResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.items import router as items_router
from auth.hashing import BcryptHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import JWTTokenIssuer
from core.config import Settings
from core.database import make_engine
from core.errors import InventoryError
from inventory.service import InventoryService
from inventory.store import ItemStore

API_VERSION = "1.0.0"

logger = logging.getLogger("stockroom.api")


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once per process.

    basicConfig is a no-op if handlers already exist (e.g. under pytest's
    log capture), so calling this from every create_app() is safe.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


def _make_lifespan(settings: Settings):
    """Return a lifespan context manager bound to settings.

    Startup order matters:
      1. Engine first -- both stores share it.
      2. Stores second -- constructing them creates any missing tables.
      3. Services last -- they only hold references to stores and settings values.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Stockroom API starting up")
        engine = make_engine(settings.database_url)
        app.state.engine = engine
        app.state.user_store = UserStore(engine)
        app.state.item_store = ItemStore(engine)
        app.state.auth_service = AuthService(
            store=app.state.user_store,
            hasher=BcryptHasher(rounds=settings.bcrypt_rounds),
            tokens=JWTTokenIssuer(settings.secret_key),
            token_duration=timedelta(seconds=settings.token_expire_seconds),
        )
        app.state.inventory_service = InventoryService(app.state.item_store)
        logger.info("Database initialized (%s)", engine.url.render_as_string(hide_password=True))

        yield

        engine.dispose()
        logger.info("Stockroom API shutdown complete")

    return lifespan


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings) -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Stockroom API",
        description="Inventory management with JWT authentication.",
        version=API_VERSION,
        lifespan=_make_lifespan(settings),
    )
    app.state.settings = settings

    # Register in the order you want the request to encounter them:
    # TrustedHost -> CORS -> SlowAPI.
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=3600,
    )
    app.add_middleware(SlowAPIMiddleware)

    # SlowAPI looks for app.state.limiter by convention. The limiter is a
    # process-wide singleton (see api/limiter.py), so this switch applies to
    # every app in the process, not just this one.
    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter

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

    app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
    app.include_router(items_router, prefix="/api/v1", tags=["Inventory"])

    _register_exception_handlers(app)
    _register_probes(app)
    return app


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InventoryError)
    async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
        """Translate a business-layer error into its HTTP status and envelope."""
        response = _error_response(exc.status_code, exc.code, exc.message)
        if exc.status_code == 401:
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        """Return 429 with a structured error when a rate limit is exceeded.

        Plain def: SlowAPIMiddleware calls this handler synchronously.
        """
        retry_after = int(getattr(exc, "retry_after", 60))
        response = _error_response(429, "rate_limited", "Too many requests.", str(exc))
        response.headers["Retry-After"] = str(retry_after)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Return 422 with structured error when request body or path params fail validation."""
        return _error_response(422, "validation_error", "Request validation failed.", str(exc.errors()))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Return a structured error for FastAPI/Starlette HTTP exceptions (404 routes, 405, ...)."""
        if isinstance(exc.detail, dict):
            return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
        return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected server errors, including lost database connectivity.

        The traceback goes to the log only. The client receives a generic message.
        """
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Probes
#
# Defined on the app (not a router) so they are always reachable regardless
# of router registration state. No rate limit -- load balancers must not be
# throttled.
# ---------------------------------------------------------------------------


def _register_probes(app: FastAPI) -> None:
    @app.get("/health", tags=["Health"])
    async def health() -> HealthResponse:
        """Liveness: the process is up and serving requests."""
        return HealthResponse(version=API_VERSION)

    @app.get("/ready", tags=["Health"], response_model=ReadyResponse)
    def ready(request: Request):
        """Readiness: the database answers a ping."""
        if not request.app.state.user_store.ping():
            return _error_response(503, "not_ready", "Database is not ready")
        return ReadyResponse(status="ok", database="connected")
