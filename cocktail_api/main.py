"""
Cocktail Catalog Backend: FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() validates configuration, builds the services onto
       app.state, registers middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn cocktail_api.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware: RateLimit → RequestID → AccessLog → GZip    │
    │              → CORS                                      │
    │                                                          │
    │  Routes:  /auth  /user  /spirit  /cocktail  /comment     │
    │           /images  /health                               │
    │                                                          │
    │  app.state: credential_codec, token_service,             │
    │             image_service, cocktail_service,             │
    │             user_service, spirit_service, comment_service│
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → storage directories → store ping (tenacity retries;
              an unreachable store is logged, the process keeps serving)
    Shutdown: dispose the engine's pooled connections
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from cocktail_api import __version__
from cocktail_api.config import Settings, settings
from cocktail_api.database import dispose_engine, wait_for_database
from cocktail_api.exceptions import (
    AuthError,
    CocktailCatalogError,
    ConflictError,
    NotFoundError,
    RateLimitExceededError,
    StorageError,
    UpstreamDependencyError,
    ValidationError,
)
from cocktail_api.middleware.logging import RequestLoggingMiddleware
from cocktail_api.middleware.rate_limit import RateLimitMiddleware
from cocktail_api.middleware.request_id import RequestIDMiddleware, request_id_var
from cocktail_api.routes import auth, cocktails, comments, health, images, spirits, users
from cocktail_api.services.cocktail_service import CocktailService
from cocktail_api.services.comment_service import CommentService
from cocktail_api.services.credentials import CredentialCodec
from cocktail_api.services.image_service import ImageService
from cocktail_api.services.spirit_service import SpiritService
from cocktail_api.services.tokens import TokenService
from cocktail_api.services.user_service import UserService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] cocktail_api.access: GET /cocktail 200 ...
    Called once by create_app(), before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-statement / per-request chatter from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings
    logger.info("=" * 60)
    logger.info("Cocktail Catalog API %s starting up...", __version__)

    storage = Path(config.storage_root)
    (storage / config.processed_dir).mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())

    try:
        await wait_for_database()
    except (OperationalError, InterfaceError, OSError) as e:
        # Each request touching the store will report it; health shows 503
        error = UpstreamDependencyError(context={"error_type": type(e).__name__})
        logger.error("Database unreachable at startup: %s (%s)", error.message, str(e))

    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Cocktail Catalog API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to JSON error responses.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        AuthError                                → 401 or 403
        NotFoundError                            → 404
        ConflictError                            → 409
        RateLimitExceededError                   → 429
        StorageError (files, database, digests)  → 500, generic message
        UpstreamDependencyError                  → 500
        CocktailCatalogError / Exception         → 500

    Only 400-class responses carry details; 500-class context is logged.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return _error_response(400, "validation_error", "Request validation failed.", {"errors": errors})

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        logger.info("[%s] Auth rejected (%d): %s", request_id_var.get(""), exc.status_code, exc.context)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        error = "unauthenticated" if exc.status_code == 401 else "forbidden"
        return _error_response(exc.status_code, error, exc.message, headers=headers)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.info("[%s] Conflict: %s", request_id_var.get(""), exc.message)
        details = {"field": exc.field} if exc.field else None
        return _error_response(409, "conflict", exc.message, details)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _error_response(
            429, "rate_limit_exceeded", exc.message, exc.context,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""), type(exc).__name__, exc.message, exc.context,
        )
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(UpstreamDependencyError)
    async def handle_upstream_error(request: Request, exc: UpstreamDependencyError):
        logger.error("[%s] Store unavailable | Context: %s", request_id_var.get(""), exc.context)
        return _error_response(500, "service_unavailable", exc.message)

    @app.exception_handler(CocktailCatalogError)
    async def handle_app_error(request: Request, exc: CocktailCatalogError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def build_services(app: FastAPI, config: Settings) -> None:
    """Construct every service once and attach it to app.state."""
    codec = CredentialCodec()
    tokens = TokenService(
        config.access_token_secret,
        expire_minutes=config.access_token_expire_minutes,
        algorithm=config.jwt_algorithm,
    )
    image_service = ImageService(
        config.storage_root,
        processed_dir=config.processed_dir,
        max_upload_size=config.max_upload_size,
        max_image_pixels=config.max_image_pixels,
    )

    app.state.settings = config
    app.state.credential_codec = codec
    app.state.token_service = tokens
    app.state.image_service = image_service
    app.state.cocktail_service = CocktailService(
        image_service,
        icon_size=(config.icon_width, config.icon_height),
        header_size=(config.header_width, config.header_height),
    )
    app.state.user_service = UserService(codec, tokens, admin_level=config.admin_access_level)
    app.state.spirit_service = SpiritService()
    app.state.comment_service = CommentService(max_length=config.comment_max_length)


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Raises:
        ConfigurationError: DATABASE_URL or ACCESS_TOKEN_SECRET is missing.
    """
    config = config or settings
    setup_logging(config.log_level)
    config.validate_required()

    app = FastAPI(
        title="Cocktail Catalog API",
        description=(
            "Cocktail recipes grouped by spirit, with user accounts, comments "
            "and processed cocktail artwork."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    build_services(app, config)

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=config.rate_limit_requests,
        window_seconds=config.rate_limit_window,
    )

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(spirits.router)
    app.include_router(cocktails.router)
    app.include_router(comments.router)
    app.include_router(images.router)
    app.include_router(health.router)

    return app


# uvicorn cocktail_api.main:app
app = create_app()
