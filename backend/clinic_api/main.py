"""
Clinic Tracker Backend — FastAPI Application Factory
=====================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn clinic_api.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                        FastAPI App                           │
    │                                                              │
    │  Middleware:  Request ID → Access Log → Auth Rate Limit      │
    │               → GZip → CORS                                  │
    │                                                              │
    │  Routers:     /api/users   /api/emr   /api/auth              │
    │               /api/{breakfast,lunch,dinner,snack}            │
    │               /api/exercise   /api/weight   /api/daily-review│
    │               /api/archive   /api/diagnosis   /health        │
    │                                                              │
    │  Errors:      ClinicError subclasses → JSON envelope         │
    │               {error, message, details, request_id}          │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, report missing production settings
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clinic_api import __version__
from clinic_api.config import settings
from clinic_api.database import dispose_engine
from clinic_api.exceptions import (
    ClinicError,
    DatabaseError,
    ForbiddenError,
    MailDeliveryError,
    NotFoundError,
    RateLimitExceededError,
    ValidationError,
)
from clinic_api.middleware.logging import RequestLoggingMiddleware
from clinic_api.middleware.rate_limit import RateLimitMiddleware
from clinic_api.middleware.request_id import RequestIDMiddleware, request_id_var
from clinic_api.routes import archive, auth, daily_review, diagnosis, emr, health, users
from clinic_api.routes.records import record_routers

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configures the root logger from LOG_LEVEL.

    Format: 2024-01-15T12:00:00 [INFO] clinic_api.services.archive_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Clinic Tracker Backend %s starting up...", __version__)

    # Missing mail credentials only disable code delivery; keep serving
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    logger.info("Steatosis formula: %s (fibrosis score %s)",
                settings.steatosis_formula,
                "on" if settings.include_fibrosis_score else "off")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Clinic Tracker Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """The shared error envelope."""
    content: Dict[str, Any] = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps exception types to HTTP responses.

        ValidationError / RequestValidationError  → 400
        ForbiddenError                            → 403
        NotFoundError                             → 404
        RateLimitExceededError                    → 429
        DatabaseError / MailDeliveryError         → 500 (generic message)
        ClinicError / Exception                   → 500 (generic message)

    Context is returned to the client for 4xx only; 5xx context is logged.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return error_response(
            400,
            "validation_error",
            "The request is missing required fields or contains invalid values",
            {"errors": errors},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        logger.warning("[%s] Forbidden: %s", request_id_var.get(""), exc.message)
        return error_response(403, "forbidden", exc.message, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message, exc.context)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return error_response(
            429,
            "rate_limit_exceeded",
            exc.message,
            exc.context,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(MailDeliveryError)
    async def handle_mail_error(request: Request, exc: MailDeliveryError):
        logger.error(
            "[%s] Mail delivery error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return error_response(500, "mail_delivery_error", exc.message)

    @app.exception_handler(ClinicError)
    async def handle_clinic_error(request: Request, exc: ClinicError):
        logger.error("[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return error_response(500, "server_error", exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown routes (404) and wrong methods (405)
        return error_response(
            exc.status_code, "http_error", str(exc.detail), headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True
        )
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Clinic Tracker API",
        description=(
            "Patient accounts, EMR records, daily meal/exercise/weight logs, "
            "daily reviews and archives, email code verification and liver "
            "index calculation."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → RateLimit → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(emr.router)
    for router in record_routers:
        app.include_router(router)
    app.include_router(daily_review.router)
    app.include_router(archive.router)
    app.include_router(auth.router)
    app.include_router(diagnosis.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "clinic_api.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
