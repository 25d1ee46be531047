"""ORGanizer Backend - Main FastAPI Application

Multi-tenant business administration: passwordless login, organizations
and members, payroll profiles, and secure access notes.

This module creates and configures the main FastAPI application, including:
- All API routers (auth, orgs, members, payroll, secure access, ...)
- Middleware (request ID correlation, tenant context, CORS)
- Exception handlers
- Health and observability endpoints
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .config import get_settings

# Observability
from .observability.logging_config import configure_logging, get_logger
from .observability.middleware import RequestIDMiddleware
from .observability.router import router as observability_router

# Authentication
from .auth.router import router as auth_router

# Tenancy
from .tenancy.middleware import TenantContextMiddleware
from .tenancy.router import router as tenancy_router

# Domain Routers
from .members.router import invites_router, router as members_router
from .payroll.router import router as payroll_router
from .secure_access.router import router as secure_access_router
from .dashboard.router import router as dashboard_router
from .audit.router import router as audit_router

# Background tasks are dispatched through this app
from .workers.celery_app import celery_app  # noqa: F401

settings = get_settings()

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown."""
    logger.info("ORGanizer API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    yield

    logger.info("ORGanizer API shutting down...")


# Create FastAPI application
app = FastAPI(
    title="ORGanizer API",
    description="Multi-tenant business administration: organizations, payroll and secure access notes",
    version=__version__,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json",
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

# Tenant Context Middleware (org_id cookie -> request.state for logging)
app.add_middleware(TenantContextMiddleware)

# CORS Middleware (credentials allowed: the session travels in a cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# Request ID Middleware (added last so it wraps everything else)
app.add_middleware(RequestIDMiddleware)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with field-level details."""
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"errors": exc.errors()}
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": jsonable_errors(exc),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database errors.

    Logs the full error but returns a generic message to prevent
    information leakage.
    """
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "database_error",
            "message": "A database error occurred. Please try again later.",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle uncaught exceptions without exposing details to the client."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors with non-JSON values (e.g. exceptions in ctx) stringified."""
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

# Observability (health, metrics)
app.include_router(observability_router)

# Authentication
app.include_router(auth_router, prefix="/api/v1")

# Organizations & Members
app.include_router(tenancy_router, prefix="/api/v1")
app.include_router(members_router, prefix="/api/v1")
app.include_router(invites_router, prefix="/api/v1")

# Business modules
app.include_router(dashboard_router, prefix="/api/v1")
app.include_router(payroll_router, prefix="/api/v1")
app.include_router(secure_access_router, prefix="/api/v1")

# Audit
app.include_router(audit_router, prefix="/api/v1")


# =============================================================================
# ROOT ENDPOINTS
# =============================================================================

@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    """Root endpoint - API information."""
    return {
        "name": "ORGanizer API",
        "version": __version__,
        "status": "running",
        "docs": None if settings.is_production else "/docs",
    }


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "organizer.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
