"""Storefront API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.carts import router as carts_router
from storefront.api.health import router as health_router
from storefront.api.middleware import setup_middleware
from storefront.api.wishlist import router as wishlist_router
from storefront.domain.exceptions import (
    CartCalculationError,
    ConcurrencyConflictError,
    DomainError,
    NotFoundError,
)
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import engine
from storefront.infrastructure.logging import configure_logging

configure_logging(settings.log_level)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    logger.info(
        "Starting Storefront API",
        version=settings.api_version,
        debug=settings.debug,
        currency=settings.currency,
        tax_based_on=settings.tax_based_on.value,
    )

    yield

    # Shutdown
    logger.info("Shutting down Storefront API")
    await engine.dispose()


app = FastAPI(
    title="Storefront API",
    description="Cart engine: merge-on-add carts and wishlists, cart totals",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(carts_router)
app.include_router(wishlist_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict | list | None = None,
) -> JSONResponse:
    """Build the standard error body."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details if details is not None else {},
            "request_id": getattr(request.state, "request_id", None),
        },
    )


def status_for(exc: DomainError) -> int:
    """Map a domain error family onto an HTTP status; validation and other rule errors are 400."""
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ConcurrencyConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, CartCalculationError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Handle domain errors with consistent format."""
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "Domain error",
        path=request.url.path,
        error_code=exc.error_code,
        error=exc.message,
        cause=repr(exc.__cause__) if exc.__cause__ else None,
    )
    return error_response(request, status_code, exc.error_code, exc.message, exc.details)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Handle malformed identifiers and values rejected by value objects."""
    return error_response(request, status.HTTP_400_BAD_REQUEST, "VALIDATION_FAILED", str(exc))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", {})
    else:
        error_code = "ERROR"
        message = str(detail)
        details = {}

    return error_response(request, exc.status_code, error_code, message, details)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )
