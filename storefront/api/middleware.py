"""API middleware for the Storefront API.

Provides:
- Request ID correlation and request logging
- Error handling
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

USER_ID_HEADER = "X-User-ID"


# ============================================================================
# Request Context Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for correlation.

    Generates or extracts a request ID and adds it to:
    - Request state for access in handlers
    - Response headers for client correlation
    - Log context for tracing, together with the caller's user id
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with correlation ID.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id

        log_context = {"request_id": request_id}
        user_id = request.headers.get(USER_ID_HEADER)
        if user_id:
            log_context["user_id"] = user_id
        structlog.contextvars.bind_contextvars(**log_context)

        start_time = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars(*log_context)

        response.headers[self.HEADER_NAME] = request_id
        return response


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling.

    Catches exceptions that escaped the exception handlers and returns
    the standard error body.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "details": {},
                    "request_id": getattr(request.state, "request_id", None),
                },
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    # Error handling (inner, wraps the route handlers)
    app.add_middleware(ErrorHandlerMiddleware)

    # Request ID correlation (outermost)
    app.add_middleware(RequestIdMiddleware)
