"""API middleware for the variant listing service.

Every request passes three layers, outermost first:
- Request ID correlation, bound into the structlog context
- Bearer API key authentication for everything but health and docs
- A last-resort handler turning unexpected exceptions into the error envelope

Domain errors never reach the last layer; the exception handlers in
``variant_listing.main`` map them to 404 and 422 responses.
"""

import hmac
import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from variant_listing.api.schemas import ErrorResponse
from variant_listing.infrastructure.config import settings

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Exact paths served without an API key
PUBLIC_PATHS = frozenset({"/health", "/ready", "/openapi.json"})

# Path prefixes of the interactive documentation
PUBLIC_PREFIXES = ("/docs", "/redoc")


def error_response(
    status_code: int,
    error_code: str,
    message: str,
    request_id: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the standard error envelope.

    Args:
        status_code: HTTP status code.
        error_code: Machine-readable error code.
        message: Human-readable message.
        request_id: Correlation ID of the failing request, if known.
        headers: Extra response headers.

    Returns:
        JSON response with an ``ErrorResponse`` body.
    """
    body = ErrorResponse(error_code=error_code, message=message, request_id=request_id)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        headers=headers,
    )


def is_public_path(path: str) -> bool:
    """Check whether a path is served without authentication.

    Args:
        path: Request path, trailing slash ignored.

    Returns:
        True for health checks and API documentation.
    """
    path = path.rstrip("/") or "/"
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Correlate log lines and responses of one request.

    The ID is taken from the ``X-Request-ID`` header or generated. It is
    stored on ``request.state`` for the error envelope, bound into the
    structlog context for every event logged while the request runs and
    echoed in the response header.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Run the request inside its correlation context.

        Args:
            request: Incoming request.
            call_next: Next middleware or route handler.

        Returns:
            Response carrying the request ID header.
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        logger.info(
            "Request completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# ============================================================================
# API Key Authentication Middleware
# ============================================================================


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Require ``Authorization: Bearer <api_key>`` on protected paths.

    The key is compared in constant time against ``settings.api_key``.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Reject requests without a valid API key.

        Args:
            request: Incoming request.
            call_next: Next middleware or route handler.

        Returns:
            The handler's response, or 401 with the error envelope.
        """
        path = request.url.path
        if is_public_path(path):
            return await call_next(request)

        scheme, _, api_key = request.headers.get("Authorization", "").partition(" ")
        if not scheme:
            return self._reject(request, "UNAUTHORIZED", "Missing Authorization header")
        if scheme.lower() != "bearer" or not api_key:
            return self._reject(
                request,
                "UNAUTHORIZED",
                "Invalid Authorization header format. Use 'Bearer <api_key>'",
            )
        if not hmac.compare_digest(api_key.encode(), settings.api_key.encode()):
            return self._reject(request, "INVALID_API_KEY", "Invalid API key")

        return await call_next(request)

    @staticmethod
    def _reject(request: Request, error_code: str, message: str) -> JSONResponse:
        logger.warning(
            "Request rejected",
            error_code=error_code,
            path=request.url.path,
            method=request.method,
        )
        return error_response(
            status.HTTP_401_UNAUTHORIZED,
            error_code,
            message,
            request_id=getattr(request.state, "request_id", None),
            headers={"WWW-Authenticate": "Bearer"},
        )


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn unexpected exceptions into a 500 error envelope.

    Collaborator failures (a broken row source, for example) end up here.
    The exception is logged with its traceback; the client only sees the
    request ID to quote.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Run the handler and catch what escapes it.

        Args:
            request: Incoming request.
            call_next: Next middleware or route handler.

        Returns:
            The handler's response, or 500 with the error envelope.
        """
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                error_type=type(e).__name__,
                path=request.url.path,
                method=request.method,
            )
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "INTERNAL_ERROR",
                "An internal error occurred",
                request_id=getattr(request.state, "request_id", None),
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Install the middleware stack.

    Starlette runs the last added middleware first, so the stack is added
    innermost first.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(ApiKeyMiddleware)
    app.add_middleware(RequestIdMiddleware)
