"""
Exception Handlers for FastAPI Application.

Every error leaves the API as JSON. Domain errors and request validation
failures use the ``{"success": false, "message": ...}`` envelope; anything
unhandled is logged with its full context and answered with a 500 carrying
an error ID that clients can quote when reporting the problem.
"""

import traceback
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from edustack.core.errors import EduStackError
from edustack.core.logging_config import get_logger
from edustack.core.monitoring import log_error

logger = get_logger(__name__)


async def edustack_error_handler(request: Request, exc: EduStackError) -> JSONResponse:
    """Render a domain error with its status code, message and optional payload."""
    content: Dict[str, Any] = {"success": False, "message": exc.message}
    if exc.error_code:
        content["error"] = exc.error_code
    if exc.data is not None:
        content["data"] = exc.data
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    else:
        logger.debug(f"{exc.status_code} {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)


def _validation_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    errors = []
    for error in exc.errors():
        # Drop the leading "body"/"query"/"path" segment from the location.
        location = [str(part) for part in error.get("loc", ())[1:]]
        value = error.get("input")
        errors.append(
            {
                "field": ".".join(location),
                "message": error.get("msg", ""),
                "value": value if isinstance(value, (str, int, float, bool, type(None))) else None,
            }
        )
    return errors


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report every invalid field with a 400."""
    errors = _validation_errors(exc)
    logger.debug(f"Validation failed for {request.method} {request.url.path}: {[e['field'] for e in errors]}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and framework-level HTTP errors."""
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": f"Route {request.url.path} not found", "error": "ROUTE_NOT_FOUND"},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    # Generate unique error ID for tracking
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )
    log_error(
        error_type=type(exc).__name__,
        error_message=str(exc),
        context={"error_id": error_id, "method": request.method, "path": request.url.path},
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    This function should be called during application initialization to set up
    all custom exception handlers.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(EduStackError, edustack_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
