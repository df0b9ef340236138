"""
Siegefront - Error Handler
Formats every exception raised by a route into the structured JSON error
envelope: {"error": {code, message, details, recoverable, recovery_hint,
error_id, timestamp}}.
"""
import traceback
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from siegefront.core.errors import GameError, ErrorCode

logger = logging.getLogger("siegefront.errors")

HTTP_STATUS_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION_ERROR,
    500: ErrorCode.UNKNOWN,
}


def _error_id() -> str:
    return str(uuid.uuid4())[:8]


def _envelope(
    error_id: str,
    code: ErrorCode,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    recoverable: bool = True,
    recovery_hint: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "error": {
            "code": code.value,
            "message": message,
            "details": details or {},
            "recoverable": recoverable,
            "recovery_hint": recovery_hint,
            "error_id": error_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    }


def validation_details(exc: RequestValidationError) -> Dict[str, Any]:
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error.get("loc", []))
        errors.append({
            "field": field,
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "validation_error")
        })
    return {"errors": errors}


def setup_error_handlers(app: FastAPI, debug: bool = False):
    """
    Register exception handlers for GameError and standard exceptions.

    Call this right after creating the FastAPI app.
    """

    @app.exception_handler(GameError)
    async def game_error_handler(request: Request, exc: GameError):
        """Handle GameError exceptions (illegal actions, unknown battles, ...)."""
        error_id = _error_id()
        logger.warning(
            f"[{error_id}] GameError: {exc.code.value} - {exc.message}",
            extra={
                "error_id": error_id,
                "error_code": exc.code.value,
                "path": str(request.url.path),
            }
        )

        response_data = exc.to_dict()
        response_data["error"]["error_id"] = error_id
        response_data["error"]["timestamp"] = datetime.now(timezone.utc).isoformat()
        return JSONResponse(status_code=exc.http_status, content=response_data)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors from request parsing."""
        return JSONResponse(
            status_code=422,
            content=_envelope(
                _error_id(),
                ErrorCode.VALIDATION_ERROR,
                "Request validation failed",
                details=validation_details(exc),
                recovery_hint="Check the request data and correct any invalid fields",
            )
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle standard HTTP exceptions (unknown routes, wrong methods)."""
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(
                _error_id(),
                HTTP_STATUS_CODES.get(exc.status_code, ErrorCode.UNKNOWN),
                str(exc.detail) if exc.detail else "An error occurred",
                recoverable=exc.status_code < 500,
            )
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        error_id = _error_id()
        logger.error(
            f"[{error_id}] Unhandled exception: {type(exc).__name__}: {exc}",
            extra={
                "error_id": error_id,
                "path": str(request.url.path),
                "method": request.method,
            },
            exc_info=True
        )

        content = _envelope(
            error_id,
            ErrorCode.UNKNOWN,
            "An unexpected error occurred",
            recoverable=False,
            recovery_hint="Please try again or start a new battle",
        )
        if debug:
            content["error"]["debug"] = {
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
                "traceback": traceback.format_exc().split("\n")
            }
        return JSONResponse(status_code=500, content=content)

    return app
