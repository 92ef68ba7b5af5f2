"""Error Handlers: the single translation of exceptions into the error envelope.

Invariants:
    - Envelope shape: {"error": str, "requestId": str} plus "stack" outside production
    - Status comes from the exception's status_code attribute, defaulting to 500
    - The message is reported in every mode; only "stack" depends on the mode
    - Middleware stages that reject a request build their response with error_response,
      never with an ad hoc body

Design Decisions:
    - Two registration points share error_response: FastAPI exception handlers for
      AppError / HTTPException / RequestValidationError (they live in Starlette's inner
      ExceptionMiddleware), and ErrorHandlerMiddleware for anything else a route raises
    - Extracted from main.py (import fan-out)
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import Settings
from app.core.errors import AppError, ErrorCategory
from app.core.request_context import request_context

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def resolve_status(exc: Exception) -> int:
    if isinstance(exc, RequestValidationError):
        return status.HTTP_400_BAD_REQUEST
    code = getattr(exc, "status_code", None)
    if isinstance(code, int) and 400 <= code <= 599:
        return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def resolve_message(exc: Exception) -> str:
    if isinstance(exc, AppError):
        return exc.message
    if isinstance(exc, StarletteHTTPException):
        return exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    if isinstance(exc, RequestValidationError):
        return _validation_message(exc)
    return str(exc) or INTERNAL_ERROR_MESSAGE


def resolve_category(exc: Exception, status_code: int) -> ErrorCategory | None:
    if isinstance(exc, AppError):
        return exc.category
    if isinstance(exc, RequestValidationError):
        return ErrorCategory.VALIDATION
    if status_code >= 500:
        return ErrorCategory.INTERNAL
    return None


def _validation_message(exc: RequestValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
        for e in exc.errors()
    )
    return f"Invalid request data: {details}" if details else "Invalid request data"


def build_error_envelope(
    exc: Exception, request_id: str, production: bool,
) -> dict:
    envelope = {
        "error": resolve_message(exc),
        "requestId": request_id,
    }
    if not production:
        envelope["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__),
        )
    return envelope


def error_response(
    request: Request, exc: Exception, settings: Settings,
) -> JSONResponse:
    """Translate any exception into the error envelope response."""
    ctx = request_context(request)
    status_code = resolve_status(exc)
    extra = {
        "request_id": ctx.request_id,
        "path": request.url.path,
        "status_code": status_code,
        "error_code": getattr(exc, "code", None),
        "error_category": resolve_category(exc, status_code),
        "severity": getattr(exc, "severity", None),
    }
    if status_code >= 500:
        logger.error(
            f"Unhandled error on {request.url.path}: {exc}",
            extra=extra, exc_info=exc,
        )
    else:
        logger.warning(f"Request failed on {request.url.path}: {exc}", extra=extra)

    headers = exc.headers if isinstance(exc, StarletteHTTPException) else None
    return JSONResponse(
        status_code=status_code,
        content=build_error_envelope(exc, ctx.request_id, settings.is_production),
        headers=headers,
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Terminal stage: catches whatever route dispatch raises."""

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return error_response(request, exc, self.settings)


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    """Register envelope handlers for the exceptions FastAPI intercepts itself."""

    async def envelope_handler(request: Request, exc: Exception):
        return error_response(request, exc, settings)

    app.add_exception_handler(AppError, envelope_handler)
    app.add_exception_handler(StarletteHTTPException, envelope_handler)
    app.add_exception_handler(RequestValidationError, envelope_handler)
