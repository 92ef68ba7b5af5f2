"""Middleware Pipeline: the fixed, ordered chain every request passes through.

Invariants:
    - Order (outermost first): security + origin allow-list, request logging,
      body parsing, reflective CORS, route dispatch, terminal error handler
    - OPTIONS is answered by the reflective CORS stage with 200 and an empty body;
      it never reaches a route, and the allow-list stage does not reject it
    - Stages that reject a request respond through error_response

Design Decisions:
    - CORS is handled twice on purpose: the allow-list stage enforces, the reflective
      stage keeps preflights answerable even when the allow-list is misconfigured.
      The two are separate stages and must stay that way.
    - Starlette runs the most recently added middleware first, so configure_middleware
      adds stages innermost-first
"""

import json
import logging
import time
from urllib.parse import parse_qsl

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.error_handlers import ErrorHandlerMiddleware, error_response
from app.config import Settings
from app.core.errors import (
    AppError, OriginNotAllowedError, PayloadTooLargeError, ValidationFailedError,
)
from app.core.request_context import request_context

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "cross-origin",
}
HSTS_HEADER = ("Strict-Transport-Security", "max-age=15552000; includeSubDomains")

REFLECTIVE_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
REFLECTIVE_ALLOW_HEADERS = (
    "Content-Type, Authorization, DNT, User-Agent, X-Requested-With, "
    "If-Modified-Since, Cache-Control, Range"
)
REFLECTIVE_EXPOSE_HEADERS = "Content-Length, Content-Range"


class SecurityMiddleware(BaseHTTPMiddleware):
    """Stage 1: security headers and origin allow-list enforcement."""

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings
        self.allowed_origins = frozenset(settings.cors_origins)

    def is_allowed(self, origin: str) -> bool:
        return "*" in self.allowed_origins or origin in self.allowed_origins

    async def dispatch(self, request: Request, call_next):
        ctx = request_context(request)
        origin = ctx.origin

        if request.method != "OPTIONS" and origin and not self.is_allowed(origin):
            logger.warning(
                f"Rejected request from disallowed origin {origin}",
                extra={"request_id": ctx.request_id, "origin": origin},
            )
            response = error_response(
                request, OriginNotAllowedError(origin), self.settings,
            )
        else:
            response = await call_next(request)
            if origin and self.is_allowed(origin):
                response.headers["Access-Control-Allow-Origin"] = origin
                response.headers["Access-Control-Allow-Credentials"] = "true"
                response.headers.add_vary_header("Origin")

        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        if self.settings.is_production:
            response.headers[HSTS_HEADER[0]] = HSTS_HEADER[1]
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Stage 2: one access-log line per request, X-Request-ID echoed back."""

    async def dispatch(self, request: Request, call_next):
        ctx = request_context(request)
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers["X-Request-ID"] = ctx.request_id
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} {duration_ms}ms",
            extra={
                "request_id": ctx.request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "origin": ctx.origin,
            },
        )
        return response


class BodyParsingMiddleware(BaseHTTPMiddleware):
    """Stage 3: JSON and URL-encoded bodies parsed into request.state.body."""

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings
        self.max_body_bytes = settings.max_body_bytes

    async def dispatch(self, request: Request, call_next):
        request.state.body = None
        if request.method in BODY_METHODS:
            try:
                request.state.body = await self.parse(request)
            except AppError as exc:
                return error_response(request, exc, self.settings)
        return await call_next(request)

    async def parse(self, request: Request):
        content_type = request.headers.get("content-type", "")
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type not in (JSON_CONTENT_TYPE, FORM_CONTENT_TYPE):
            return None

        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_body_bytes:
            raise PayloadTooLargeError(self.max_body_bytes)
        raw = await request.body()
        if len(raw) > self.max_body_bytes:
            raise PayloadTooLargeError(self.max_body_bytes)
        if not raw.strip():
            return {}

        if media_type == JSON_CONTENT_TYPE:
            try:
                return json.loads(raw)
            except ValueError as exc:
                raise ValidationFailedError(f"Malformed JSON body: {exc}") from exc
        return parse_form(raw.decode("utf-8", errors="replace"))


def parse_form(raw: str) -> dict[str, str | list[str]]:
    """Decode a URL-encoded body; repeated keys collect into a list."""
    fields: dict[str, str | list[str]] = {}
    for key, value in parse_qsl(raw, keep_blank_values=True):
        if key not in fields:
            fields[key] = value
        elif isinstance(fields[key], list):
            fields[key].append(value)
        else:
            fields[key] = [fields[key], value]
    return fields


def reflective_cors_headers(origin: str | None) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin or "*",
        "Access-Control-Allow-Methods": REFLECTIVE_ALLOW_METHODS,
        "Access-Control-Allow-Headers": REFLECTIVE_ALLOW_HEADERS,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Expose-Headers": REFLECTIVE_EXPOSE_HEADERS,
    }


class ReflectiveCORSMiddleware(BaseHTTPMiddleware):
    """Stage 4: mirrors the caller's Origin and short-circuits preflights."""

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        if request.method == "OPTIONS":
            logger.info(
                f"Handling OPTIONS request from {origin or 'unknown origin'}",
                extra={"request_id": request_context(request).request_id},
            )
            response = Response(status_code=200)
        else:
            response = await call_next(request)
        for name, value in reflective_cors_headers(origin).items():
            response.headers[name] = value
        return response


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Install the pipeline. Added innermost-first; the last one added runs first."""
    app.add_middleware(ErrorHandlerMiddleware, settings=settings)
    app.add_middleware(ReflectiveCORSMiddleware)
    app.add_middleware(BodyParsingMiddleware, settings=settings)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityMiddleware, settings=settings)
