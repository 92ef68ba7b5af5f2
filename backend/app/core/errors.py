"""Error Hierarchy: typed, categorized exceptions for request and startup failures.

Invariants:
    - Every AppError has a code (str), category (ErrorCategory), severity and status_code
    - status_code is the attribute the error envelope reads; any exception carrying
      one is translated with that status
    - FatalInitializationError is NOT an AppError: it never becomes an HTTP response,
      it only travels up to the process boundary in app.server.main

Design Decisions:
    - Single hierarchy with AppError base: one handler catches all request errors
    - Startup failures carry the stage name so the exit log says where boot stopped
"""

from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    STORE = "store"
    INTERNAL = "internal"


class AppError(Exception):
    """Base exception for all request-scoped errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.status_code = status_code


# ─── Client errors (400-level) ──────────────────────────────────

class ValidationFailedError(AppError):
    """Request payload failed validation."""
    def __init__(self, message: str):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, 400,
        )


class UnauthorizedError(AppError):
    """Missing or invalid credentials on the request."""
    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, 401,
        )


class ForbiddenError(AppError):
    """Caller is authenticated but not allowed to act on the resource."""
    def __init__(self, message: str):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.PERMISSION,
            ErrorSeverity.WARNING, 403,
        )


class OriginNotAllowedError(ForbiddenError):
    """Request Origin is not on the allow-list."""
    def __init__(self, origin: str):
        super().__init__("Not allowed by CORS")
        self.code = "ORIGIN_NOT_ALLOWED"
        self.origin = origin


class ResourceNotFoundError(AppError):
    """Requested document does not exist."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, 404,
        )


class ConflictError(AppError):
    """Write conflicts with the current document state."""
    def __init__(self, message: str):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, 409,
        )


class PayloadTooLargeError(AppError):
    """Request body exceeds the configured limit."""
    def __init__(self, limit: int):
        super().__init__(
            f"Request body exceeds {limit} bytes",
            "PAYLOAD_TOO_LARGE", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, 413,
        )


# ─── Infrastructure errors (500-level) ──────────────────────────

class StoreError(AppError):
    """Document store operation failed."""
    def __init__(self, message: str, operation: str):
        super().__init__(
            f"Document store {operation} failed: {message}",
            "STORE_ERROR", ErrorCategory.STORE,
            ErrorSeverity.CRITICAL, 503,
        )
        self.operation = operation


class AuthUnavailableError(AppError):
    """Identity provider could not be reached to verify a token."""
    def __init__(self, message: str = "Token verification keys are unavailable"):
        super().__init__(
            message, "AUTH_UNAVAILABLE", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.CRITICAL, 503,
        )


# ─── Startup ────────────────────────────────────────────────────

class FatalInitializationError(Exception):
    """A bootstrap stage failed; the process must stop before serving traffic."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"[{stage}] {message}")
        self.stage = stage
        self.message = message
