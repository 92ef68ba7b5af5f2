"""Route Dependencies: caller identity and validated request bodies.

Invariants:
    - get_current_user accepts only "Authorization: Bearer <Firebase ID token>"
    - Token verification runs in the thread pool (firebase_admin.auth is blocking)
    - Unreachable signing keys are a 503, never a 401 or an unhandled 500
    - Bodies come from request.state.body, filled by BodyParsingMiddleware

Design Decisions:
    - validated_body raises RequestValidationError so pydantic failures share the
      envelope handler with FastAPI's own validation errors
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from firebase_admin import auth
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from app.core.errors import AuthUnavailableError, UnauthorizedError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class AuthenticatedUser:
    uid: str
    email: str | None = None
    name: str | None = None
    picture: str | None = None


def _bearer_token(request: Request) -> str:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Missing bearer token")
    return token.strip()


async def get_current_user(request: Request) -> AuthenticatedUser:
    """Verify the Firebase ID token on the request."""
    token = _bearer_token(request)
    try:
        claims = await run_in_threadpool(auth.verify_id_token, token)
    except (auth.InvalidIdTokenError, auth.UserDisabledError, ValueError) as exc:
        logger.warning(f"ID token rejected: {exc}")
        raise UnauthorizedError("Invalid or expired token") from exc
    except auth.CertificateFetchError as exc:
        logger.error(f"ID token verification keys unavailable: {exc}")
        raise AuthUnavailableError() from exc
    return AuthenticatedUser(
        uid=claims["uid"],
        email=claims.get("email"),
        name=claims.get("name"),
        picture=claims.get("picture"),
    )


def validated_body(model: type[ModelT]) -> Callable[[Request], ModelT]:
    """Dependency factory: validate the parsed body against a pydantic model."""

    def dependency(request: Request) -> ModelT:
        body: Any = getattr(request.state, "body", None)
        try:
            return model.model_validate(body if body is not None else {})
        except ValidationError as exc:
            raise RequestValidationError(
                [{**e, "loc": ("body", *e["loc"])} for e in exc.errors()],
            ) from exc

    return dependency
