"""Request Context: per-request identity carried through the middleware pipeline.

Invariants:
    - Exactly one RequestContext per request, created by the first stage that asks
    - Lives on request.state (scope["state"]), so every stage and handler sees the same one
    - request_id is the incoming X-Request-ID when present, else a fresh uuid4 hex
"""

from dataclasses import dataclass
from typing import Any
from uuid import uuid4

REQUEST_ID_HEADER = "x-request-id"


@dataclass(frozen=True)
class RequestContext:
    request_id: str
    origin: str | None
    store: Any = None


def request_context(request) -> RequestContext:
    """Return the request's context, creating it on first access."""
    ctx = getattr(request.state, "context", None)
    if ctx is None:
        ctx = RequestContext(
            request_id=request.headers.get(REQUEST_ID_HEADER) or uuid4().hex,
            origin=request.headers.get("origin"),
            store=getattr(request.app.state, "store", None),
        )
        request.state.context = ctx
    return ctx
