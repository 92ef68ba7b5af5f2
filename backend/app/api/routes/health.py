"""Health & CORS Diagnostics: unauthenticated status endpoints.

Invariants:
    - GET /api/health always returns 200 while the process is serving
    - Health timestamps strictly increase for the lifetime of the router
    - GET /api/cors-test echoes the request Origin (diagnostic only)
"""

from fastapi import APIRouter, Request, status

from app.config import Settings
from app.core.clock import StrictClock

NO_ORIGIN = "No origin header"


def build_router(settings: Settings, clock: StrictClock | None = None) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["health"])
    clock = clock or StrictClock()

    @router.get("/health", status_code=status.HTTP_200_OK)
    async def health_check(request: Request):
        """Liveness probe with mode, version and the resolved allow-list."""
        return {
            "status": "ok",
            "message": "Sleep Olympics API is running",
            "environment": settings.environment,
            "version": settings.version,
            "timestamp": clock.isoformat(),
            "corsOrigin": request.headers.get("origin", NO_ORIGIN),
            "allowedOrigins": settings.cors_origins,
        }

    @router.get("/cors-test", status_code=status.HTTP_200_OK)
    async def cors_test(request: Request):
        return {
            "status": "ok",
            "message": "CORS is properly configured",
            "origin": request.headers.get("origin", NO_ORIGIN),
            "timestamp": clock.isoformat(),
        }

    return router
