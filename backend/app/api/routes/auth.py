"""Auth Routes: session bootstrap for Firebase-authenticated clients.

Invariants:
    - Identity comes only from a verified Firebase ID token (get_current_user)
    - POST /session creates users/{uid} on first login, refreshes lastLoginAt afterwards
"""

import logging

from fastapi import APIRouter, Depends

from app.api.dependencies import AuthenticatedUser, get_current_user
from app.core.clock import isoformat_z, utc_now
from app.core.store_protocol import DocumentStore

logger = logging.getLogger(__name__)

USERS = "users"


def build_router(store: DocumentStore) -> APIRouter:
    router = APIRouter(prefix="/api/auth", tags=["auth"])

    @router.post("/session")
    async def open_session(user: AuthenticatedUser = Depends(get_current_user)):
        """Upsert the caller's user document and return it."""
        now = isoformat_z(utc_now())
        existing = await store.get_document(USERS, user.uid)
        if existing is None:
            profile = await store.create_document(
                USERS,
                {
                    "email": user.email,
                    "displayName": user.name or (user.email or "").split("@")[0],
                    "photoUrl": user.picture,
                    "notificationsEnabled": True,
                    "createdAt": now,
                    "lastLoginAt": now,
                },
                doc_id=user.uid,
            )
            logger.info(f"Created user profile {user.uid}")
            return {"user": profile, "created": True}

        profile = await store.update_document(USERS, user.uid, {"lastLoginAt": now})
        return {"user": profile, "created": False}

    @router.get("/me")
    async def whoami(user: AuthenticatedUser = Depends(get_current_user)):
        return {"uid": user.uid, "email": user.email, "name": user.name}

    return router
