"""Notification Routes: the caller's inbox.

Notification documents are written by other route groups (invitations); delivery
beyond the inbox is out of scope here.
"""

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import AuthenticatedUser, get_current_user
from app.core.clock import isoformat_z, utc_now
from app.core.errors import ResourceNotFoundError
from app.core.store_protocol import DocumentStore

NOTIFICATIONS = "notifications"


def build_router(store: DocumentStore) -> APIRouter:
    router = APIRouter(prefix="/api/notifications", tags=["notifications"])

    @router.get("")
    async def list_notifications(
        unread: bool = Query(False),
        limit: int = Query(50, ge=1, le=200),
        user: AuthenticatedUser = Depends(get_current_user),
    ):
        filters = [("userId", "==", user.uid)]
        if unread:
            filters.append(("read", "==", False))
        notifications = await store.query_documents(
            NOTIFICATIONS, filters=filters,
            order_by="createdAt", descending=True, limit=limit,
        )
        return {"notifications": notifications, "count": len(notifications)}

    @router.put("/{notification_id}/read")
    async def mark_read(
        notification_id: str, user: AuthenticatedUser = Depends(get_current_user),
    ):
        notification = await store.get_document(NOTIFICATIONS, notification_id)
        if notification is None or notification.get("userId") != user.uid:
            raise ResourceNotFoundError("Notification", notification_id)
        return await store.update_document(
            NOTIFICATIONS, notification_id,
            {"read": True, "readAt": isoformat_z(utc_now())},
        )

    return router
