"""Invitation Routes: inviting users into competitions and answering invitations.

Invariants:
    - Only a participant can invite, and only non-participants can be invited
    - Each invitation writes one "invitation" notification for the invitee
    - An invitation is answered once: pending -> accepted | declined
"""

import logging

from fastapi import APIRouter, Depends, status

from app.api.dependencies import AuthenticatedUser, get_current_user, validated_body
from app.api.routes.competitions import add_participant, load_competition
from app.core.clock import isoformat_z, utc_now
from app.core.errors import ConflictError, ForbiddenError, ResourceNotFoundError
from app.core.store_protocol import DocumentStore
from app.schemas.invitation import InvitationCreate, InvitationResponse

logger = logging.getLogger(__name__)

INVITATIONS = "invitations"
NOTIFICATIONS = "notifications"
USERS = "users"
PENDING = "pending"


def build_router(store: DocumentStore) -> APIRouter:
    router = APIRouter(prefix="/api/invitations", tags=["invitations"])

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_invitation(
        user: AuthenticatedUser = Depends(get_current_user),
        body: InvitationCreate = Depends(validated_body(InvitationCreate)),
    ):
        competition = await load_competition(store, body.competition_id)
        participants = competition.get("participants", [])
        if user.uid not in participants:
            raise ForbiddenError("Only participants can invite to this competition")
        if body.invitee_id in participants:
            raise ConflictError("User is already a participant")
        if await store.get_document(USERS, body.invitee_id) is None:
            raise ResourceNotFoundError("User", body.invitee_id)

        now = isoformat_z(utc_now())
        invitation = await store.create_document(INVITATIONS, {
            **body.to_document(),
            "competitionName": competition.get("name"),
            "inviterId": user.uid,
            "status": PENDING,
            "createdAt": now,
        })
        await store.create_document(NOTIFICATIONS, {
            "userId": body.invitee_id,
            "type": "invitation",
            "invitationId": invitation["id"],
            "competitionId": body.competition_id,
            "message": f"You were invited to {competition.get('name', 'a competition')}",
            "read": False,
            "createdAt": now,
        })
        logger.info(
            f"Invitation {invitation['id']} sent to {body.invitee_id} "
            f"for competition {body.competition_id}",
        )
        return invitation

    @router.get("")
    async def list_pending_invitations(
        user: AuthenticatedUser = Depends(get_current_user),
    ):
        invitations = await store.query_documents(
            INVITATIONS,
            filters=[("inviteeId", "==", user.uid), ("status", "==", PENDING)],
            order_by="createdAt", descending=True,
        )
        return {"invitations": invitations, "count": len(invitations)}

    @router.post("/{invitation_id}/respond")
    async def respond_to_invitation(
        invitation_id: str,
        user: AuthenticatedUser = Depends(get_current_user),
        body: InvitationResponse = Depends(validated_body(InvitationResponse)),
    ):
        invitation = await store.get_document(INVITATIONS, invitation_id)
        if invitation is None or invitation.get("inviteeId") != user.uid:
            raise ResourceNotFoundError("Invitation", invitation_id)
        if invitation.get("status") != PENDING:
            raise ConflictError(f"Invitation already {invitation.get('status')}")

        if body.accept:
            competition = await load_competition(store, invitation["competitionId"])
            await add_participant(store, competition, user.uid)
        return await store.update_document(INVITATIONS, invitation_id, {
            "status": "accepted" if body.accept else "declined",
            "respondedAt": isoformat_z(utc_now()),
        })

    return router
