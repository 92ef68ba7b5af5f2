"""Competition Routes: creation, lookup and membership.

Invariants:
    - The creator is the owner and the first participant
    - Only public competitions can be joined directly; private ones need an invitation
    - Joining twice is a conflict, not a no-op
"""

import logging

from fastapi import APIRouter, Depends, status

from app.api.dependencies import AuthenticatedUser, get_current_user, validated_body
from app.core.clock import isoformat_z, utc_now
from app.core.errors import ConflictError, ForbiddenError, ResourceNotFoundError
from app.core.store_protocol import DocumentStore
from app.schemas.competition import CompetitionCreate

logger = logging.getLogger(__name__)

COMPETITIONS = "competitions"


async def load_competition(store: DocumentStore, competition_id: str) -> dict:
    competition = await store.get_document(COMPETITIONS, competition_id)
    if competition is None:
        raise ResourceNotFoundError("Competition", competition_id)
    return competition


async def add_participant(store: DocumentStore, competition: dict, uid: str) -> dict:
    """Append uid to the participant list; shared with invitation acceptance."""
    participants = list(competition.get("participants", []))
    if uid in participants:
        raise ConflictError("Already a participant in this competition")
    participants.append(uid)
    logger.info(f"User {uid} joined competition {competition['id']}")
    return await store.update_document(
        COMPETITIONS, competition["id"], {"participants": participants},
    )


def build_router(store: DocumentStore) -> APIRouter:
    router = APIRouter(prefix="/api/competitions", tags=["competitions"])

    @router.get("")
    async def list_my_competitions(
        user: AuthenticatedUser = Depends(get_current_user),
    ):
        competitions = await store.query_documents(
            COMPETITIONS,
            filters=[("participants", "array-contains", user.uid)],
            order_by="startDate",
            descending=True,
        )
        return {"competitions": competitions, "count": len(competitions)}

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_competition(
        user: AuthenticatedUser = Depends(get_current_user),
        body: CompetitionCreate = Depends(validated_body(CompetitionCreate)),
    ):
        data = body.to_document()
        data.update({
            "ownerId": user.uid,
            "participants": [user.uid],
            "createdAt": isoformat_z(utc_now()),
        })
        return await store.create_document(COMPETITIONS, data)

    @router.get("/{competition_id}")
    async def get_competition(
        competition_id: str, _: AuthenticatedUser = Depends(get_current_user),
    ):
        return await load_competition(store, competition_id)

    @router.post("/{competition_id}/join")
    async def join_competition(
        competition_id: str, user: AuthenticatedUser = Depends(get_current_user),
    ):
        competition = await load_competition(store, competition_id)
        if not competition.get("isPublic", False):
            raise ForbiddenError("This competition is invitation-only")
        return await add_participant(store, competition, user.uid)

    return router
