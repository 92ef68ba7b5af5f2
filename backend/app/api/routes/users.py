"""User Routes: the caller's profile and public profiles of other users."""

from fastapi import APIRouter, Depends

from app.api.dependencies import AuthenticatedUser, get_current_user, validated_body
from app.core.clock import isoformat_z, utc_now
from app.core.errors import ResourceNotFoundError
from app.core.store_protocol import DocumentStore
from app.schemas.user import PUBLIC_PROFILE_FIELDS, UserProfileUpdate

USERS = "users"


def build_router(store: DocumentStore) -> APIRouter:
    router = APIRouter(prefix="/api/users", tags=["users"])

    async def load_user(user_id: str) -> dict:
        profile = await store.get_document(USERS, user_id)
        if profile is None:
            raise ResourceNotFoundError("User", user_id)
        return profile

    @router.get("/me")
    async def get_my_profile(user: AuthenticatedUser = Depends(get_current_user)):
        return await load_user(user.uid)

    @router.put("/me")
    async def update_my_profile(
        user: AuthenticatedUser = Depends(get_current_user),
        update: UserProfileUpdate = Depends(validated_body(UserProfileUpdate)),
    ):
        changes = update.to_document(exclude_unset=True)
        changes["updatedAt"] = isoformat_z(utc_now())
        await load_user(user.uid)
        return await store.update_document(USERS, user.uid, changes)

    @router.get("/{user_id}")
    async def get_public_profile(
        user_id: str, _: AuthenticatedUser = Depends(get_current_user),
    ):
        profile = await load_user(user_id)
        return {k: profile[k] for k in PUBLIC_PROFILE_FIELDS if k in profile}

    return router
