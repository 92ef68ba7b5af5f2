"""Invitation schemas."""

from pydantic import Field

from app.schemas.base import CamelModel


class InvitationCreate(CamelModel):
    competition_id: str = Field(min_length=1)
    invitee_id: str = Field(min_length=1)
    message: str = Field("", max_length=500)


class InvitationResponse(CamelModel):
    accept: bool
