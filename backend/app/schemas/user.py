"""User profile schemas."""

from pydantic import Field, field_validator

from app.schemas.base import CamelModel

PUBLIC_PROFILE_FIELDS = ("id", "displayName", "photoUrl", "createdAt")


class UserProfileUpdate(CamelModel):
    """Partial profile update: only fields sent are written."""
    display_name: str | None = Field(None, min_length=1, max_length=80)
    photo_url: str | None = Field(None, max_length=2048)
    timezone: str | None = Field(None, max_length=64)
    notifications_enabled: bool | None = None

    # Unset fields keep the None default without validation; an explicit null does not.
    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("displayName cannot be null")
        v = v.strip()
        if not v:
            raise ValueError("displayName cannot be empty or whitespace")
        return v
