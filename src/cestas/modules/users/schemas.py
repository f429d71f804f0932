"""
Cestas Users - Schemas.

Pydantic models for the profile avatar.
"""

from pydantic import BaseModel


class AvatarResponse(BaseModel):
    """Current avatar of the user, as a data URL (or None)."""

    user_id: str
    image_url: str | None = None
