"""
Cestas Auth - Schemas.

Pydantic models for authentication.
"""

from pydantic import BaseModel, Field


class User(BaseModel):
    """Authenticated user, as carried by the access token."""

    id: str
    username: str
    display_name: str | None = None
    login_type: str = "manual"


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    ok: bool = True
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: User
    image_url: str | None = None
