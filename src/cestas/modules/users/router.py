"""Cestas Users - Router.

Manual login, the current user, and the profile avatar.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from cestas.auth import LoginRequest, LoginResponse, User, get_current_user
from cestas.deps import get_users_service, require_users
from cestas.modules.users.schemas import AvatarResponse
from cestas.modules.users.service import UsersService

auth_router = APIRouter(prefix="/auth", tags=["auth"], dependencies=[require_users])
router = APIRouter(prefix="/users", tags=["Users"], dependencies=[require_users])

Service = Annotated[UsersService, Depends(get_users_service)]


@auth_router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, service: Service) -> LoginResponse:
    """Validate a manual login and return an access token."""
    return await service.login(data.username, data.password)


@auth_router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)) -> User:
    return user


@router.get("/me/avatar", response_model=AvatarResponse)
async def get_avatar(service: Service, user: User = Depends(get_current_user)) -> AvatarResponse:
    return await service.get_avatar(user)


@router.put("/me/avatar", response_model=AvatarResponse)
async def update_avatar(
    service: Service,
    user: User = Depends(get_current_user),
    file: UploadFile = File(..., description="Image file (image/*, up to 5MB)"),
) -> AvatarResponse:
    """Replace the avatar with the uploaded image."""
    content = await file.read()
    return await service.update_avatar(user, content, file.content_type)


@router.delete("/me/avatar", response_model=AvatarResponse)
async def remove_avatar(service: Service, user: User = Depends(get_current_user)) -> AvatarResponse:
    return await service.remove_avatar(user)
