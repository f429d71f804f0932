"""
Cestas Users - Service.

Manual login and profile avatar management. Avatars are stored inline in
``usuarios.image_url`` as base64 data URLs; there is no object storage.
"""

import logging

from cestas.auth.jwt_access import create_access_token
from cestas.auth.schemas import LoginResponse, User
from cestas.config import Settings, get_settings
from cestas.core.images import to_data_url, validate_image
from cestas.exceptions import UnauthorizedException
from cestas.modules.users.repository import UsersRepository
from cestas.modules.users.schemas import AvatarResponse

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Usuário ou senha incorretos"


class UsersService:
    """Service for login and avatar operations."""

    def __init__(self, repository: UsersRepository | None = None, settings: Settings | None = None):
        self.repository = repository or UsersRepository()
        self.settings = settings or get_settings()

    async def login(self, username: str, password: str) -> LoginResponse:
        """
        Validate a manual login and issue an access token.

        Raises:
            UnauthorizedException: Same message for unknown user and wrong password
        """
        username = (username or "").strip()
        if not username or not password:
            raise UnauthorizedException(INVALID_CREDENTIALS)

        row = await self.repository.find_manual(username, password)
        if not row:
            logger.info(f"Manual login rejected for {username!r}")
            raise UnauthorizedException(INVALID_CREDENTIALS)

        user = User(
            id=str(row["id"]),
            username=row.get("username") or username,
            display_name=row.get("display_name"),
            login_type="manual",
        )
        token, expires_in = create_access_token(settings=self.settings, user=user)
        logger.info(f"Manual login ok for user {user.id}")
        return LoginResponse(
            access_token=token,
            expires_in=expires_in,
            user=user,
            image_url=row.get("image_url"),
        )

    async def get_avatar(self, user: User) -> AvatarResponse:
        image_url = await self.repository.get_image_url(user.id)
        return AvatarResponse(user_id=user.id, image_url=image_url or None)

    async def update_avatar(self, user: User, content: bytes, content_type: str | None) -> AvatarResponse:
        """Validate an uploaded image and store it as the user's avatar."""
        validate_image(content, content_type, self.settings.avatar_max_bytes)
        image_url = to_data_url(content, content_type or "image/png")
        await self.repository.set_image_url(user.id, image_url)
        logger.info(f"Avatar updated for user {user.id} ({len(content)} bytes)")
        return AvatarResponse(user_id=user.id, image_url=image_url)

    async def remove_avatar(self, user: User) -> AvatarResponse:
        await self.repository.set_image_url(user.id, None)
        logger.info(f"Avatar removed for user {user.id}")
        return AvatarResponse(user_id=user.id, image_url=None)
