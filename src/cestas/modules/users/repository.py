"""
Cestas Users - Repository.

Database operations for users (table ``usuarios``).
"""

from typing import Any

from cestas.core.repository import BaseRepository
from cestas.exceptions import NotFoundException


class UsersRepository(BaseRepository[dict[str, Any]]):
    """Repository for users in Supabase."""

    @property
    def table_name(self) -> str:
        return "usuarios"

    async def find_manual(self, username: str, password: str) -> dict[str, Any] | None:
        """Return the manual-login user matching both credentials, if any."""
        query = (
            self.table.select("*")
            .eq("username", username)
            .eq("password", password)
            .eq("tipo_login", "manual")
            .limit(1)
        )
        response = await self._execute(query, "find_manual")
        rows = response.data or []
        return rows[0] if rows else None

    async def get_image_url(self, user_id: Any) -> str | None:
        query = self.table.select("image_url").eq("id", str(user_id)).limit(1)
        response = await self._execute(query, "get_image")
        rows = response.data or []
        if not rows:
            raise NotFoundException("Usuário", user_id, "Usuário não encontrado")
        return rows[0].get("image_url")

    async def set_image_url(self, user_id: Any, image_url: str | None) -> None:
        await self.update(user_id, {"image_url": image_url})
