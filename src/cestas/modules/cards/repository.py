"""
Cestas Cards - Repository.

Database operations for cards, including the shipping value and the product
summary stored on each card.
"""

from decimal import Decimal
from typing import Any

from cestas.core.repository import BaseRepository
from cestas.exceptions import NotFoundException, ValidationException


def _decimal(value: Any) -> Decimal:
    if value in (None, ""):
        return Decimal("0")
    return Decimal(str(value))


class CardsRepository(BaseRepository[dict[str, Any]]):
    """Repository for cards in Supabase."""

    @property
    def table_name(self) -> str:
        return "cards"

    async def list_recent(self) -> list[dict[str, Any]]:
        """List every card, newest first."""
        query = self.table.select("*").order("created_at", desc=True)
        response = await self._execute(query, "list")
        return response.data or []

    async def get_name(self, card_id: Any) -> str:
        query = self.table.select("name").eq("id", str(card_id)).limit(1)
        response = await self._execute(query, "get_name")
        rows = response.data or []
        if not rows:
            raise NotFoundException("Card", card_id, "Card não encontrado")
        return rows[0]["name"]

    async def get_shipping(self, card_id: Any) -> Decimal:
        query = self.table.select("frete").eq("id", str(card_id)).limit(1)
        response = await self._execute(query, "get_frete")
        rows = response.data or []
        if not rows:
            raise NotFoundException("Card", card_id, "Card não encontrado")
        return _decimal(rows[0].get("frete"))

    async def save_shipping(self, card_id: Any, frete: Decimal) -> Decimal:
        """Persist the shipping value and return what the store kept."""
        if frete < 0:
            raise ValidationException("Frete não pode ser negativo", errors=[{"field": "frete"}])
        query = self.table.update({"frete": float(frete)}).eq("id", str(card_id))
        response = await self._execute(query, "save_frete")
        if not response.data:
            raise NotFoundException("Card", card_id, "Card não encontrado")
        return _decimal(response.data[0].get("frete"))

    async def update_summary(self, card_id: Any, quantidade: int, valor_total: Decimal) -> None:
        """Write back the derived product count and price sum."""
        data = {"quantidade_produtos": quantidade, "valor_total": float(valor_total)}
        await self._execute(self.table.update(data).eq("id", str(card_id)), "update_summary")
