"""
Cestas Tables - Repository.

Database operations for the products of every card (table ``tabelas_card``).
Every write is scoped by both product id and owning card id.
"""

from typing import Any

from cestas.core.repository import BaseRepository
from cestas.exceptions import NotFoundException


class ProdutosRepository(BaseRepository[dict[str, Any]]):
    """Repository for products in Supabase."""

    @property
    def table_name(self) -> str:
        return "tabelas_card"

    async def list_by_card(self, card_id: Any) -> list[dict[str, Any]]:
        """List the products of a card, ascending by ``ordem``."""
        query = self.table.select("*").eq("id_card", str(card_id)).order("ordem", desc=False)
        response = await self._execute(query, "list")
        return response.data or []

    async def list_prices(self, card_id: Any) -> list[Any]:
        query = self.table.select("preco").eq("id_card", str(card_id))
        response = await self._execute(query, "list_prices")
        return [row.get("preco") for row in response.data or []]

    async def update_for_card(self, card_id: Any, produto_id: Any, fields: dict[str, Any]) -> dict[str, Any]:
        query = (
            self.table.update(fields)
            .eq("id", str(produto_id))
            .eq("id_card", str(card_id))
        )
        response = await self._execute(query, "update")
        if not response.data:
            raise NotFoundException("Produto", produto_id, "Produto não encontrado")
        return response.data[0]

    async def delete_for_card(self, card_id: Any, produto_id: Any) -> None:
        query = self.table.delete().eq("id", str(produto_id)).eq("id_card", str(card_id))
        response = await self._execute(query, "delete")
        if not response.data:
            raise NotFoundException("Produto", produto_id, "Produto não encontrado")

    async def set_order(self, card_id: Any, produto_id: Any, position: int) -> None:
        query = (
            self.table.update({"ordem": position})
            .eq("id", str(produto_id))
            .eq("id_card", str(card_id))
        )
        response = await self._execute(query, "set_order")
        if not response.data:
            raise NotFoundException("Produto", produto_id, "Produto não encontrado")
