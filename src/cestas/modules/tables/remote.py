"""
Cestas Tables - Remote Store.

The record operations a ``StorageManager`` needs from the backend. Methods
raise ``CestasException`` subclasses on failure; turning those into results
is the storage manager's job.
"""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any

from cestas.core.text import sanitize_table_name
from cestas.modules.cards.repository import CardsRepository
from cestas.modules.tables.repository import ProdutosRepository

logger = logging.getLogger(__name__)


class RemoteStore(ABC):
    """Card and product record operations."""

    @abstractmethod
    async def fetch_card_by_id(self, card_id: str) -> dict[str, Any]:
        """Return the card row; raise NotFoundException if absent."""

    @abstractmethod
    async def fetch_products(self, card_id: str) -> list[dict[str, Any]]:
        """Return product rows of the card, ascending by ``ordem``."""

    @abstractmethod
    async def insert_product(self, card_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Insert a product and return the canonical row (id and table name assigned)."""

    @abstractmethod
    async def update_product(self, card_id: str, produto_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Partially update a product and return the canonical row."""

    @abstractmethod
    async def delete_product(self, card_id: str, produto_id: str) -> None:
        """Delete a product; raise NotFoundException if no row matched."""

    @abstractmethod
    async def set_product_order(self, card_id: str, produto_id: str, position: int) -> None:
        """Persist one product's display position."""

    @abstractmethod
    async def fetch_shipping(self, card_id: str) -> Decimal:
        """Return the card's shipping value."""

    @abstractmethod
    async def save_shipping(self, card_id: str, frete: Decimal) -> Decimal:
        """Persist the shipping value and return the stored one."""


class SupabaseRemoteStore(RemoteStore):
    """RemoteStore over the ``cards`` and ``tabelas_card`` tables."""

    def __init__(
        self,
        cards: CardsRepository | None = None,
        produtos: ProdutosRepository | None = None,
    ):
        self.cards = cards or CardsRepository()
        self.produtos = produtos or ProdutosRepository()

    async def fetch_card_by_id(self, card_id: str) -> dict[str, Any]:
        return await self.cards.get_by_id_or_raise(card_id)

    async def fetch_products(self, card_id: str) -> list[dict[str, Any]]:
        return await self.produtos.list_by_card(card_id)

    async def insert_product(self, card_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        card_name = await self.cards.get_name(card_id)
        row = {
            **fields,
            "id_card": card_id,
            "nome_card": card_name,
            "tabela_personalizada": sanitize_table_name(card_name),
        }
        row.setdefault("ordem", 0)
        created = await self.produtos.create(row)
        await self._refresh_summary(card_id)
        return created

    async def update_product(self, card_id: str, produto_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        updated = await self.produtos.update_for_card(card_id, produto_id, fields)
        await self._refresh_summary(card_id)
        return updated

    async def delete_product(self, card_id: str, produto_id: str) -> None:
        await self.produtos.delete_for_card(card_id, produto_id)
        await self._refresh_summary(card_id)

    async def set_product_order(self, card_id: str, produto_id: str, position: int) -> None:
        await self.produtos.set_order(card_id, produto_id, position)

    async def fetch_shipping(self, card_id: str) -> Decimal:
        return await self.cards.get_shipping(card_id)

    async def save_shipping(self, card_id: str, frete: Decimal) -> Decimal:
        return await self.cards.save_shipping(card_id, frete)

    async def _refresh_summary(self, card_id: str) -> None:
        """Recompute ``quantidade_produtos``/``valor_total`` on the card. Best effort."""
        try:
            precos = await self.produtos.list_prices(card_id)
            total = sum((Decimal(str(p)) for p in precos if p is not None), Decimal("0"))
            await self.cards.update_summary(card_id, len(precos), total)
            logger.info(f"Card {card_id} summary: {len(precos)} produtos, R$ {total:.2f}")
        except Exception as e:
            logger.warning(f"Could not refresh summary of card {card_id}: {e}")
