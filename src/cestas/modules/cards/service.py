"""
Cestas Cards - Service.

Business logic for cards: accent-insensitive unique names and a short-lived
cache of the card list.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from cestas.config import get_settings
from cestas.core.images import validate_image_url
from cestas.exceptions import ValidationException
from cestas.modules.cards.repository import CardsRepository
from cestas.modules.cards.schemas import CardCreate, CardListResponse, CardResponse, CardUpdate
from cestas.modules.tables.registry import TablesManager
from cestas.modules.tables.validation import validate_card_name

logger = logging.getLogger(__name__)


class CardsService:
    """Service for card operations."""

    def __init__(
        self,
        repository: CardsRepository | None = None,
        tables: TablesManager | None = None,
        cache_ttl_ms: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.repository = repository or CardsRepository()
        self.tables = tables
        settings = get_settings()
        self.cache_ttl_ms = cache_ttl_ms if cache_ttl_ms is not None else settings.cache.cards_ttl_ms
        self.max_image_bytes = settings.avatar_max_bytes
        self._clock = clock
        self._cards: list[dict[str, Any]] | None = None
        self._fetched_at: float | None = None

    # -------------------------------------------------------------------------
    # Card list cache
    # -------------------------------------------------------------------------

    def _cache_valid(self) -> bool:
        if self._cards is None or self._fetched_at is None:
            return False
        return (self._clock() - self._fetched_at) * 1000 < self.cache_ttl_ms

    def invalidate(self) -> None:
        self._cards = None
        self._fetched_at = None

    async def _all_cards(self) -> list[dict[str, Any]]:
        if not self._cache_valid():
            self._cards = await self.repository.list_recent()
            self._fetched_at = self._clock()
            logger.info(f"{len(self._cards)} cards loaded")
        return self._cards

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def list_cards(self) -> CardListResponse:
        cards = await self._all_cards()
        return CardListResponse(items=[CardResponse(**c) for c in cards], total=len(cards))

    async def get_card(self, card_id: str) -> CardResponse:
        card = await self.repository.get_by_id_or_raise(card_id)
        return CardResponse(**card)

    async def create_card(self, request: CardCreate) -> CardResponse:
        """
        Create a card with zeroed aggregates.

        Raises:
            ValidationException: If the name is empty or the image is not an accepted image
            ConflictException: If another card already has an equivalent name
        """
        name = validate_card_name(request.name, await self._all_cards())
        created = await self.repository.create(
            {
                "name": name,
                "description": (request.description or "").strip() or None,
                "image_url": validate_image_url(request.image_url, self.max_image_bytes, "image_url"),
                "quantidade_produtos": 0,
                "valor_total": 0,
                "frete": 0,
                "table_name": None,
            }
        )
        self.invalidate()
        logger.info(f"Card created: {created.get('id')}")
        return CardResponse(**created)

    async def update_card(self, card_id: str, request: CardUpdate) -> CardResponse:
        """Update the fields that were sent; a rename is checked against other cards."""
        data = request.model_dump(exclude_unset=True)
        if not data:
            raise ValidationException("Nenhum campo para atualizar")
        if "name" in data:
            data["name"] = validate_card_name(data["name"], await self._all_cards(), exclude_id=card_id)
        if "image_url" in data:
            data["image_url"] = validate_image_url(data["image_url"], self.max_image_bytes, "image_url")

        updated = await self.repository.update(card_id, data)
        self.invalidate()
        if "name" in data and self.tables is not None:
            # the table's cached card name is stale now
            self.tables.delete_table(card_id)
        return CardResponse(**updated)

    async def delete_card(self, card_id: str) -> None:
        await self.repository.delete(card_id)
        self.invalidate()
        if self.tables is not None:
            self.tables.delete_table(card_id)
        logger.info(f"Card deleted: {card_id}")
