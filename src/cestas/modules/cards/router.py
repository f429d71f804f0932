"""Cestas Cards - Router.

REST API endpoints for card management.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from cestas.auth import get_current_user
from cestas.auth.schemas import User
from cestas.deps import get_cards_service, require_cards
from cestas.modules.cards.schemas import CardCreate, CardListResponse, CardResponse, CardUpdate
from cestas.modules.cards.service import CardsService

router = APIRouter(prefix="/cards", tags=["Cards"], dependencies=[require_cards])

Service = Annotated[CardsService, Depends(get_cards_service)]


@router.get("", response_model=CardListResponse)
async def list_cards(service: Service, user: User = Depends(get_current_user)) -> CardListResponse:
    """List all cards, newest first."""
    return await service.list_cards()


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(data: CardCreate, service: Service, user: User = Depends(get_current_user)) -> CardResponse:
    """Create a new card."""
    return await service.create_card(data)


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(card_id: str, service: Service, user: User = Depends(get_current_user)) -> CardResponse:
    """Get a specific card by ID."""
    return await service.get_card(card_id)


@router.patch("/{card_id}", response_model=CardResponse)
async def update_card(
    card_id: str,
    data: CardUpdate,
    service: Service,
    user: User = Depends(get_current_user),
) -> CardResponse:
    """Update an existing card."""
    return await service.update_card(card_id, data)


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(card_id: str, service: Service, user: User = Depends(get_current_user)):
    """Delete a card."""
    await service.delete_card(card_id)
    return None
