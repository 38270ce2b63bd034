import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db
from app.modules.cards.service import card_service
from app.modules.cards.templates import CARD_TEMPLATES
from app.schemas.auth_schema import AuthenticatedUser
from app.schemas.card_schema import Card, CardCreate, CardTemplate, PublicCard

router = APIRouter(tags=["Cards"])


@router.get("/templates", response_model=List[CardTemplate])
async def list_templates():
    return CARD_TEMPLATES


@router.get("/cards", response_model=List[Card])
async def list_cards(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await card_service.list_cards(db, current_user.id)


@router.post("/cards", response_model=Card, status_code=status.HTTP_201_CREATED)
async def create_card(
    card_data: CardCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await card_service.create_card(db, current_user.id, card_data)


@router.delete("/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    card_id: uuid.UUID,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await card_service.delete_card(db, current_user.id, card_id)


@router.get("/public/cards/{slug}", response_model=PublicCard)
async def view_public_card(slug: str, db: AsyncSession = Depends(get_db)):
    """Public page data for a shared card; each call counts as a view."""
    return await card_service.view_public_card(db, slug)
