import uuid
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.card_model import Card
from app.repository.base_repository import BaseRepository


class CardRepository(BaseRepository[Card]):
    def __init__(self):
        super().__init__(Card)

    async def list_by_user(self, db: AsyncSession, user_id: uuid.UUID) -> List[Card]:
        result = await db.execute(
            select(self.model)
            .filter(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc())
        )
        return result.scalars().all()

    async def count_by_user(self, db: AsyncSession, user_id: uuid.UUID) -> int:
        result = await db.execute(
            select(func.count(self.model.id)).filter(self.model.user_id == user_id)
        )
        return result.scalar_one()

    async def get_owned(self, db: AsyncSession, card_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Card]:
        result = await db.execute(
            select(self.model).filter(self.model.id == card_id, self.model.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_public_by_slug(self, db: AsyncSession, slug: str) -> Optional[Card]:
        result = await db.execute(
            select(self.model).filter(self.model.share_slug == slug, self.model.is_public.is_(True))
        )
        return result.scalar_one_or_none()

    async def increment_views(self, db: AsyncSession, card: Card) -> Card:
        await db.execute(
            update(self.model)
            .where(self.model.id == card.id)
            .values(views=self.model.views + 1)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        await db.refresh(card)
        return card


card_repository = CardRepository()
