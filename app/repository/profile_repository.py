import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.profile_model import Profile
from app.repository.base_repository import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    def __init__(self):
        super().__init__(Profile)

    async def get_by_user_id(self, db: AsyncSession, user_id: uuid.UUID) -> Optional[Profile]:
        result = await db.execute(select(self.model).filter(self.model.user_id == user_id))
        return result.scalar_one_or_none()


profile_repository = ProfileRepository()
