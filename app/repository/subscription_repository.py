import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models.subscription_model import Subscription, PAYMENT_PROVIDER
from app.modules.subscription import lifecycle
from app.repository.base_repository import BaseRepository


class SubscriptionRepository(BaseRepository[Subscription]):
    def __init__(self):
        super().__init__(Subscription)

    async def create_pending(
        self,
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        plan: str,
        payment_id: Optional[str],
        price_cents: int,
    ) -> Subscription:
        subscription = Subscription(
            user_id=user_id,
            plan=plan,
            status=lifecycle.PENDING,
            payment_id=payment_id,
            payment_provider=PAYMENT_PROVIDER,
            price_cents=price_cents,
        )
        return await self.add(db, subscription)

    async def get_by_payment_id(self, db: AsyncSession, payment_id: str) -> Optional[Subscription]:
        result = await db.execute(select(self.model).filter(self.model.payment_id == payment_id))
        return result.scalars().first()

    async def get_latest_pending(
        self, db: AsyncSession, user_id: uuid.UUID, plan: Optional[str] = None
    ) -> Optional[Subscription]:
        stmt = select(self.model).filter(
            self.model.user_id == user_id,
            self.model.status == lifecycle.PENDING,
        )
        if plan:
            stmt = stmt.filter(self.model.plan == plan)
        result = await db.execute(stmt.order_by(self.model.created_at.desc()).limit(1))
        return result.scalars().first()

    async def get_latest_active(
        self, db: AsyncSession, user_id: uuid.UUID, *, paid_only: bool = False
    ) -> Optional[Subscription]:
        stmt = select(self.model).filter(
            self.model.user_id == user_id,
            self.model.status == lifecycle.ACTIVE,
        )
        if paid_only:
            stmt = stmt.filter(self.model.plan != lifecycle.FREE_PLAN)
        result = await db.execute(stmt.order_by(self.model.created_at.desc()).limit(1))
        return result.scalars().first()

    async def save(self, db: AsyncSession, subscription: Subscription) -> Subscription:
        db.add(subscription)
        await db.commit()
        await db.refresh(subscription)
        return subscription

    async def cancel_active_free(self, db: AsyncSession, user_id: uuid.UUID, now: datetime) -> int:
        """Cancels the user's active free plan row once a paid plan takes over."""
        result = await db.execute(
            update(self.model)
            .where(
                self.model.user_id == user_id,
                self.model.status == lifecycle.ACTIVE,
                self.model.plan == lifecycle.FREE_PLAN,
            )
            .values(status=lifecycle.CANCELLED, updated_at=now)
        )
        await db.commit()
        return result.rowcount

    async def expire_lapsed(self, db: AsyncSession, now: datetime) -> int:
        result = await db.execute(
            update(self.model)
            .where(
                self.model.status == lifecycle.ACTIVE,
                self.model.expires_at.is_not(None),
                self.model.expires_at < now,
            )
            .values(status=lifecycle.EXPIRED, updated_at=now)
            # runs in its own session, nothing loaded to synchronize
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount


subscription_repository = SubscriptionRepository()
