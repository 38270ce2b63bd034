import uuid
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.subscription import lifecycle
from app.repository.subscription_repository import SubscriptionRepository, subscription_repository
from app.schemas.subscription_schema import Subscription, SubscriptionStatus


class SubscriptionService:
    def __init__(self, subscriptions: SubscriptionRepository = subscription_repository):
        self.subscriptions = subscriptions

    async def get_subscription_status(self, db: AsyncSession, user_id: uuid.UUID) -> SubscriptionStatus:
        """Entitlement of the user: the newest active row decides the plan, free when there is none."""
        active = await self.subscriptions.get_latest_active(db, user_id)
        if active is None:
            return SubscriptionStatus()

        return SubscriptionStatus(
            plan=active.plan,
            is_premium=active.plan in lifecycle.PAID_PLANS,
            is_family=active.plan == lifecycle.FAMILY_PLAN,
            subscription=Subscription.model_validate(active),
        )

    async def is_premium(self, db: AsyncSession, user_id: uuid.UUID) -> bool:
        active = await self.subscriptions.get_latest_active(db, user_id, paid_only=True)
        return active is not None


subscription_service = SubscriptionService()
