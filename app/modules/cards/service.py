import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import CardNotFound, FestivaError, PlanLimitReached, PremiumRequired
from app.models.base import utcnow
from app.models.card_model import Card
from app.modules.cards.templates import get_template, get_template_or_default
from app.modules.subscription.service import SubscriptionService, subscription_service
from app.repository.card_repository import CardRepository, card_repository
from app.schemas.card_schema import CardCreate, Countdown, PublicCard
from app.utils.generators import generate_share_slug

logger = logging.getLogger(__name__)

SLUG_ATTEMPTS = 3


def compute_countdown(target: Optional[datetime], now: Optional[datetime] = None) -> Optional[Countdown]:
    """Time left until `target`, floored at zero. Naive datetimes are read as UTC."""
    if target is None:
        return None
    if target.tzinfo is None:
        target = target.replace(tzinfo=timezone.utc)
    now = now or utcnow()
    remaining = max(int((target - now).total_seconds()), 0)
    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)
    return Countdown(days=days, hours=hours, minutes=minutes, seconds=seconds)


class CardService:
    def __init__(
        self,
        cards: CardRepository = card_repository,
        subscriptions: SubscriptionService = subscription_service,
        free_card_limit: int = settings.FREE_PLAN_CARD_LIMIT,
    ):
        self.cards = cards
        self.subscriptions = subscriptions
        self.free_card_limit = free_card_limit

    async def list_cards(self, db: AsyncSession, user_id: uuid.UUID) -> List[Card]:
        return await self.cards.list_by_user(db, user_id)

    async def create_card(self, db: AsyncSession, user_id: uuid.UUID, data: CardCreate) -> Card:
        template = get_template(data.template)
        if template is None:
            raise FestivaError(f"Unknown template '{data.template}'")

        is_premium = await self.subscriptions.is_premium(db, user_id)
        if template.is_premium and not is_premium:
            raise PremiumRequired("This template is only available on the Premium plan")
        if not is_premium and await self.cards.count_by_user(db, user_id) >= self.free_card_limit:
            raise PlanLimitReached("Free plan card limit reached. Upgrade to Premium to create more cards")

        for attempt in range(SLUG_ATTEMPTS):
            card = Card(
                user_id=user_id,
                title=data.title,
                message=data.message,
                recipient_name=data.recipient_name,
                countdown_date=data.countdown_date,
                template=template.id,
                share_slug=generate_share_slug(),
                is_public=data.is_public,
            )
            try:
                return await self.cards.add(db, card)
            except IntegrityError:
                await db.rollback()
                logger.warning(f"Share slug collision for user {user_id}, attempt {attempt + 1}")
        raise FestivaError("Could not allocate a share link, please try again", status_code=500)

    async def delete_card(self, db: AsyncSession, user_id: uuid.UUID, card_id: uuid.UUID) -> None:
        card = await self.cards.get_owned(db, card_id, user_id)
        if card is None:
            raise CardNotFound("Card not found")
        await self.cards.delete(db, card)

    async def view_public_card(self, db: AsyncSession, slug: str) -> PublicCard:
        """Loads a shared card and counts the view."""
        card = await self.cards.get_public_by_slug(db, slug)
        if card is None:
            raise CardNotFound("Card not found")
        card = await self.cards.increment_views(db, card)

        return PublicCard(
            id=card.id,
            title=card.title,
            message=card.message,
            recipient_name=card.recipient_name,
            countdown_date=card.countdown_date,
            template=get_template_or_default(card.template),
            views=card.views,
            countdown=compute_countdown(card.countdown_date),
        )


card_service = CardService()
