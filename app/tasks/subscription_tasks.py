# app/tasks/subscription_tasks.py
import asyncio
import logging
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import NullPool

from app.core.celery_app import celery_app
from app.core.config import settings
from app.core.database import DatabaseManager
from app.models.base import utcnow
from app.repository.subscription_repository import subscription_repository

logger = logging.getLogger(__name__)


async def expire_lapsed_subscriptions_async(
    session_factory: Optional[Callable[[], AsyncSession]] = None,
) -> int:
    """Marks active subscriptions whose term has ended as expired. Returns the number of rows changed."""
    manager = None
    if session_factory is None:
        # each task run gets its own event loop, so pooled connections cannot be reused
        manager = DatabaseManager(settings.DATABASE_URL, poolclass=NullPool)
        session_factory = manager.async_session_maker
    try:
        async with session_factory() as db:
            return await subscription_repository.expire_lapsed(db, utcnow())
    finally:
        if manager is not None:
            await manager.close()


@celery_app.task(name="tasks.expire_lapsed_subscriptions")
def expire_lapsed_subscriptions():
    """
    A periodic task to find and mark lapsed subscriptions as 'expired'.
    """
    logger.info("Running periodic task: expiring lapsed subscriptions")
    expired = asyncio.run(expire_lapsed_subscriptions_async())
    if expired:
        logger.info(f"Expired {expired} lapsed subscription(s).")
    else:
        logger.info("No lapsed subscriptions found.")
    return expired
