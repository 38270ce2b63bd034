from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db
from app.modules.subscription.service import subscription_service
from app.schemas.auth_schema import AuthenticatedUser
from app.schemas.subscription_schema import SubscriptionStatus

router = APIRouter(tags=["Subscription"])


@router.get("/subscription", response_model=SubscriptionStatus)
async def get_subscription_status(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await subscription_service.get_subscription_status(db, current_user.id)
