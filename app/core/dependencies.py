from functools import lru_cache
from typing import AsyncGenerator, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.database import db_manager
from app.core.exceptions import Unauthorized
from app.modules.payment.provider import AbacatePayClient
from app.modules.payment.service import PaymentConfig, PaymentService
from app.schemas.auth_schema import AuthenticatedUser
from app.utils.auth import decode_access_token

# auto_error is off so a missing header surfaces as our own Unauthorized error
bearer_scheme = HTTPBearer(auto_error=False)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in db_manager.get_db_session():
        yield session


@lru_cache
def get_payment_service() -> PaymentService:
    """Builds the payment service once from settings; tests override this dependency."""
    provider = AbacatePayClient(
        base_url=settings.ABACATEPAY_BASE_URL,
        api_key=settings.ABACATEPAY_API_KEY,
        timeout=settings.ABACATEPAY_TIMEOUT_SECONDS,
    )
    config = PaymentConfig(
        app_base_url=settings.APP_BASE_URL,
        term_days=settings.SUBSCRIPTION_TERM_DAYS,
        webhook_secret=settings.ABACATEPAY_WEBHOOK_SECRET,
    )
    return PaymentService(provider=provider, config=config)

# --- User Authentication Dependencies ---

def authenticate(credentials: Optional[HTTPAuthorizationCredentials]) -> AuthenticatedUser:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Authorization header required")
    return decode_access_token(credentials.credentials)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """
    Dependency to get the current user from the auth provider's bearer token.
    """
    return authenticate(credentials)
