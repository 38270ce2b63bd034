import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt

from app.core.config import settings
from app.core.exceptions import Unauthorized
from app.schemas.auth_schema import AuthenticatedUser

# --- Bearer token handling for auth provider issued JWTs ---

def create_access_token(
    user_id: uuid.UUID,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issues a token shaped like the auth provider's, for local development and tests."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    to_encode = {
        "sub": str(user_id),
        "aud": settings.JWT_AUDIENCE,
        "role": "authenticated",
        "exp": expire,
        "email": email,
        "user_metadata": {"full_name": full_name} if full_name else {},
    }
    return jwt.encode(to_encode, settings.SUPABASE_JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> AuthenticatedUser:
    """Verifies the token signature and audience and returns the identity it carries."""
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
        user_id = uuid.UUID(str(payload.get("sub")))
    except (JWTError, ValueError):
        raise Unauthorized("Invalid user token")

    user_metadata = payload.get("user_metadata") or {}
    return AuthenticatedUser(
        id=user_id,
        email=payload.get("email") or None,
        phone=payload.get("phone") or None,
        full_name=user_metadata.get("full_name") if isinstance(user_metadata, dict) else None,
    )
