# app/schemas/subscription_schema.py
import uuid
from pydantic import BaseModel, ConfigDict
from typing import Optional, Literal
from datetime import datetime

Plan = Literal["free", "premium", "family"]
SubscriptionStatusValue = Literal["pending", "active", "cancelled", "expired"]

class Subscription(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    plan: Plan
    status: SubscriptionStatusValue
    payment_id: Optional[str] = None
    payment_provider: Optional[str] = None
    price_cents: int
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

class SubscriptionStatus(BaseModel):
    plan: Plan = "free"
    is_premium: bool = False
    is_family: bool = False
    subscription: Optional[Subscription] = None
