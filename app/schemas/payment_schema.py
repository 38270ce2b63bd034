# app/schemas/payment_schema.py
from pydantic import BaseModel
from typing import Optional, Literal

from .subscription_schema import Subscription

VerificationStatus = Literal["active", "pending", "no_pending", "expired", "refunded"]

class CreatePaymentRequest(BaseModel):
    # validated against the plan table by the service so unknown plans surface as InvalidPlan
    plan: Optional[str] = None
    returnUrl: Optional[str] = None

class CreatePaymentResponse(BaseModel):
    success: bool = True
    paymentUrl: Optional[str] = None
    paymentId: str

class VerifyPaymentResponse(BaseModel):
    success: bool
    status: VerificationStatus
    message: str
    subscription: Optional[Subscription] = None
