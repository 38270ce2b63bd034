# app/models/subscription_model.py
import uuid
from sqlalchemy import Column, Integer, String, DateTime, Uuid, Index

from .base import Base, utcnow

PAYMENT_PROVIDER = "abacatepay"

class Subscription(Base):
    __tablename__ = 'subscriptions'
    __table_args__ = (
        Index("ix_subscriptions_user_status", "user_id", "status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)

    plan = Column(String(16), nullable=False)  # free | premium | family
    # pending -> active -> cancelled | expired
    status = Column(String(16), nullable=False, default='pending')

    # charge id from the provider, webhook correlation key
    payment_id = Column(String, nullable=True, unique=True, index=True)
    payment_provider = Column(String(32), nullable=True, default=PAYMENT_PROVIDER)
    price_cents = Column(Integer, nullable=False, default=0)

    starts_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
