# app/models/card_model.py
import uuid
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Uuid, Index

from .base import Base, utcnow

class Card(Base):
    __tablename__ = "cards"
    __table_args__ = (
        Index("ix_cards_user_created", "user_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)

    title = Column(String(120), nullable=False)
    message = Column(Text, nullable=True)
    recipient_name = Column(String(255), nullable=True)
    countdown_date = Column(DateTime(timezone=True), nullable=True)
    template = Column(String(64), nullable=False, default="christmas-classic")

    share_slug = Column(String(64), unique=True, index=True, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)
    views = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
