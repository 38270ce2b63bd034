# app/schemas/card_schema.py
import uuid
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class CardTemplate(BaseModel):
    id: str
    name: str
    emoji: str
    is_premium: bool

class CardCreate(BaseModel):
    title: str = Field(min_length=1, max_length=120)
    message: Optional[str] = None
    recipient_name: Optional[str] = Field(default=None, max_length=255)
    countdown_date: Optional[datetime] = None
    template: str = "christmas-classic"
    is_public: bool = True

class Card(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    message: Optional[str] = None
    recipient_name: Optional[str] = None
    countdown_date: Optional[datetime] = None
    template: str
    share_slug: str
    is_public: bool
    views: int
    created_at: datetime

class Countdown(BaseModel):
    days: int
    hours: int
    minutes: int
    seconds: int

class PublicCard(BaseModel):
    id: uuid.UUID
    title: str
    message: Optional[str] = None
    recipient_name: Optional[str] = None
    countdown_date: Optional[datetime] = None
    template: CardTemplate
    views: int
    countdown: Optional[Countdown] = None
