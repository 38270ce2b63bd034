from .base import Base
from .profile_model import Profile
from .subscription_model import Subscription
from .card_model import Card

__all__ = [
    "Base",
    "Profile",
    "Subscription",
    "Card",
]
