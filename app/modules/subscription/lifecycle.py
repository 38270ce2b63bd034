"""Subscription plans, statuses and the transitions allowed between them."""
from datetime import datetime, timedelta

FREE_PLAN = "free"
PREMIUM_PLAN = "premium"
FAMILY_PLAN = "family"
PAID_PLANS = frozenset({PREMIUM_PLAN, FAMILY_PLAN})

PENDING = "pending"
ACTIVE = "active"
CANCELLED = "cancelled"
EXPIRED = "expired"

DEFAULT_TERM_DAYS = 365

# expired and cancelled are terminal; a new purchase creates a new row
_TRANSITIONS = {
    PENDING: {ACTIVE, EXPIRED, CANCELLED},
    ACTIVE: {ACTIVE, CANCELLED, EXPIRED},
    EXPIRED: set(),
    CANCELLED: set(),
}


def can_transition(current: str, target: str) -> bool:
    return target in _TRANSITIONS.get(current, set())


def activation_window(now: datetime, term_days: int = DEFAULT_TERM_DAYS) -> tuple[datetime, datetime]:
    """Returns (starts_at, expires_at) for a subscription activated at `now`."""
    return now, now + timedelta(days=term_days)
