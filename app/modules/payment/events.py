"""Normalization of AbacatePay webhook payloads into typed billing events."""
import enum
from dataclasses import dataclass
from typing import Any, Optional

from app.core.exceptions import MalformedRequest
from app.modules.payment.provider import STATUS_EXPIRED, STATUS_PAID, STATUS_REFUNDED


class BillingEventKind(enum.Enum):
    PAID = "paid"
    EXPIRED = "expired"
    REFUNDED = "refunded"
    IGNORED = "ignored"


@dataclass(frozen=True)
class BillingEvent:
    kind: BillingEventKind
    event: Optional[str]
    billing_id: Optional[str]
    status: Optional[str]
    user_id: Optional[str] = None
    plan: Optional[str] = None


# checked in order; the first match wins
_EVENT_RULES = (
    (BillingEventKind.PAID, "billing.paid", STATUS_PAID),
    (BillingEventKind.EXPIRED, "billing.expired", STATUS_EXPIRED),
    (BillingEventKind.REFUNDED, "billing.refunded", STATUS_REFUNDED),
)


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def classify(event: Optional[str], status: Optional[str]) -> BillingEventKind:
    for kind, event_name, status_name in _EVENT_RULES:
        if event == event_name or status == status_name:
            return kind
    return BillingEventKind.IGNORED


def parse_billing_event(payload: Any) -> BillingEvent:
    """
    Accepts both the nested shape `{event, data: {billing: {...}}}` and the flat
    shape where id, status and metadata sit at the top level.
    """
    if not isinstance(payload, dict):
        raise MalformedRequest("Webhook payload must be a JSON object")

    billing = _as_dict(_as_dict(payload.get("data")).get("billing")) or _as_dict(payload.get("billing"))
    metadata = _as_dict(billing.get("metadata")) or _as_dict(payload.get("metadata"))

    event = _as_str(payload.get("event"))
    billing_id = _as_str(billing.get("id") or payload.get("id"))
    status = _as_str(billing.get("status") or payload.get("status"))

    return BillingEvent(
        kind=classify(event, status),
        event=event,
        billing_id=billing_id,
        status=status,
        user_id=_as_str(metadata.get("user_id")),
        plan=_as_str(metadata.get("plan")),
    )
