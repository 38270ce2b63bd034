import hmac
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidPlan, ProviderError, StoreError, Unauthorized
from app.models.base import utcnow
from app.models.subscription_model import Subscription
from app.modules.payment.events import BillingEventKind, parse_billing_event
from app.modules.payment.plans import PLANS
from app.modules.payment.provider import (
    STATUS_EXPIRED,
    STATUS_PAID,
    STATUS_REFUNDED,
    AbacatePayClient,
)
from app.modules.subscription import lifecycle
from app.repository.profile_repository import ProfileRepository, profile_repository
from app.repository.subscription_repository import SubscriptionRepository, subscription_repository
from app.schemas.auth_schema import AuthenticatedUser
from app.schemas.payment_schema import CreatePaymentResponse, VerifyPaymentResponse
from app.schemas.subscription_schema import Subscription as SubscriptionOut

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentConfig:
    app_base_url: str
    term_days: int = lifecycle.DEFAULT_TERM_DAYS
    webhook_secret: Optional[str] = None


def _parse_uuid(value: Optional[str]) -> Optional[uuid.UUID]:
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class PaymentService:
    """
    Reconciles the subscriptions table with AbacatePay charges.

    Three entry points share one row per charge: `create_payment` inserts the
    pending row, `handle_webhook` applies provider events, and `verify_payment`
    polls the provider on the client's behalf when a webhook is late or lost.
    """

    def __init__(
        self,
        provider: AbacatePayClient,
        config: PaymentConfig,
        subscriptions: SubscriptionRepository = subscription_repository,
        profiles: ProfileRepository = profile_repository,
    ):
        self.provider = provider
        self.config = config
        self.subscriptions = subscriptions
        self.profiles = profiles

    # --- Initiation ---

    async def _customer_name(self, db: AsyncSession, user: AuthenticatedUser) -> str:
        full_name = None
        try:
            profile = await self.profiles.get_by_user_id(db, user.id)
            full_name = profile.full_name if profile else None
        except SQLAlchemyError as e:
            await db.rollback()
            logger.warning(f"Could not load profile for user {user.id}: {e}")

        if full_name:
            return full_name
        if user.full_name:
            return user.full_name
        if user.email:
            return user.email.split("@")[0]
        return "Cliente"

    def _redirect_url(self, return_url: Optional[str], origin: Optional[str]) -> str:
        if return_url:
            return return_url
        base = origin or self.config.app_base_url
        return f"{base.rstrip('/')}/dashboard"

    async def create_payment(
        self,
        db: AsyncSession,
        user: AuthenticatedUser,
        plan: Optional[str],
        return_url: Optional[str] = None,
        origin: Optional[str] = None,
    ) -> CreatePaymentResponse:
        plan_config = PLANS.get(plan) if plan else None
        if plan_config is None:
            raise InvalidPlan("Invalid plan selected")

        customer_name = await self._customer_name(db, user)
        logger.info(f"Creating payment for user {user.id}, plan: {plan}, name: {customer_name}")

        redirect_url = self._redirect_url(return_url, origin)
        customer = {"name": customer_name, "email": user.email}
        if user.phone:
            customer["cellphone"] = user.phone

        billing = await self.provider.create_billing({
            "frequency": "ONE_TIME",
            "methods": ["PIX"],
            "products": [
                {
                    "externalId": f"{plan}-{user.id}",
                    "name": plan_config.name,
                    "description": plan_config.description,
                    "quantity": 1,
                    "price": plan_config.price_cents,
                }
            ],
            "returnUrl": redirect_url,
            "completionUrl": redirect_url,
            "customer": customer,
            "metadata": {"user_id": str(user.id), "plan": plan},
        })

        # The charge already exists at this point; a failed insert is left for verification to surface.
        try:
            await self.subscriptions.create_pending(
                db,
                user_id=user.id,
                plan=plan,
                payment_id=billing.id,
                price_cents=plan_config.price_cents,
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error creating subscription for billing {billing.id}: {e}")

        return CreatePaymentResponse(success=True, paymentUrl=billing.url, paymentId=billing.id)

    # --- State transitions ---

    async def _activate(
        self, db: AsyncSession, subscription: Subscription, payment_id: Optional[str] = None
    ) -> Subscription:
        if not lifecycle.can_transition(subscription.status, lifecycle.ACTIVE):
            logger.warning(
                f"Ignoring activation of subscription {subscription.id} in status '{subscription.status}'"
            )
            return subscription

        now = utcnow()
        subscription.starts_at, subscription.expires_at = lifecycle.activation_window(now, self.config.term_days)
        subscription.status = lifecycle.ACTIVE
        subscription.updated_at = now
        if payment_id and subscription.payment_id != payment_id:
            subscription.payment_id = payment_id
        subscription = await self.subscriptions.save(db, subscription)
        logger.info(f"Subscription {subscription.id} activated until {subscription.expires_at}")

        try:
            cancelled = await self.subscriptions.cancel_active_free(db, subscription.user_id, now)
            if cancelled:
                logger.info(f"Cancelled free plan for user {subscription.user_id}")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error cancelling free plan for user {subscription.user_id}: {e}")
        return subscription

    async def _set_status(self, db: AsyncSession, subscription: Subscription, target: str) -> Subscription:
        if subscription.status == target:
            return subscription
        if not lifecycle.can_transition(subscription.status, target):
            logger.warning(
                f"Ignoring transition of subscription {subscription.id} from '{subscription.status}' to '{target}'"
            )
            return subscription

        subscription.status = target
        subscription.updated_at = utcnow()
        subscription = await self.subscriptions.save(db, subscription)
        logger.info(f"Subscription {subscription.id} is now {target}")
        return subscription

    # --- Webhook ---

    def check_webhook_secret(self, provided: Optional[str]) -> None:
        """No-op unless a webhook secret is configured."""
        expected = self.config.webhook_secret
        if not expected:
            return
        if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
            raise Unauthorized("Invalid webhook secret")

    async def handle_webhook(self, db: AsyncSession, payload: Any) -> dict:
        event = parse_billing_event(payload)
        logger.info(
            f"Processing webhook event: {event.event}, billing ID: {event.billing_id}, status: {event.status}"
        )

        if not event.billing_id:
            logger.info("No billing ID found in webhook")
            return {"received": True, "event": event.event, "billingId": None, "message": "No billing ID"}

        try:
            if event.kind is BillingEventKind.PAID:
                await self._apply_paid_event(db, event.billing_id, event.user_id, event.plan)
            elif event.kind is BillingEventKind.EXPIRED:
                await self._apply_status_event(db, event.billing_id, lifecycle.EXPIRED)
            elif event.kind is BillingEventKind.REFUNDED:
                await self._apply_status_event(db, event.billing_id, lifecycle.CANCELLED)
            else:
                logger.info(f"Webhook event {event.event} ({event.status}) needs no action")
        except SQLAlchemyError as e:
            # Acknowledge anyway; the verification poll is the compensating path.
            await db.rollback()
            logger.error(f"Error updating subscription for billing {event.billing_id}: {e}")

        return {"received": True, "event": event.event, "billingId": event.billing_id}

    async def _apply_paid_event(
        self, db: AsyncSession, billing_id: str, user_id: Optional[str], plan: Optional[str]
    ) -> None:
        logger.info(f"Payment confirmed for user {user_id}, plan: {plan}")
        subscription = await self.subscriptions.get_by_payment_id(db, billing_id)

        if subscription is None:
            owner = _parse_uuid(user_id)
            if owner is not None:
                subscription = await self.subscriptions.get_latest_pending(
                    db, owner, plan=plan if plan in lifecycle.PAID_PLANS else None
                )
            if subscription is None:
                logger.warning(f"No subscription found for billing {billing_id}")
                return
            logger.info(f"Matched billing {billing_id} to pending subscription {subscription.id} via user_id")

        await self._activate(db, subscription, payment_id=billing_id)

    async def _apply_status_event(self, db: AsyncSession, billing_id: str, target: str) -> None:
        subscription = await self.subscriptions.get_by_payment_id(db, billing_id)
        if subscription is None:
            logger.warning(f"No subscription found for billing {billing_id}")
            return
        await self._set_status(db, subscription, target)

    # --- Verification ---

    async def verify_payment(self, db: AsyncSession, user: AuthenticatedUser) -> VerifyPaymentResponse:
        logger.info(f"Verifying payment for user: {user.id}")
        try:
            pending = await self.subscriptions.get_latest_pending(db, user.id)
            active = None
            if pending is None:
                active = await self.subscriptions.get_latest_active(db, user.id, paid_only=True)
        except SQLAlchemyError as e:
            logger.error(f"Subscription query error: {e}")
            raise StoreError("Error fetching subscription") from e

        if pending is None:
            if active is not None:
                return VerifyPaymentResponse(
                    success=True,
                    status="active",
                    message="Subscription already active",
                    subscription=SubscriptionOut.model_validate(active),
                )
            return VerifyPaymentResponse(success=False, status="no_pending", message="No pending payment found")

        if not pending.payment_id:
            return VerifyPaymentResponse(success=False, status="pending", message="Payment still processing")

        logger.info(f"Checking payment status for: {pending.payment_id}")
        try:
            billing = await self.provider.find_billing(pending.payment_id)
        except ProviderError as e:
            raise ProviderError("Error checking payment status") from e

        if billing is None:
            logger.info("Billing not found in AbacatePay response")
            return VerifyPaymentResponse(success=False, status="pending", message="Payment still processing")

        billing_status = billing.get("status")
        logger.info(f"Payment status: {billing_status}")

        if billing_status == STATUS_PAID:
            try:
                subscription = await self._activate(db, pending)
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(f"Error updating subscription: {e}")
                raise StoreError("Error activating subscription") from e
            return VerifyPaymentResponse(
                success=True,
                status="active",
                message="Payment confirmed! Subscription activated.",
                subscription=SubscriptionOut.model_validate(subscription),
            )

        if billing_status in (STATUS_EXPIRED, STATUS_REFUNDED):
            target = lifecycle.EXPIRED if billing_status == STATUS_EXPIRED else lifecycle.CANCELLED
            reported = billing_status.lower()
            try:
                await self._set_status(db, pending, target)
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(f"Error marking subscription {pending.id} as {target}: {e}")
            return VerifyPaymentResponse(success=False, status=reported, message=f"Payment {reported}")

        return VerifyPaymentResponse(success=False, status="pending", message="Payment still pending")
