# server/askbudi/billing.py
"""Billing provider webhook processing.

Each handler swallows and logs its own failures; the webhook endpoint
acknowledges every delivery so the provider never redelivers in a loop.
"""
import logging
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from askbudi import metrics
from askbudi.models import User
from askbudi.profiles import get_or_create_profile, get_profile, quota_for_plan
from askbudi.timeutil import utcnow

logger = logging.getLogger(__name__)


def determine_plan(data: dict[str, Any]) -> tuple[str, int]:
    """Map webhook subscription data to ``(plan_type, monthly_quota)``."""
    product_id = str(data.get("product_id") or data.get("plan_id") or "")
    quota = data.get("monthly_quota")
    if not isinstance(quota, (int, float)):
        quota = 0

    if "enterprise" in product_id or quota >= quota_for_plan("enterprise"):
        plan_type = "enterprise"
    elif "pro" in product_id or quota >= quota_for_plan("pro"):
        plan_type = "pro"
    else:
        plan_type = "free"
    return plan_type, quota_for_plan(plan_type)


def _known_user(db: Session, customer_id: Optional[str]) -> bool:
    if not customer_id:
        return False
    return db.query(User.id).filter(User.id == customer_id).first() is not None


def handle_subscription_update(db: Session, customer_id: str, data: dict[str, Any]) -> None:
    plan_type, monthly_quota = determine_plan(data)

    profile = get_or_create_profile(db, customer_id)
    profile.plan_type = plan_type
    profile.monthly_quota = monthly_quota
    billing_customer_id = data.get("customer_id") or data.get("stripe_customer_id")
    if billing_customer_id:
        profile.billing_customer_id = billing_customer_id
    profile.updated_at = utcnow()
    db.commit()

    logger.info("Updated subscription for customer %s to %s", customer_id, plan_type)


def handle_subscription_cancelled(db: Session, customer_id: str, data: dict[str, Any]) -> None:
    profile = get_profile(db, customer_id)
    if profile is None:
        logger.info("No profile to downgrade for customer %s", customer_id)
        return

    profile.plan_type = "free"
    profile.monthly_quota = quota_for_plan("free")
    profile.updated_at = utcnow()
    db.commit()

    logger.info("Downgraded customer %s to free plan", customer_id)


def handle_payment_succeeded(db: Session, customer_id: str, data: dict[str, Any]) -> None:
    profile = get_profile(db, customer_id)
    if profile is None:
        return

    # New billing period: reset the advisory credit counters
    profile.credits_remaining = profile.monthly_quota
    profile.credits_used_this_month = 0
    profile.updated_at = utcnow()
    db.commit()

    logger.info("Reset credits for customer %s", customer_id)


def handle_payment_failed(db: Session, customer_id: str, data: dict[str, Any]) -> None:
    logger.warning("Payment failed for customer %s: %s", customer_id, data)


EVENT_HANDLERS: dict[str, Callable[[Session, str, dict[str, Any]], None]] = {
    "subscription.created": handle_subscription_update,
    "subscription.updated": handle_subscription_update,
    "subscription.cancelled": handle_subscription_cancelled,
    "customer.subscription.deleted": handle_subscription_cancelled,
    "invoice.payment_succeeded": handle_payment_succeeded,
    "invoice.payment_failed": handle_payment_failed,
}


def process_webhook_event(
    db: Session,
    event_type: Optional[str],
    customer_id: Optional[str],
    data: Optional[dict[str, Any]] = None,
) -> str:
    """Dispatch one webhook event. Returns the outcome label; never raises."""
    handler = EVENT_HANDLERS.get(event_type or "")
    if handler is None:
        logger.info("Unhandled webhook event: %s", event_type)
        outcome = "ignored"
    else:
        try:
            if _known_user(db, customer_id):
                handler(db, customer_id, data or {})
                outcome = "processed"
            else:
                logger.warning("Webhook %s for unknown customer %s", event_type, customer_id)
                outcome = "unknown_customer"
        except Exception:
            db.rollback()
            logger.exception("Error handling webhook event %s for %s", event_type, customer_id)
            outcome = "failed"

    metrics.webhook_events.labels(event_type=event_type or "unknown", outcome=outcome).inc()
    return outcome
