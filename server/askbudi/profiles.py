# server/askbudi/profiles.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from askbudi.config import settings
from askbudi.models import UserProfile
from askbudi.timeutil import utcnow

logger = logging.getLogger(__name__)

# Plan tier -> quota. Billing product ids are accepted as aliases.
QUOTA_LIMITS = {
    "free": 100,
    "free_plan": 100,
    "pro": 10000,
    "starter": 10000,
    "starter_monthly": 10000,
    "enterprise": 100000,
    "enterprise_plan": 100000,
}


def quota_for_plan(plan_type: Optional[str]) -> int:
    """Quota for a plan name, falling back to the free tier."""
    return QUOTA_LIMITS.get(plan_type or "free", QUOTA_LIMITS["free"])


def get_profile(db: Session, user_id: str) -> Optional[UserProfile]:
    return db.query(UserProfile).filter(UserProfile.id == user_id).first()


def get_or_create_profile(db: Session, user_id: str) -> UserProfile:
    """Return the user's profile, creating a free-tier one on first read."""
    profile = get_profile(db, user_id)
    if profile:
        return profile

    now = utcnow()
    free_quota = quota_for_plan("free")
    profile = UserProfile(
        id=user_id,
        plan_type="free",
        monthly_quota=free_quota,
        credits_remaining=free_quota,
        credits_used_this_month=0,
        created_at=now,
        updated_at=now,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info("Created default profile for user %s", user_id)
    return profile


def get_monthly_quota(db: Session, user_id: str) -> int:
    """Stored monthly quota, or the configured default when there is no profile."""
    profile = get_profile(db, user_id)
    if profile is None or not profile.monthly_quota:
        return settings.default_monthly_quota
    return profile.monthly_quota


def update_billing_customer(db: Session, user_id: str, billing_customer_id: Optional[str]) -> UserProfile:
    """Update the only user-editable profile field."""
    profile = get_or_create_profile(db, user_id)
    profile.billing_customer_id = billing_customer_id
    profile.updated_at = utcnow()
    db.commit()
    db.refresh(profile)
    return profile
