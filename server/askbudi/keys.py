# server/askbudi/keys.py
"""API key store operations, always scoped to the owning user."""
import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from askbudi.config import settings
from askbudi.crypto import generate_api_key
from askbudi.errors import NotFoundError, ValidationError
from askbudi.models import ApiKey
from askbudi.profiles import get_profile, quota_for_plan
from askbudi.quota import count_key_usage, window_start
from askbudi.timeutil import utcnow

logger = logging.getLogger(__name__)


def generate_key_id() -> str:
    return f"key_{secrets.token_hex(12)}"


def count_active_keys(db: Session, user_id: str) -> int:
    return db.query(ApiKey).filter(
        ApiKey.user_id == user_id,
        ApiKey.is_active.is_(True),
    ).count()


def create_api_key(db: Session, user_id: str, name: Optional[str] = None) -> tuple[ApiKey, str]:
    """Issue a new key. Returns the stored row and the plaintext secret.

    The secret is not persisted anywhere; callers get exactly one chance to
    hand it to the user.
    """
    limit = settings.max_api_keys_per_user
    if count_active_keys(db, user_id) >= limit:
        raise ValidationError(f"Maximum of {limit} API keys allowed per user")

    profile = get_profile(db, user_id)
    quota_limit = quota_for_plan(profile.plan_type if profile else None)

    generated = generate_api_key()
    now = utcnow()
    api_key = ApiKey(
        id=generate_key_id(),
        user_id=user_id,
        key_hash=generated.digest,
        key_prefix=generated.display_prefix,
        name=name or None,
        is_active=True,
        quota_limit=quota_limit,
        quota_reset_at=now + timedelta(days=settings.usage_window_days),
        created_at=now,
    )
    db.add(api_key)
    db.commit()
    db.refresh(api_key)

    logger.info("Created API key %s for user %s", api_key.id, user_id)
    return api_key, generated.secret


def list_api_keys(db: Session, user_id: str) -> list[ApiKey]:
    return db.query(ApiKey).filter(
        ApiKey.user_id == user_id
    ).order_by(ApiKey.created_at.desc()).all()


def get_owned_key(db: Session, user_id: str, key_id: str) -> ApiKey:
    api_key = db.query(ApiKey).filter(
        ApiKey.id == key_id,
        ApiKey.user_id == user_id,
    ).first()
    if not api_key:
        raise NotFoundError("API key not found")
    return api_key


def key_window_usage(db: Session, api_key: ApiKey) -> int:
    return count_key_usage(db, api_key.key_hash, window_start(utcnow()))


def update_api_key(
    db: Session,
    user_id: str,
    key_id: str,
    *,
    name: Optional[str] = None,
    is_active: Optional[bool] = None,
    name_set: bool = False,
) -> ApiKey:
    """Rename and/or (de)activate a key.

    ``name_set`` distinguishes "clear the name" from "leave it alone".
    """
    api_key = get_owned_key(db, user_id, key_id)

    if name_set:
        api_key.name = name or None
    if is_active is not None:
        api_key.is_active = is_active
    api_key.updated_at = utcnow()

    db.commit()
    db.refresh(api_key)
    return api_key


def delete_api_key(db: Session, user_id: str, key_id: str) -> None:
    """Delete a key immediately. Its usage entries stay in the ledger."""
    api_key = get_owned_key(db, user_id, key_id)
    db.delete(api_key)
    db.commit()
    logger.info("Deleted API key %s for user %s", key_id, user_id)
