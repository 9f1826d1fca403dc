# server/askbudi/quota.py
"""API key validation and rolling-window quota checks.

Usage is always counted over ``now - usage_window_days``; the key's
``quota_reset_at`` column is never consulted. The count and the comparison
are separate statements, so concurrent requests can overshoot a quota by a
few entries.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy import func
from sqlalchemy.orm import Session

from askbudi.auth import extract_bearer
from askbudi.config import settings
from askbudi.crypto import hash_api_key, is_valid_key_format
from askbudi.database import get_db
from askbudi.errors import AuthError, QuotaExceededError
from askbudi.models import ApiKey, UsageLog
from askbudi.timeutil import utcnow

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = 'API key required. Please include "Authorization: Bearer YOUR_API_KEY" header'


class KeyStatus(str, enum.Enum):
    INVALID_FORMAT = "invalid_format"
    NOT_FOUND_OR_INACTIVE = "not_found_or_inactive"
    VALID = "valid"


@dataclass(frozen=True)
class QuotaCheck:
    status: KeyStatus
    user_id: Optional[str] = None
    key_id: Optional[str] = None
    key_hash: Optional[str] = None
    quota_used: int = 0
    quota_limit: int = 0
    quota_exceeded: bool = False

    @property
    def valid(self) -> bool:
        return self.status is KeyStatus.VALID


def window_start(now: datetime, days: Optional[int] = None) -> datetime:
    return now - timedelta(days=days if days is not None else settings.usage_window_days)


def count_key_usage(db: Session, key_hash: str, since: datetime) -> int:
    """Number of usage entries recorded against a key digest since ``since``."""
    return db.query(func.count(UsageLog.id)).filter(
        UsageLog.api_key_hash == key_hash,
        UsageLog.created_at >= since,
    ).scalar() or 0


def _touch_last_used(db: Session, api_key: ApiKey, now: datetime) -> None:
    try:
        api_key.last_used_at = now
        db.commit()
    except Exception:
        db.rollback()
        logger.warning("Failed to update last_used_at for key %s", api_key.id, exc_info=True)


def validate_api_key(db: Session, presented: str, now: Optional[datetime] = None) -> QuotaCheck:
    """Validate a presented key and evaluate its rolling-window quota."""
    if not is_valid_key_format(presented):
        return QuotaCheck(status=KeyStatus.INVALID_FORMAT)

    key_hash = hash_api_key(presented)
    api_key = db.query(ApiKey).filter(
        ApiKey.key_hash == key_hash,
        ApiKey.is_active.is_(True),
    ).first()

    if not api_key:
        return QuotaCheck(status=KeyStatus.NOT_FOUND_OR_INACTIVE)

    now = now or utcnow()
    used = count_key_usage(db, key_hash, window_start(now))

    # Read everything we need before the commit expires the instance
    result = QuotaCheck(
        status=KeyStatus.VALID,
        user_id=api_key.user_id,
        key_id=api_key.id,
        key_hash=key_hash,
        quota_used=used,
        quota_limit=api_key.quota_limit,
        quota_exceeded=used >= api_key.quota_limit,
    )

    _touch_last_used(db, api_key, now)

    return result


async def require_api_key(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> QuotaCheck:
    """Gateway dependency: valid, active key with quota remaining."""
    presented = extract_bearer(authorization)
    if presented is None:
        raise AuthError(MISSING_KEY_MESSAGE)

    check = validate_api_key(db, presented)

    if check.status is KeyStatus.INVALID_FORMAT:
        raise AuthError("Invalid API key format")
    if check.status is KeyStatus.NOT_FOUND_OR_INACTIVE:
        raise AuthError("API key not found or inactive")
    if check.quota_exceeded:
        logger.info(
            "Quota exceeded for user %s (%d/%d)",
            check.user_id, check.quota_used, check.quota_limit,
        )
        raise QuotaExceededError(
            used=check.quota_used,
            limit=check.quota_limit,
            window_days=settings.usage_window_days,
        )

    return check
