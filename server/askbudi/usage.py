# server/askbudi/usage.py
"""Usage ledger writes and account-level usage stats."""
import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from askbudi import metrics
from askbudi.config import settings
from askbudi.models import UsageLog
from askbudi.profiles import get_monthly_quota
from askbudi.quota import window_start
from askbudi.schemas import RequestMeta
from askbudi.timeutil import utcnow

logger = logging.getLogger(__name__)


def record_usage(
    db: Session,
    *,
    user_id: str,
    api_key_hash: str,
    endpoint: str,
    request_meta: RequestMeta,
    response_meta: Optional[dict[str, Any]] = None,
    cost: int = 1,
    latency_ms: Optional[int] = None,
    status_code: int = 200,
) -> bool:
    """Append one usage entry.

    Never raises: a lost entry is preferable to failing a request that has
    already been served. Returns whether the entry was written.
    """
    try:
        entry = UsageLog(
            user_id=user_id,
            api_key_hash=api_key_hash,
            endpoint=endpoint,
            request_data=request_meta.model_dump(),
            response_data=response_meta,
            library=request_meta.library,
            tokens_used=cost,
            response_time_ms=latency_ms,
            status_code=status_code,
            created_at=utcnow(),
        )
        db.add(entry)
        db.commit()
    except Exception:
        logger.exception(
            "Failed to record usage for user %s key %s... on %s",
            user_id, api_key_hash[:8], endpoint,
        )
        metrics.usage_record_failures.inc()
        try:
            db.rollback()
        except Exception:
            logger.warning("Rollback after failed usage write also failed", exc_info=True)
        return False

    logger.debug("Recorded usage for user %s on %s (cost %d)", user_id, endpoint, cost)
    return True


def count_user_usage(db: Session, user_id: str, since: Optional[datetime] = None) -> int:
    query = db.query(func.count(UsageLog.id)).filter(UsageLog.user_id == user_id)
    if since is not None:
        query = query.filter(UsageLog.created_at >= since)
    return query.scalar() or 0


def get_usage_stats(db: Session, user_id: str, now: Optional[datetime] = None) -> dict:
    """All-time and rolling-window request counts against the account quota."""
    now = now or utcnow()
    total = count_user_usage(db, user_id)
    in_window = count_user_usage(db, user_id, since=window_start(now))
    monthly_quota = get_monthly_quota(db, user_id)
    remaining = max(0, monthly_quota - in_window)

    return {
        "total_requests": total,
        "requests_this_month": in_window,
        "credits_used": in_window,
        "quota_remaining": remaining,
        "monthly_quota": monthly_quota,
        "credits_remaining": remaining,
    }


def prune_usage(db: Session, older_than_days: int, now: Optional[datetime] = None) -> int:
    """Delete usage entries older than the retention period. Returns rows deleted."""
    if older_than_days < settings.usage_window_days:
        # Pruning inside the quota window would hand out fresh quota
        raise ValueError(
            f"Retention must be at least {settings.usage_window_days} days"
        )
    now = now or utcnow()
    cutoff = now - timedelta(days=older_than_days)
    deleted = db.query(UsageLog).filter(UsageLog.created_at < cutoff).delete(
        synchronize_session=False
    )
    db.commit()
    logger.info("Pruned %d usage entries older than %s", deleted, cutoff.isoformat())
    return deleted
