# server/askbudi/analytics.py
"""Per-account usage analytics over the rolling window."""
import math
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from askbudi.models import UsageLog
from askbudi.profiles import get_monthly_quota
from askbudi.quota import window_start
from askbudi.timeutil import utcnow
from askbudi.usage import count_user_usage

TOP_LIBRARY_COUNT = 5
DAILY_BUCKETS = 7


def round_half_up(value: float) -> int:
    # round() would send 2.5 to 2
    return math.floor(value + 0.5)


def percentile_index(n: int, q: float) -> int:
    """Index of the q-th percentile in a sorted list of length n."""
    return min(max(math.floor(n * q), 0), n - 1)


def response_time_stats(latencies: list[int]) -> dict:
    """Average, p95 and p99 of a list of latencies; all zero when empty."""
    values = sorted(latencies)
    if not values:
        return {"average": 0, "p95": 0, "p99": 0}

    n = len(values)
    return {
        "average": round_half_up(sum(values) / n),
        "p95": values[percentile_index(n, 0.95)],
        "p99": values[percentile_index(n, 0.99)],
    }


def success_rate(successful: int, total: int) -> float:
    """Percentage of 2xx requests, 100 when there were no requests."""
    if not total:
        return 100.0
    return round(successful / total * 100, 1)


def usage_insight(percentage: float) -> str:
    rounded = round_half_up(percentage)
    if percentage < 30:
        advice = "You have plenty of requests remaining this month."
    elif percentage < 70:
        advice = "Based on your current usage pattern, you're on track for a good month."
    elif percentage < 90:
        advice = "Consider monitoring your usage closely or upgrading your plan if needed."
    else:
        advice = "You may want to consider upgrading to avoid hitting your limit."
    return f"You're using {rounded}% of your monthly quota. {advice}"


def rank_libraries(counts: dict[str, int], window_total: int, top: int = TOP_LIBRARY_COUNT) -> list[dict]:
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:top]
    return [
        {
            "name": name,
            "requests": requests,
            "percentage": round(requests / window_total * 100, 1) if window_total else 0.0,
        }
        for name, requests in ranked
    ]


def bucket_daily(timestamps: list[datetime], now: datetime, days: int = DAILY_BUCKETS) -> list[dict]:
    """Count timestamps into trailing 24-hour buckets, oldest first.

    Bucket ``i`` covers ``[now - (i+1)d, now - i d)`` and is labelled with the
    date of its end, so the last bucket is "today".
    """
    buckets = []
    for i in range(days - 1, -1, -1):
        end = now - timedelta(days=i)
        start = end - timedelta(days=1)
        count = sum(1 for ts in timestamps if start <= ts < end)
        buckets.append({"date": end.date().isoformat(), "requests": count})
    return buckets


def compute_analytics(db: Session, user_id: str, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    since = window_start(now)
    # Include the request being evaluated at ``now`` in the last bucket
    bucket_end = now + timedelta(microseconds=1)

    monthly_quota = get_monthly_quota(db, user_id)
    total_requests = count_user_usage(db, user_id)

    in_window = db.query(UsageLog).filter(
        UsageLog.user_id == user_id,
        UsageLog.created_at >= since,
    )
    window_requests = in_window.count()

    successful = in_window.filter(
        UsageLog.status_code >= 200,
        UsageLog.status_code < 300,
    ).count()

    latencies = [
        row[0] for row in in_window.filter(
            UsageLog.response_time_ms.isnot(None)
        ).with_entities(UsageLog.response_time_ms).all()
    ]
    performance = response_time_stats(latencies)

    library_counts = dict(
        in_window.filter(UsageLog.library.isnot(None))
        .with_entities(UsageLog.library, func.count(UsageLog.id))
        .group_by(UsageLog.library)
        .all()
    )

    recent_since = bucket_end - timedelta(days=DAILY_BUCKETS)
    recent = [
        row[0] for row in db.query(UsageLog.created_at).filter(
            UsageLog.user_id == user_id,
            UsageLog.created_at >= recent_since,
        ).all()
    ]
    daily_usage = bucket_daily(recent, bucket_end)

    usage_percentage = window_requests / monthly_quota * 100

    return {
        "overview": {
            "api_requests": window_requests,
            "monthly_limit": monthly_quota,
            "usage_percentage": round(usage_percentage, 1),
            "avg_response_time": performance["average"],
            "success_rate": success_rate(successful, window_requests),
            "unique_libraries": len(library_counts),
        },
        "performance": performance,
        "top_libraries": rank_libraries(library_counts, window_requests),
        "daily_usage": daily_usage,
        "insights": usage_insight(usage_percentage),
        "stats": {
            "total_requests_all_time": total_requests,
            "requests_last_7_days": sum(day["requests"] for day in daily_usage),
        },
    }
