# server/askbudi/routes/account.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from askbudi.analytics import compute_analytics
from askbudi.auth import get_current_user
from askbudi.database import get_db
from askbudi.models import User
from askbudi.profiles import get_or_create_profile, update_billing_customer
from askbudi.schemas import (
    AnalyticsResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    UsageStatsResponse,
)
from askbudi.usage import get_usage_stats

router = APIRouter(prefix="/v1/user", tags=["account"])


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Return the account profile, creating a free-tier one on first read."""
    return get_or_create_profile(db, user.id)


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    request: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # Plan and quota only change through the billing webhook
    return update_billing_customer(db, user.id, request.billing_customer_id)


@router.get("/usage", response_model=UsageStatsResponse)
def get_usage(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_usage_stats(db, user.id)


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return compute_analytics(db, user.id)
