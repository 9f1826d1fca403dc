# server/askbudi/models.py
from sqlalchemy import Boolean, Column, String, Integer, DateTime, ForeignKey, Index, JSON
from askbudi.database import Base
from askbudi.timeutil import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(String, ForeignKey("users.id"), primary_key=True)
    plan_type = Column(String, nullable=False, default="free")
    monthly_quota = Column(Integer, nullable=False, default=100)
    credits_remaining = Column(Integer, nullable=False, default=100)
    credits_used_this_month = Column(Integer, nullable=False, default=0)
    billing_customer_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)


class ApiKey(Base):
    __tablename__ = "api_keys"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    key_hash = Column(String, unique=True, nullable=False, index=True)
    key_prefix = Column(String, nullable=False)
    name = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # Fixed at issuance from the owner's plan; not recomputed on plan changes
    quota_limit = Column(Integer, nullable=False)
    # Informational only, the evaluator always uses a rolling window
    quota_reset_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, nullable=True)
    last_used_at = Column(DateTime, nullable=True)


class UsageLog(Base):
    """One immutable row per accounted gateway request.

    References the key by digest rather than id so entries survive key deletion.
    """
    __tablename__ = "usage_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False)
    api_key_hash = Column(String, nullable=False)
    endpoint = Column(String, nullable=False)
    request_data = Column(JSON, nullable=True)
    response_data = Column(JSON, nullable=True)
    library = Column(String, nullable=True)
    tokens_used = Column(Integer, nullable=False, default=1)
    response_time_ms = Column(Integer, nullable=True)
    status_code = Column(Integer, nullable=False, default=200)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_usage_log_key_window", "api_key_hash", "created_at"),
        Index("idx_usage_log_user_window", "user_id", "created_at"),
    )
