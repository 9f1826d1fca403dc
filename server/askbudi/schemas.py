# server/askbudi/schemas.py
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool


# Auth schemas
class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)


class SignupResponse(BaseModel):
    user_id: str
    token: str
    expires_in: int


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    token: str
    expires_in: int


# API key schemas
class ApiKeyCreateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)


class ApiKeyUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    is_active: Optional[StrictBool] = None


class ApiKeyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    key_prefix: str
    name: Optional[str] = None
    is_active: bool
    quota_limit: int
    quota_used: int = 0
    quota_reset_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None


class ApiKeyWithSecret(ApiKeyResponse):
    api_key: str


# Account schemas
class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    plan_type: str
    monthly_quota: int
    credits_remaining: int
    credits_used_this_month: int
    billing_customer_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProfileUpdateRequest(BaseModel):
    billing_customer_id: Optional[str] = None


class UsageStatsResponse(BaseModel):
    total_requests: int
    requests_this_month: int
    credits_used: int
    quota_remaining: int
    monthly_quota: int
    credits_remaining: int


class AnalyticsOverview(BaseModel):
    api_requests: int
    monthly_limit: int
    usage_percentage: float
    avg_response_time: int
    success_rate: float
    unique_libraries: int


class PerformanceStats(BaseModel):
    average: int
    p95: int
    p99: int


class LibraryUsage(BaseModel):
    name: str
    requests: int
    percentage: float


class DailyUsage(BaseModel):
    date: str
    requests: int


class AnalyticsStats(BaseModel):
    total_requests_all_time: int
    requests_last_7_days: int


class AnalyticsResponse(BaseModel):
    overview: AnalyticsOverview
    performance: PerformanceStats
    top_libraries: list[LibraryUsage]
    daily_usage: list[DailyUsage]
    insights: str
    stats: AnalyticsStats


# Library schemas
class LibraryResult(BaseModel):
    library_id: str
    name: str
    aliases: dict[str, str]
    available_versions: list[str]
    metadata: dict[str, Any]
    relevance_score: Optional[float] = None


class LibrarySearchResponse(BaseModel):
    results: list[LibraryResult]
    total_count: int
    search_term: str


class DocSnippet(BaseModel):
    content: str
    relevance_score: float
    version: str


class LibraryDocsResponse(BaseModel):
    library_name: str
    library_id: str
    version: str
    snippets: list[DocSnippet]
    total_snippets: int
    prompt: str


# Usage ledger request metadata, tagged by endpoint kind
class SearchRequestMeta(BaseModel):
    kind: Literal["search"] = "search"
    search_term: str
    limit: int

    @property
    def library(self) -> Optional[str]:
        return None


class DocsRequestMeta(BaseModel):
    kind: Literal["docs"] = "docs"
    library_id: str
    prompt: str
    version: Optional[str] = None
    limit: int

    @property
    def library(self) -> Optional[str]:
        return self.library_id


RequestMeta = Annotated[Union[SearchRequestMeta, DocsRequestMeta], Field(discriminator="kind")]


# Billing webhook
class WebhookEvent(BaseModel):
    event_type: Optional[str] = None
    customer_id: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)


class WebhookAck(BaseModel):
    received: bool = True


# Health schemas
class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
    timestamp: datetime
    service: str
