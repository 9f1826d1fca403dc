"""Response types for askbudi-client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class LibraryResult:
    """A catalog entry returned by library search."""

    library_id: str
    name: str
    aliases: dict[str, str]
    available_versions: list[str]
    metadata: dict[str, Any]
    relevance_score: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LibraryResult:
        return cls(
            library_id=data["library_id"],
            name=data["name"],
            aliases=data.get("aliases", {}),
            available_versions=data.get("available_versions", []),
            metadata=data.get("metadata", {}),
            relevance_score=data.get("relevance_score"),
        )


@dataclass(frozen=True)
class LibrarySearchResponse:
    results: list[LibraryResult]
    total_count: int
    search_term: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LibrarySearchResponse:
        return cls(
            results=[LibraryResult.from_dict(item) for item in data["results"]],
            total_count=data["total_count"],
            search_term=data["search_term"],
        )


@dataclass(frozen=True)
class DocSnippet:
    content: str
    relevance_score: float
    version: str


@dataclass(frozen=True)
class LibraryDocsResponse:
    """Documentation snippets for one library."""

    library_name: str
    library_id: str
    version: str
    snippets: list[DocSnippet]
    total_snippets: int
    prompt: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LibraryDocsResponse:
        return cls(
            library_name=data["library_name"],
            library_id=data["library_id"],
            version=data["version"],
            snippets=[
                DocSnippet(
                    content=item["content"],
                    relevance_score=item["relevance_score"],
                    version=item["version"],
                )
                for item in data["snippets"]
            ],
            total_snippets=data["total_snippets"],
            prompt=data["prompt"],
        )


@dataclass(frozen=True)
class Profile:
    """Account profile. Plan and quota are managed by billing."""

    id: str
    plan_type: str
    monthly_quota: int
    credits_remaining: int
    credits_used_this_month: int
    billing_customer_id: str | None
    created_at: str
    updated_at: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Profile:
        return cls(
            id=data["id"],
            plan_type=data["plan_type"],
            monthly_quota=data["monthly_quota"],
            credits_remaining=data["credits_remaining"],
            credits_used_this_month=data["credits_used_this_month"],
            billing_customer_id=data.get("billing_customer_id"),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )


@dataclass(frozen=True)
class ApiKey:
    """An issued API key. Never carries the secret."""

    id: str
    key_prefix: str
    name: str | None
    is_active: bool
    quota_limit: int
    quota_used: int
    created_at: str
    quota_reset_at: str | None = None
    updated_at: str | None = None
    last_used_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApiKey:
        return cls(
            id=data["id"],
            key_prefix=data["key_prefix"],
            name=data.get("name"),
            is_active=data["is_active"],
            quota_limit=data["quota_limit"],
            quota_used=data.get("quota_used", 0),
            created_at=data["created_at"],
            quota_reset_at=data.get("quota_reset_at"),
            updated_at=data.get("updated_at"),
            last_used_at=data.get("last_used_at"),
        )


@dataclass(frozen=True)
class CreatedApiKey:
    """A newly issued key together with its secret, shown only this once."""

    key: ApiKey
    api_key: str


@dataclass(frozen=True)
class UsageStats:
    total_requests: int
    requests_this_month: int
    credits_used: int
    quota_remaining: int
    monthly_quota: int
    credits_remaining: int


@dataclass(frozen=True)
class LibraryUsage:
    name: str
    requests: int
    percentage: float


@dataclass(frozen=True)
class DailyUsage:
    date: str
    requests: int


@dataclass(frozen=True)
class Analytics:
    """Usage analytics over the rolling 30-day window."""

    api_requests: int
    monthly_limit: int
    usage_percentage: float
    avg_response_time: int
    success_rate: float
    unique_libraries: int
    p95_response_time: int
    p99_response_time: int
    top_libraries: list[LibraryUsage]
    daily_usage: list[DailyUsage]
    insights: str
    total_requests_all_time: int
    requests_last_7_days: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Analytics:
        overview = data["overview"]
        return cls(
            api_requests=overview["api_requests"],
            monthly_limit=overview["monthly_limit"],
            usage_percentage=overview["usage_percentage"],
            avg_response_time=overview["avg_response_time"],
            success_rate=overview["success_rate"],
            unique_libraries=overview["unique_libraries"],
            p95_response_time=data["performance"]["p95"],
            p99_response_time=data["performance"]["p99"],
            top_libraries=[LibraryUsage(**item) for item in data["top_libraries"]],
            daily_usage=[DailyUsage(**item) for item in data["daily_usage"]],
            insights=data["insights"],
            total_requests_all_time=data["stats"]["total_requests_all_time"],
            requests_last_7_days=data["stats"]["requests_last_7_days"],
        )


@dataclass(frozen=True)
class HealthStatus:
    status: str
    version: str
    database: str
    timestamp: str
    service: str
