"""Python client for the AskBudi API."""

from askbudi_client.client import Client
from askbudi_client.errors import (
    AskBudiError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    QuotaExceededError,
    ServerError,
    ValidationError,
)
from askbudi_client.types import (
    Analytics,
    ApiKey,
    CreatedApiKey,
    DocSnippet,
    HealthStatus,
    LibraryDocsResponse,
    LibraryResult,
    LibrarySearchResponse,
    Profile,
    UsageStats,
)

__version__ = "0.1.0"

__all__: list[str] = [
    "Client",
    "AskBudiError",
    "AuthenticationError",
    "NotFoundError",
    "QuotaExceededError",
    "ValidationError",
    "ServerError",
    "NetworkError",
    "Analytics",
    "ApiKey",
    "CreatedApiKey",
    "DocSnippet",
    "HealthStatus",
    "LibraryDocsResponse",
    "LibraryResult",
    "LibrarySearchResponse",
    "Profile",
    "UsageStats",
]
