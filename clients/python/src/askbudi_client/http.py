"""HTTP helpers with retry policy for askbudi-client."""

from __future__ import annotations

import random
import sys
from typing import Any

from askbudi_client.errors import (
    AskBudiError,
    AuthenticationError,
    NotFoundError,
    QuotaExceededError,
    ServerError,
    ValidationError,
)

VERSION = "0.1.0"

RETRY_CONFIG: dict[str, Any] = {
    "base_delay": 1.0,
    "max_delay": 30.0,
    "jitter_factor": 0.2,
    "retryable_statuses": [500, 502, 503, 504],
}


def calculate_delay(attempt: int) -> float:
    """Exponential backoff for a 0-indexed retry attempt, with ±20% jitter."""
    base_delay: float = RETRY_CONFIG["base_delay"]
    max_delay: float = RETRY_CONFIG["max_delay"]
    jitter_factor: float = RETRY_CONFIG["jitter_factor"]

    delay = min(base_delay * (2**attempt), max_delay)
    jitter = delay * jitter_factor * (2 * random.random() - 1)
    return delay + jitter


_STATUS_ERRORS: dict[int, tuple[type[AskBudiError], str]] = {
    400: (ValidationError, "validation_error"),
    401: (AuthenticationError, "authentication_error"),
    404: (NotFoundError, "not_found"),
    429: (QuotaExceededError, "quota_exceeded"),
}


def map_status_to_error(status: int, body: dict[str, Any]) -> AskBudiError:
    """Map an error response to the matching exception.

    Args:
        status: HTTP status code.
        body: Response body; the server puts its message under ``error``.

    Returns:
        AskBudiError subclass instance.
    """
    message = body.get("error") or f"HTTP {status}"

    if status in _STATUS_ERRORS:
        error_class, code = _STATUS_ERRORS[status]
        return error_class(message=message, code=code, status=status)
    if status >= 500:
        return ServerError(message=message, code="server_error", status=status)
    return AskBudiError(message=message, code="unknown_error", status=status)


def build_headers() -> dict[str, str]:
    """Headers sent with every request. Authorization is added per request."""
    python_version = f"{sys.version_info.major}.{sys.version_info.minor}"
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": f"askbudi-client/{VERSION} python/{python_version}",
    }
