"""Tests for HTTP helpers and retry policy."""

from __future__ import annotations

import sys

from askbudi_client.errors import (
    AskBudiError,
    AuthenticationError,
    NotFoundError,
    QuotaExceededError,
    ServerError,
    ValidationError,
)
from askbudi_client.http import (
    RETRY_CONFIG,
    build_headers,
    calculate_delay,
    map_status_to_error,
)


def test_retry_config_defaults():
    assert RETRY_CONFIG["base_delay"] == 1.0
    assert RETRY_CONFIG["max_delay"] == 30.0
    assert RETRY_CONFIG["jitter_factor"] == 0.2
    assert 500 in RETRY_CONFIG["retryable_statuses"]
    # Quota is a 30-day window; retrying a 429 cannot succeed
    assert 429 not in RETRY_CONFIG["retryable_statuses"]


def test_calculate_delay_exponential():
    assert 0.8 <= calculate_delay(0) <= 1.2
    assert 1.6 <= calculate_delay(1) <= 2.4
    assert 3.2 <= calculate_delay(2) <= 4.8


def test_calculate_delay_capped():
    assert calculate_delay(10) <= RETRY_CONFIG["max_delay"] * 1.2


def test_map_status_400_validation_error():
    error = map_status_to_error(400, {"error": "prompt parameter is required"})
    assert isinstance(error, ValidationError)
    assert str(error) == "prompt parameter is required"
    assert error.code == "validation_error"
    assert error.status == 400


def test_map_status_401_authentication_error():
    error = map_status_to_error(401, {"error": "Invalid API key format"})
    assert isinstance(error, AuthenticationError)


def test_map_status_404_not_found():
    error = map_status_to_error(404, {"error": "API key not found"})
    assert isinstance(error, NotFoundError)
    assert error.code == "not_found"


def test_map_status_429_quota_exceeded():
    error = map_status_to_error(429, {"error": "Quota exceeded. Used 3/3 requests in the last 30 days."})
    assert isinstance(error, QuotaExceededError)
    assert error.code == "quota_exceeded"


def test_map_status_5xx_server_error():
    assert isinstance(map_status_to_error(500, {"error": "Internal server error"}), ServerError)
    assert isinstance(map_status_to_error(503, {}), ServerError)


def test_map_status_unknown():
    error = map_status_to_error(418, {})
    assert type(error) is AskBudiError
    assert str(error) == "HTTP 418"


def test_build_headers_has_no_authorization():
    headers = build_headers()
    assert "Authorization" not in headers
    assert headers["Content-Type"] == "application/json"
    python_version = f"{sys.version_info.major}.{sys.version_info.minor}"
    assert headers["User-Agent"] == f"askbudi-client/0.1.0 python/{python_version}"
