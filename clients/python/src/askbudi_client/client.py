"""Sync Client for the AskBudi API."""

from __future__ import annotations

import logging
import os
import time
from types import TracebackType
from typing import Any, Literal

import httpx

from askbudi_client.errors import AskBudiError, AuthenticationError, NetworkError
from askbudi_client.http import (
    RETRY_CONFIG,
    build_headers,
    calculate_delay,
    map_status_to_error,
)
from askbudi_client.types import (
    Analytics,
    ApiKey,
    CreatedApiKey,
    HealthStatus,
    LibraryDocsResponse,
    LibrarySearchResponse,
    Profile,
    UsageStats,
)

logger = logging.getLogger(__name__)

AuthKind = Literal["api_key", "session", "none"]


class Client:
    """Synchronous client for the AskBudi API.

    Library search and docs are metered and authenticate with an API key.
    Profile, usage, analytics and key management authenticate with a session
    token, which ``login`` obtains.

    Usage:
        with Client(api_key="vibe_...") as client:
            docs = client.get_library_docs("/fastapi/fastapi", "dependency injection")
            print(docs.snippets[0].content)

    Args:
        api_key: API key for metered endpoints. Falls back to ASKBUDI_API_KEY env var.
        base_url: Base URL for the API. Defaults to https://api.askbudi.ai
        timeout: Request timeout in seconds. Defaults to 30.0.
        retries: Retry attempts for server and network errors. Defaults to 3.
        session_token: Session token for account endpoints.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = "https://api.askbudi.ai",
        timeout: float = 30.0,
        retries: int = 3,
        *,
        session_token: str | None = None,
    ) -> None:
        self._api_key = api_key or os.environ.get("ASKBUDI_API_KEY")
        self._session_token = session_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retries = retries
        self._http_client = httpx.Client(timeout=timeout, headers=build_headers())

    def __enter__(self) -> Client:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._http_client.close()

    def _auth_header(self, auth: AuthKind) -> dict[str, str]:
        if auth == "none":
            return {}
        token = self._api_key if auth == "api_key" else self._session_token
        if not token:
            if auth == "api_key":
                msg = "API key required. Provide api_key or set ASKBUDI_API_KEY env var."
            else:
                msg = "Session required. Call login() or provide session_token."
            raise AuthenticationError(msg, code="missing_credentials")
        return {"Authorization": f"Bearer {token}"}

    def _request(
        self,
        method: str,
        path: str,
        *,
        auth: AuthKind,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Make an HTTP request with retry logic.

        Only 5xx responses and connection/timeout failures are retried.

        Returns:
            Response JSON, or None for an empty (204) response.

        Raises:
            AskBudiError: For API errors
            NetworkError: For connection/timeout errors
        """
        url = f"{self._base_url}{path}"
        headers = self._auth_header(auth)
        last_error: AskBudiError | None = None

        for attempt in range(self._retries + 1):
            try:
                response = self._http_client.request(
                    method, url, params=params, json=json, headers=headers
                )
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_error = NetworkError(
                    message=f"Request failed: {e}",
                    code="network_error",
                )
                if attempt < self._retries:
                    delay = calculate_delay(attempt)
                    logger.debug(
                        "Retrying after network error (attempt %d/%d)",
                        attempt + 1,
                        self._retries,
                    )
                    time.sleep(delay)
                    continue
                raise last_error from e

            if response.status_code >= 400:
                try:
                    body = response.json()
                except ValueError:
                    body = {"error": response.text or "Unknown error"}
                if not isinstance(body, dict):
                    body = {}

                error = map_status_to_error(response.status_code, body)
                if response.status_code in RETRY_CONFIG["retryable_statuses"]:
                    last_error = error
                    if attempt < self._retries:
                        delay = calculate_delay(attempt)
                        logger.debug(
                            "Retrying request after %.2fs (attempt %d/%d): %s",
                            delay,
                            attempt + 1,
                            self._retries,
                            str(error),
                        )
                        time.sleep(delay)
                        continue
                raise error

            if response.status_code == 204 or not response.content:
                return None
            return response.json()

        # Loop always returns or raises; kept for type checkers
        if last_error is not None:
            raise last_error
        raise RuntimeError("Unexpected state: no error but request did not succeed")

    # Session

    def login(self, email: str, password: str) -> str:
        """Log in and use the returned session token for account calls."""
        response = self._request(
            "POST",
            "/v1/auth/login",
            auth="none",
            json={"email": email, "password": password},
        )
        self._session_token = response["token"]
        return self._session_token

    # Metered library endpoints

    def search_libraries(self, search_term: str, *, limit: int = 10) -> LibrarySearchResponse:
        """Search the library catalog. Costs 1 request of quota.

        Args:
            search_term: Library name or part of it.
            limit: Maximum results (server caps at 50).
        """
        response = self._request(
            "GET",
            "/v1/libraries/search",
            auth="api_key",
            params={"search_term": search_term, "limit": limit},
        )
        return LibrarySearchResponse.from_dict(response)

    def get_library_docs(
        self,
        library_id: str,
        prompt: str,
        *,
        version: str | None = None,
        limit: int = 5,
    ) -> LibraryDocsResponse:
        """Fetch documentation snippets for a library.

        Recorded with cost 5; counts as one request against the quota.
        """
        params: dict[str, Any] = {"library_id": library_id, "prompt": prompt, "limit": limit}
        if version:
            params["version"] = version
        response = self._request("GET", "/v1/libraries/docs", auth="api_key", params=params)
        return LibraryDocsResponse.from_dict(response)

    # Account endpoints

    def get_profile(self) -> Profile:
        return Profile.from_dict(self._request("GET", "/v1/user/profile", auth="session"))

    def update_profile(self, *, billing_customer_id: str | None) -> Profile:
        response = self._request(
            "PUT",
            "/v1/user/profile",
            auth="session",
            json={"billing_customer_id": billing_customer_id},
        )
        return Profile.from_dict(response)

    def get_usage(self) -> UsageStats:
        return UsageStats(**self._request("GET", "/v1/user/usage", auth="session"))

    def get_analytics(self) -> Analytics:
        return Analytics.from_dict(self._request("GET", "/v1/user/analytics", auth="session"))

    # API key management

    def list_api_keys(self) -> list[ApiKey]:
        response = self._request("GET", "/v1/users/me/api-keys", auth="session")
        return [ApiKey.from_dict(item) for item in response]

    def create_api_key(self, name: str | None = None) -> CreatedApiKey:
        """Issue a new API key. Store ``api_key`` now; it cannot be fetched again."""
        response = self._request(
            "POST",
            "/v1/users/me/api-keys",
            auth="session",
            json={"name": name},
        )
        return CreatedApiKey(key=ApiKey.from_dict(response), api_key=response["api_key"])

    def update_api_key(
        self,
        key_id: str,
        *,
        name: str | None = None,
        is_active: bool | None = None,
    ) -> ApiKey:
        """Rename and/or (de)activate a key. Omitted fields are left unchanged."""
        body: dict[str, Any] = {}
        if name is not None:
            body["name"] = name
        if is_active is not None:
            body["is_active"] = is_active
        response = self._request(
            "PUT",
            f"/v1/users/me/api-keys/{key_id}",
            auth="session",
            json=body,
        )
        return ApiKey.from_dict(response)

    def delete_api_key(self, key_id: str) -> None:
        self._request("DELETE", f"/v1/users/me/api-keys/{key_id}", auth="session")

    def health(self) -> HealthStatus:
        response = self._request("GET", "/v1/health", auth="none")
        return HealthStatus(
            status=response["status"],
            version=response["version"],
            database=response["database"],
            timestamp=response["timestamp"],
            service=response["service"],
        )
