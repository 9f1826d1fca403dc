"""Exception classes for askbudi-client."""

from __future__ import annotations


class AskBudiError(Exception):
    """Base exception for all askbudi-client errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status = status


class ValidationError(AskBudiError):
    """Raised for 400 Bad Request responses."""

    pass


class AuthenticationError(AskBudiError):
    """Raised for 401 Unauthorized responses."""

    pass


class NotFoundError(AskBudiError):
    """Raised for 404 responses, e.g. an API key that is not yours."""

    pass


class QuotaExceededError(AskBudiError):
    """Raised for 429 responses.

    The quota is counted over a rolling 30-day window, so waiting a few
    seconds will not help and the client does not retry these.
    """

    pass


class ServerError(AskBudiError):
    """Raised for 5xx server errors."""

    pass


class NetworkError(AskBudiError):
    """Raised for connection failures, timeouts, etc."""

    pass
