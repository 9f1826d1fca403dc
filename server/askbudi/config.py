# server/askbudi/config.py
import warnings
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./askbudi.db"
    jwt_secret: str = ""  # Required for session tokens
    jwt_expiry_seconds: int = 86400
    service_name: str = "AskBudi API"
    version: str = "1.0.0"

    # Quota accounting
    usage_window_days: int = 30
    max_api_keys_per_user: int = 10
    default_monthly_quota: int = 100

    # Ledger retention in days; None keeps usage entries forever
    usage_retention_days: Optional[int] = None

    class Config:
        env_file = ".env"

    def validate_secrets(self) -> None:
        """Validate that required secrets are configured.

        Call this at application startup to fail fast if secrets are missing.
        """
        if not self.jwt_secret:
            raise ValueError(
                "Required secrets not configured: JWT_SECRET. "
                "Set this environment variable before starting the server."
            )


settings = Settings()

# Warn at import time if secrets are not configured (don't fail yet for tests)
if not settings.jwt_secret:
    warnings.warn(
        "JWT_SECRET not configured. "
        "The server will fail to start. Set this environment variable.",
        UserWarning,
    )
