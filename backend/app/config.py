"""Application configuration."""
from collections import Counter
from functools import lru_cache
import logging
import math

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Mnemos"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Database
    database_url: str = "sqlite:///./data/mnemos.db"

    # Access tokens
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 15

    # Refresh sessions
    refresh_token_ttl_days: float = Field(7, gt=0)
    refresh_absolute_max_days: float = Field(30, gt=0)
    refresh_cookie_name: str = "mnemos_refresh"
    refresh_cookie_path: str = "/api/auth"
    refresh_cookie_secure: bool = True
    refresh_cookie_domain: str | None = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, value: str) -> str:
        """Fail closed if SECRET_KEY is weak or placeholder quality."""
        if not value:
            raise ValueError("SECRET_KEY must be set.")

        if len(value) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")

        weak_values = {"changeme", "changeme-in-production", "secret", "password", "test"}
        lowered = value.lower()
        if lowered in weak_values or "changeme" in lowered:
            raise ValueError("SECRET_KEY must not be a placeholder value.")

        counts = Counter(value)
        entropy_per_char = -sum((count / len(value)) * math.log2(count / len(value)) for count in counts.values())
        estimated_entropy_bits = entropy_per_char * len(value)
        if estimated_entropy_bits < 100:
            raise ValueError("SECRET_KEY entropy is too low; use a cryptographically random value.")

        return value

    @model_validator(mode="after")
    def warn_on_dominated_sliding_window(self) -> "Settings":
        """A sliding window longer than the absolute cap is legal but never takes effect."""
        if self.refresh_token_ttl_days > self.refresh_absolute_max_days:
            logger.warning(
                "REFRESH_TOKEN_TTL_DAYS (%s) exceeds REFRESH_ABSOLUTE_MAX_DAYS (%s); "
                "the absolute cap will decide every refresh expiry",
                self.refresh_token_ttl_days,
                self.refresh_absolute_max_days,
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
