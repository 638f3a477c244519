from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every field can be set with an ``HTTP_PROTECT_`` prefixed environment
    variable or in a .env file. Keyword arguments passed to the constructor
    take priority over both.
    """

    # Sliding window length in seconds, refreshed on every request
    ttl: int = 10
    # Requests per window before an address is throttled (429)
    max_requests: int = 200
    # Requests per window before an address is permanently banned (418)
    ban_limit: int = 1000
    # Redis key namespace
    prefix: str = "rate-guard"

    # Redis settings
    redis_url: str = "redis://localhost:6379/0"

    # If True, reject requests with 503 when Redis is unavailable
    fail_closed: bool = False

    # Body rendered for rejected requests: empty | text | json
    response_format: Literal["empty", "text", "json"] = "empty"

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    @field_validator("ttl", "max_requests", "ban_limit")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate window and threshold values are positive."""
        if v < 1:
            raise ValueError("ttl, max_requests and ban_limit must be at least 1")
        return v

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("prefix must not be empty")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("text", "structured", "json"):
            raise ValueError("log_format must be one of: text, structured, json")
        return v

    model_config = SettingsConfigDict(
        env_prefix="HTTP_PROTECT_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )


# Global settings instance
settings = Settings()
