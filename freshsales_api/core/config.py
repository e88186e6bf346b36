from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_FORMATS = ("text", "structured", "json")


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    All settings can be configured via ``FRESHSALES_*`` environment variables
    or a .env file.
    """

    # Remote CRM host, e.g. "acme.myfreshworks.com". Checked at call time.
    domain: str | None = None
    apikey: str = ""
    scheme: str = "https"

    # HTTP client settings (passed through to httpx)
    httpx_connect_timeout: float = 10.0  # Time to establish connection
    httpx_read_timeout: float = 60.0  # Time to read response data
    httpx_write_timeout: float = 10.0  # Time to send request data
    httpx_pool_timeout: float = 5.0  # Time to acquire connection from pool
    httpx_keepalive_expiry: float = 30.0
    httpx_max_connections: int = 100
    httpx_max_keepalive_connections: int = 20

    # Client-side rate limiting (milliseconds)
    rate_limit_enabled: bool = False
    rate_limit_cycle_ms: int = 500
    rate_limit_buffer_ms: int = 100

    # Initial ceiling for every quota family until headers say otherwise
    quota_default_limit: int = Field(default=2000, ge=0)

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    @field_validator(
        "httpx_connect_timeout",
        "httpx_read_timeout",
        "httpx_write_timeout",
        "httpx_pool_timeout",
    )
    @classmethod
    def validate_timeout_positive(cls, v: float) -> float:
        """Validate timeout values are positive."""
        if v <= 0:
            raise ValueError("Timeout values must be positive")
        return v

    @field_validator("rate_limit_cycle_ms", "rate_limit_buffer_ms")
    @classmethod
    def validate_rate_limit_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Rate limit cycle and buffer must not be negative")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
        return v

    model_config = SettingsConfigDict(
        env_prefix="FRESHSALES_", env_file=".env", extra="ignore"
    )


# Global settings instance
settings = Settings()
