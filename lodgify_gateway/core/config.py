from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


API_VERSIONS = ("v1", "v2")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Debug mode - enables detailed error responses
    debug: bool = False

    # Lodgify API settings
    lodgify_api_key: str = ""
    lodgify_base_url: str = "https://api.lodgify.com"
    lodgify_default_api_version: str = "v2"
    lodgify_read_only: bool = False  # LODGIFY_READ_ONLY=1 blocks POST/PUT/PATCH/DELETE

    # Rate limiting settings (fixed window, shared by every module)
    rate_limit_requests: int = 60
    rate_limit_window_seconds: float = 60.0
    rate_limit_backoff_seconds: float = 1.0  # One-off wait when the window is full

    # Retry settings
    retry_max_attempts: int = 5  # Total attempts, including the first
    retry_base_delay: float = 1.0
    retry_max_delay: float = 30.0

    # Error formatting
    error_include_stack_trace: bool = False
    error_sanitize_detail: bool = True

    # Log sanitized request/response metadata at DEBUG
    debug_http: bool = False

    # HTTP Client connection pool settings
    httpx_connect_timeout: float = 10.0  # Time to establish connection
    httpx_read_timeout: float = 30.0  # Time to read response data
    httpx_write_timeout: float = 10.0  # Time to send request data
    httpx_pool_timeout: float = 5.0  # Time to acquire connection from pool
    httpx_keepalive_expiry: float = 30.0
    httpx_max_connections: int = 20
    httpx_max_keepalive_connections: int = 10

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    @field_validator("lodgify_default_api_version")
    @classmethod
    def validate_api_version(cls, v: str) -> str:
        """Validate the default API version is one Lodgify serves."""
        v = v.strip().lower()
        if v not in API_VERSIONS:
            raise ValueError(f"lodgify_default_api_version must be one of {API_VERSIONS}")
        return v

    @field_validator("rate_limit_requests", "retry_max_attempts", "httpx_max_connections")
    @classmethod
    def validate_count_positive(cls, v: int) -> int:
        """Validate counts are at least 1."""
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator(
        "rate_limit_window_seconds",
        "httpx_connect_timeout",
        "httpx_read_timeout",
        "httpx_write_timeout",
        "httpx_pool_timeout",
    )
    @classmethod
    def validate_duration_positive(cls, v: float) -> float:
        """Validate window and timeout values are positive."""
        if v <= 0:
            raise ValueError("Duration values must be positive")
        return v

    @field_validator("rate_limit_backoff_seconds", "retry_base_delay", "retry_max_delay")
    @classmethod
    def validate_delay_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Delay values must not be negative")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
