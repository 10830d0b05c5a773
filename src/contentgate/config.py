"""Application configuration using Pydantic Settings.

Settings are read once from the environment (and an optional ``.env`` file),
validated, and then treated as immutable for the lifetime of the process.
Components receive the settings object through their constructors.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEVELOPMENT_API_KEY = "development-api-key"


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log format options."""

    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    """Gateway settings with environment variable validation.

    All settings can be overridden via environment variables. Secrets
    (origin token, Redis password, API key) should come from the
    environment or a ``.env`` file, never from source.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # ========================================
    # Application
    # ========================================
    app_env: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    app_name: str = Field(
        default="ContentGate",
        description="Application name",
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="Log output format (json for production, console for dev)",
    )

    # ========================================
    # Server
    # ========================================
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Server port",
    )

    # ========================================
    # Origin (Strapi content API)
    # ========================================
    strapi_url: str = Field(
        default="http://localhost:1337",
        description="Base URL of the Strapi content API",
    )
    strapi_api_token: SecretStr | None = Field(
        default=None,
        description="Bearer token sent to Strapi (optional)",
    )
    strapi_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Origin request timeout in seconds",
    )
    strapi_health_path: str = Field(
        default="/_health",
        description="Origin liveness endpoint path",
    )

    # ========================================
    # Redis
    # ========================================
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    redis_password: SecretStr | None = Field(
        default=None,
        description="Redis password, used when the URL carries none",
    )
    cache_ttl: int = Field(
        default=300,
        ge=1,
        description="Time-to-live of cached content entries in seconds",
    )
    cache_timeout: float = Field(
        default=2.0,
        gt=0,
        description="Redis socket timeout in seconds",
    )

    # ========================================
    # Access control
    # ========================================
    api_key: SecretStr = Field(
        default=SecretStr(DEVELOPMENT_API_KEY),
        description=(
            "API key required on content routes "
            "(the development default disables the check)"
        ),
    )

    # ========================================
    # Rate limiting
    # ========================================
    rate_limit_requests: int = Field(
        default=100,
        ge=1,
        description="Requests allowed per client IP per window",
    )
    rate_limit_window: int = Field(
        default=60,
        ge=1,
        description="Rate limit window in seconds",
    )
    analytics_rate_limit_requests: int = Field(
        default=100,
        ge=1,
        description="Analytics ingestion requests allowed per client IP per minute",
    )

    # ========================================
    # CORS
    # ========================================
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:8080",
        description="Comma-separated list of allowed CORS origins",
    )

    # ========================================
    # Analytics
    # ========================================
    google_analytics_id: str = Field(
        default="",
        description="GA4 measurement ID (e.g. G-XXXXXXX)",
    )
    google_analytics_api_secret: SecretStr = Field(
        default=SecretStr(""),
        description="GA4 Measurement Protocol API secret",
    )

    # ========================================
    # Derived Properties
    # ========================================
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == Environment.PRODUCTION

    @property
    def use_json_logs(self) -> bool:
        """Check if JSON logging should be used."""
        return self.log_format == LogFormat.JSON or self.is_production

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def api_key_required(self) -> bool:
        """False when the development placeholder key is configured."""
        return self.api_key.get_secret_value() != DEVELOPMENT_API_KEY

    @field_validator("strapi_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are built as ``{base}/api/...``."""
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
