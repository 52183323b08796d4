from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from the environment (and an optional .env file).
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Bookwise Scheduling API"
    PROJECT_DESCRIPTION: str = "Availability, booking lifecycle, waitlist backfill and self-serve links"
    VERSION: str = "0.1.0"

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("bookwise", description="Database name")
    DB_USER: str = Field("postgres", description="Database user")
    DB_PASSWORD: str | None = Field(None, description="Database password")
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(20, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(30, description="Maximum pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections every N seconds")
    DB_POOL_TIMEOUT: int = Field(30, description="Seconds to wait for a pooled connection")

    # Application Settings
    DEBUG: bool = Field(False, description="Debug mode")
    ENVIRONMENT: str = Field("production", description="Runtime environment")
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: str = Field("colored", description="Log format: colored, json or plain")
    LOG_FILE: str | None = Field(None, description="Optional JSON log file path")

    # Sentry Configuration
    SENTRY_DSN: str | None = Field(None, description="Sentry DSN for error tracking")

    # Multi-Tenant Settings
    TENANT_HEADER: str = Field("X-Tenant-ID", description="Header name for tenant ID in requests")
    DEFAULT_TIMEZONE: str = Field("UTC", description="Timezone used when a tenant has none configured")

    # Self-serve links
    WEB_URL: str = Field("http://localhost:3000", description="Public web app base URL for self-serve links")
    SELF_SERVE_LINK_EXPIRY_HOURS: int = Field(48, description="Lifetime of reschedule/cancel links")

    # Scheduling rules
    SLOT_INCREMENT_MINUTES: int = Field(30, description="Step between candidate slot starts")
    REMINDER_LEAD_HOURS: int = Field(24, description="Hours before start at which the reminder fires")
    BULK_UPDATE_MAX_IDS: int = Field(50, description="Maximum bookings touched by one bulk update")

    # Periodic sweeps
    SCHEDULER_ENABLED: bool = Field(True, description="Run reminder dispatch and offer expiry sweeps")
    REMINDER_DISPATCH_INTERVAL_SECONDS: int = Field(60, description="Reminder dispatch sweep interval")
    REMINDER_DISPATCH_BATCH_SIZE: int = Field(100, description="Reminders dispatched per sweep")
    OFFER_EXPIRY_INTERVAL_SECONDS: int = Field(60, description="Stale waitlist offer sweep interval")

    # External calendar sync service
    CALENDAR_SYNC_BASE_URL: str | None = Field(None, description="Calendar sync service base URL")
    CALENDAR_SYNC_TIMEOUT: int = Field(10, description="Timeout for calendar sync requests in seconds")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @field_validator("DB_MAX_OVERFLOW")
    @classmethod
    def validate_max_overflow(cls, v):
        if v < 0:
            raise ValueError("DB_MAX_OVERFLOW must be 0 or greater")
        if v > 200:
            raise ValueError("DB_MAX_OVERFLOW should not exceed 200")
        return v

    @field_validator(
        "SLOT_INCREMENT_MINUTES",
        "REMINDER_DISPATCH_INTERVAL_SECONDS",
        "OFFER_EXPIRY_INTERVAL_SECONDS",
        "REMINDER_DISPATCH_BATCH_SIZE",
        "BULK_UPDATE_MAX_IDS",
    )
    @classmethod
    def validate_positive(cls, v, info):
        if v < 1:
            raise ValueError(f"{info.field_name} must be at least 1")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        if v not in ("colored", "json", "plain"):
            raise ValueError("LOG_FORMAT must be one of: colored, json, plain")
        return v

    @field_validator("WEB_URL")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @computed_field
    @property
    def database_url(self) -> str:
        """PostgreSQL connection URL (sync driver, used by alembic)."""
        if self.DB_PASSWORD:
            return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        return f"postgresql://{self.DB_USER}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def is_development(self) -> bool:
        """True when running in a development environment."""
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]


_settings_instance = None


def get_settings() -> Settings:
    """
    Return a cached Settings instance so the environment is read only once.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
