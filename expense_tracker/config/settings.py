"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Settings are resolved once at process start and handed to the components
that need them (database, authenticator, API, client). Nothing below this
module reads the environment on its own.
"""

import warnings
from functools import lru_cache
from typing import Optional

from pydantic import Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEVELOPMENT_SECRET_KEY = "dev-secret-key-change-me"


class InsecureSettingsError(ValueError):
    """Settings that are only acceptable in development were used elsewhere."""
    pass


class DatabaseSettings(BaseSettings):
    """Relational store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        default="sqlite:///expense_tracker.db",
        description="SQLAlchemy database URL"
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements (debugging only)"
    )
    connect_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times schema creation is attempted before giving up"
    )


class AuthSettings(BaseSettings):
    """Session token configuration."""

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    secret_key: str = Field(
        default=DEVELOPMENT_SECRET_KEY,
        min_length=8,
        validate_default=True,
        description="Secret used to sign session tokens"
    )
    algorithm: str = Field(
        default="HS256",
        description="Token signing algorithm"
    )
    expires_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Token lifetime in days"
    )

    @field_validator('secret_key')
    @classmethod
    def warn_development_secret(cls, v: str) -> str:
        """Warn if the built-in development secret is in use."""
        if v == DEVELOPMENT_SECRET_KEY:
            warnings.warn(
                "JWT_SECRET_KEY is not set; using the development secret. "
                "Set JWT_SECRET_KEY before deploying."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Attach exception details to 500 responses"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )

    # HTTP
    api_prefix: str = Field(
        default="/api",
        description="Common root for every API path"
    )
    api_host: str = Field(
        default="127.0.0.1",
        description="Interface the API binds to"
    )
    api_port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port the API listens on"
    )
    cors_origins: str = Field(
        default="http://localhost:8501,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    # Pagination
    default_page_size: int = Field(
        default=10,
        ge=1,
        description="Page size used when the caller does not send one"
    )
    max_page_size: int = Field(
        default=100,
        ge=1,
        description="Largest page size a caller may request"
    )

    @field_validator('api_prefix')
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        """'' or '/' mean no prefix; otherwise a leading slash and no trailing one."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.app_environment.strip().lower() == "development"


class ClientSettings(BaseSettings):
    """Settings for the Streamlit client talking to the API."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:5000/api",
        description="Root URL of the expense API"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Per-request timeout"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access. Sub-settings are built on
    first access and then kept, so one Settings object is one consistent
    view of the environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    _cache: dict[str, BaseSettings] = PrivateAttr(default_factory=dict)

    def _get(self, name: str, factory) -> BaseSettings:
        if name not in self._cache:
            self._cache[name] = factory()
        return self._cache[name]

    @property
    def database(self) -> DatabaseSettings:
        return self._get("database", DatabaseSettings)

    @property
    def auth(self) -> AuthSettings:
        return self._get("auth", AuthSettings)

    @property
    def app(self) -> AppSettings:
        return self._get("app", AppSettings)

    @property
    def client(self) -> ClientSettings:
        return self._get("client", ClientSettings)

    @classmethod
    def from_parts(
        cls,
        database: Optional[DatabaseSettings] = None,
        auth: Optional[AuthSettings] = None,
        app: Optional[AppSettings] = None,
        client: Optional[ClientSettings] = None,
    ) -> "Settings":
        """Build a Settings object from explicit parts (tests, embedding)."""
        settings = cls()
        for name, part in (
            ("database", database),
            ("auth", auth),
            ("app", app),
            ("client", client),
        ):
            if part is not None:
                settings._cache[name] = part
        return settings


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def check_secret_key(settings: Settings) -> None:
    """
    Refuse the built-in development secret outside development.

    Raises:
        InsecureSettingsError: If APP_ENVIRONMENT is not "development" and
            JWT_SECRET_KEY is unset
    """
    if settings.app.is_development:
        return
    if settings.auth.secret_key == DEVELOPMENT_SECRET_KEY:
        raise InsecureSettingsError(
            f"JWT_SECRET_KEY must be set when APP_ENVIRONMENT is "
            f"'{settings.app.app_environment}'"
        )


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the groups that failed.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("database", "auth", "app", "client"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    if results["auth"] and results["app"]:
        try:
            check_secret_key(settings)
        except InsecureSettingsError as e:
            results["auth"] = False
            results["auth_error"] = str(e)

    return results
