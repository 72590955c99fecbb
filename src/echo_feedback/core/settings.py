"""Application settings and configuration.

This module defines all configuration options for the Echo feedback service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Echo Feedback API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    password_hash_rounds: int = Field(default=12, alias="PASSWORD_HASH_ROUNDS")

    # Seeded administrator account (created on startup when both are set)
    admin_email: str | None = Field(default=None, alias="ADMIN_EMAIL")
    admin_password: str | None = Field(default=None, alias="ADMIN_PASSWORD")

    # Database configuration
    database_url: str = Field(default="sqlite:///./echo.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")

    # Moderation thresholds
    feedback_flag_threshold: int = Field(default=3, alias="FEEDBACK_FLAG_THRESHOLD")
    risk_medium_threshold: int = Field(default=5, alias="RISK_MEDIUM_THRESHOLD")
    risk_high_threshold: int = Field(default=10, alias="RISK_HIGH_THRESHOLD")

    # Content limits
    feedback_max_length: int = Field(default=1000, alias="FEEDBACK_MAX_LENGTH")
    report_details_max_length: int = Field(default=500, alias="REPORT_DETAILS_MAX_LENGTH")
    audit_details_max_length: int = Field(default=1000, alias="AUDIT_DETAILS_MAX_LENGTH")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
