from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, Field
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "School Portal API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = Field(default=False, description="Enable debug mode (set to false in production)")
    ENVIRONMENT: str = Field(default="production", description="Environment: development, staging, production")

    # Storage
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_KEY: str = Field(..., description="Supabase service role key")
    NEWS_TABLE: str = "news"
    CALENDAR_TABLE: str = "calendar_events"

    # JWT
    JWT_SECRET_KEY: str = Field(..., min_length=32, description="JWT secret key (minimum 32 characters)")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = Field(default=24, gt=0)

    # Admin account
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = Field(..., description="Password for the single admin account")

    # Calendar windows (month, today) are computed in this zone
    TIMEZONE: str = "UTC"

    # CORS
    FRONTEND_URL: str = "http://localhost:5000"

    # Server
    PORT: int = Field(default=5000, description="Server port")

    # Logging
    LOG_LEVEL: str = ""
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    @field_validator('SUPABASE_URL')
    @classmethod
    def validate_supabase_url(cls, v: str) -> str:
        """Validate Supabase URL format."""
        parsed = urlparse(v)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValueError("SUPABASE_URL must be a valid http(s) URL (e.g., https://xxxxx.supabase.co)")
        return v

    @field_validator('SUPABASE_SERVICE_KEY', 'ADMIN_PASSWORD', 'ADMIN_USERNAME')
    @classmethod
    def validate_not_blank(cls, v: str, info) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} is required and cannot be empty")
        return v

    @field_validator('JWT_SECRET_KEY')
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Validate JWT secret key strength."""
        if len(v) < 32:
            raise ValueError(
                "JWT_SECRET_KEY must be at least 32 characters long. "
                "Generate one using: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
            )
        return v

    @field_validator('TIMEZONE')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"TIMEZONE must be an IANA time zone name, got {v!r}")
        return v

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)


REQUIRED_FIELDS = ['SUPABASE_URL', 'SUPABASE_SERVICE_KEY', 'JWT_SECRET_KEY', 'ADMIN_PASSWORD']


def validate_settings() -> None:
    """Validate all required settings are present and valid."""
    from app.core.exceptions import ConfigurationError

    global settings
    try:
        settings = Settings()
    except Exception as e:
        error_msg = str(e)
        missing = [field for field in REQUIRED_FIELDS if field in error_msg]
        if "missing" in error_msg.lower() or "field required" in error_msg.lower():
            raise ConfigurationError(
                f"Missing required environment variable: {', '.join(missing) or 'See error details'}\n"
                f"Please check your .env file and ensure all required variables are set.\n"
                f"Error: {error_msg}",
                error_code="MISSING_ENV_VAR"
            )
        raise ConfigurationError(
            f"Configuration error: {error_msg}\n"
            f"Please check your .env file configuration.",
            error_code="CONFIG_ERROR"
        )

    if not settings.SUPABASE_URL.startswith('https://') and not settings.DEBUG:
        raise ConfigurationError(
            "SUPABASE_URL should use HTTPS in production",
            error_code="INSECURE_URL"
        )


def get_settings() -> Settings:
    """Return the active settings, validating them on first use."""
    if settings is None:
        validate_settings()
    return settings


# Settings are re-validated in main.py startup
try:
    settings = Settings()
except Exception:
    settings = None
