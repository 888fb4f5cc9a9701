import os
from datetime import date
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    DATABASE_URL wins when set; otherwise a local SQLite file next to the
    project root is used.
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "runcast.db"
    db_url = f"sqlite:///{db_path.resolve()}"
    logger.debug(f"Using local SQLite database: {db_url}")
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(default_factory=get_database_url, validation_alias="DATABASE_URL")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")

    default_location: str = Field(default="Balbriggan, IE", validation_alias="DEFAULT_LOCATION")
    timezone: str = Field(default="Europe/Dublin", validation_alias="TIMEZONE")

    weather_cache_ttl_seconds: int = Field(
        default=3600,
        validation_alias="WEATHER_CACHE_TTL_SECONDS",
        description="Freshness window for cached forecast days",
        gt=0,
    )
    weather_http_timeout_seconds: float = Field(default=10.0, validation_alias="WEATHER_HTTP_TIMEOUT_SECONDS", gt=0)
    weather_max_retries: int = Field(default=3, validation_alias="WEATHER_MAX_RETRIES", ge=1)
    weather_retry_delay_seconds: float = Field(default=1.0, validation_alias="WEATHER_RETRY_DELAY_SECONDS", ge=0)
    forecast_max_days: int = Field(
        default=16,
        validation_alias="FORECAST_MAX_DAYS",
        description="Longest forecast window the provider can serve",
        ge=1,
        le=21,
    )

    suggestion_default_days: int = Field(default=14, validation_alias="SUGGESTION_DEFAULT_DAYS", ge=1)
    race_date: date | None = Field(default=None, validation_alias="RACE_DATE")
    race_distance_km: float = Field(default=21.1, validation_alias="RACE_DISTANCE_KM", gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Fall back to UTC when the configured zone is unknown."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown TIMEZONE '{value}'. Defaulting to UTC.")
            return "UTC"
        return value

    @field_validator("suggestion_default_days")
    @classmethod
    def validate_default_days(cls, value: int, info) -> int:
        """Keep the default suggestion window inside the forecast horizon."""
        max_days = info.data.get("forecast_max_days", 16)
        if value > max_days:
            logger.warning(f"SUGGESTION_DEFAULT_DAYS={value} exceeds FORECAST_MAX_DAYS={max_days}; clamping.")
            return max_days
        return value


settings = Settings()
