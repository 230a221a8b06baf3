"""
Environment configuration for the homestay booking core.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

import json
import re
from functools import lru_cache
from typing import Annotated, List, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_HOLIDAY_PATTERN = re.compile(r"^(\d{4}-)?\d{2}-\d{2}$")


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application configuration
    APP_NAME: str = Field(default="Homestay Booking Service", alias="PROJECT_NAME")
    API_VERSION: str = Field(default="v1", alias="PROJECT_VERSION")
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Calendar dates are evaluated in this timezone (check-in day, "today")
    TIMEZONE: str = "Asia/Ho_Chi_Minh"

    # Database configuration
    DATABASE_URL: str = "sqlite:///./homestay.db"
    DATABASE_ECHO: bool = False
    DB_POOL_SIZE: int = 20
    DB_POOL_OVERFLOW: int = 10
    # SQLite busy timeout while another transaction holds the write lock
    DB_LOCK_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)

    # Money
    CURRENCY: str = "VND"
    CURRENCY_MINOR_UNITS: int = Field(default=0, ge=0, le=4)

    # Business rules
    HOLIDAYS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["01-01", "04-30", "05-01", "09-02"]
    )
    CANCELLATION_WINDOW_HOURS: int = Field(default=24, ge=0)
    PRICING_CALENDAR_DEFAULT_MONTHS: int = Field(default=3, ge=1, le=24)

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    LOG_SQL_QUERIES: bool = False
    ENABLE_STRUCTURED_LOGGING: bool = False

    @field_validator("HOLIDAYS", mode="before")
    @classmethod
    def parse_holidays(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse HOLIDAYS from a JSON list or comma separated string"""
        if isinstance(v, str):
            if v.startswith("[") and v.endswith("]"):
                try:
                    v = json.loads(v)
                except json.JSONDecodeError:
                    v = v.strip("[]").split(",")
            else:
                v = v.split(",")
        entries = [str(item).strip() for item in v if str(item).strip()]
        for entry in entries:
            if not _HOLIDAY_PATTERN.match(entry):
                raise ValueError(
                    f"Invalid holiday '{entry}'. Use MM-DD or YYYY-MM-DD"
                )
        return entries

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in {"json", "text"}:
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return fmt


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
