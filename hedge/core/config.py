from __future__ import annotations

import logging

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_DRIVER_PREFIX = "sqlite+aiosqlite://"


class InvalidSettingsError(Exception):
    """Raised when settings are invalid."""

    def __init__(self, invalid_fields: list[tuple[str, str]]) -> None:
        """Initialize with list of invalid field names and messages."""
        self.invalid_fields = invalid_fields
        summary = ", ".join(f"{field}: {message}" for field, message in invalid_fields)
        super().__init__(f"Invalid environment variables: {summary}")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./hedge.db",
        description="Async SQLAlchemy URL of the store",
    )

    # Optional environment variables (defaults provided)
    app_name: str = "hedge-store"
    environment: str = "local"
    log_level: str = "INFO"
    feed_limit: int = Field(default=100, gt=0, description="Rows returned by recency listings")
    tag_items_limit: int = Field(default=50, gt=0, description="Rows returned per tag listing")

    @model_validator(mode="after")
    def validate_database_driver(self) -> Settings:
        if not self.database_url.startswith(SUPPORTED_DRIVER_PREFIX):
            raise ValueError(
                f"Database URL must use the {SUPPORTED_DRIVER_PREFIX} driver "
                "(soft foreign keys and transactional DDL depend on it)."
            )
        return self

    @model_validator(mode="after")
    def validate_log_level(self) -> Settings:
        level = logging.getLevelName(self.log_level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {self.log_level}")
        return self


def validate_settings() -> Settings:
    """Validate settings and raise a readable exception for bad values.

    Raises:
        InvalidSettingsError: If any environment variable fails validation
    """
    try:
        return Settings()
    except ValidationError as e:
        invalid_fields: list[tuple[str, str]] = []
        for error in e.errors():
            field_path = ".".join(str(part) for part in error.get("loc", []))
            message = error.get("msg", "Invalid value")
            invalid_fields.append((field_path or "unknown", message))

        if invalid_fields:
            raise InvalidSettingsError(invalid_fields) from e

        raise


# Validate settings at import time.
# Exceptions will propagate to the importing module (e.g., hedge/cli.py)
settings = validate_settings()
