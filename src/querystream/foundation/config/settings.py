"""Environment-based configuration using pydantic-settings.

Example:
    >>> from querystream.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.envelope.root
    'whois-resources'

    # Or with environment variables:
    # QUERYSTREAM_LOG_LEVEL=DEBUG
    # QUERYSTREAM_WRITER_MEDIA_TYPE=application/xml
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="QUERYSTREAM_LOG_", extra="ignore")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class EnvelopeSettings(BaseSettings):
    """Names of the document envelope parts."""

    model_config = SettingsConfigDict(env_prefix="QUERYSTREAM_ENVELOPE_", extra="ignore")

    root: str = Field(default="whois-resources", min_length=1)
    objects_block: str = Field(default="objects", min_length=1)
    object_array: str = Field(default="object", min_length=1)
    errors_field: str = Field(default="errormessages", min_length=1)
    error_element: str = Field(default="errormessage", min_length=1)
    terms_field: str = Field(default="terms-and-conditions", min_length=1)
    terms_url: str = "http://www.ripe.net/db/support/db-terms-conditions.pdf"


class WriterSettings(BaseSettings):
    """Defaults for the bundled structured writers."""

    model_config = SettingsConfigDict(env_prefix="QUERYSTREAM_WRITER_", extra="ignore")

    media_type: Literal["application/json", "application/xml", "application/msgpack"] = "application/json"
    flush_each_element: bool = Field(default=True, description="Flush output after every array element")
    xml_encoding: str = "UTF-8"


class QueryStreamSettings(BaseSettings):
    """Root settings, loaded from QUERYSTREAM_* variables and an optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix="QUERYSTREAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    envelope: EnvelopeSettings = Field(default_factory=EnvelopeSettings)
    writer: WriterSettings = Field(default_factory=WriterSettings)


@lru_cache(maxsize=1)
def get_settings() -> QueryStreamSettings:
    """Get the global settings instance (cached)."""
    return QueryStreamSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
