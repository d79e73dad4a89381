"""Configuration management using pydantic-settings."""

from .settings import (
    EnvelopeSettings,
    LoggingSettings,
    QueryStreamSettings,
    WriterSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "EnvelopeSettings",
    "LoggingSettings",
    "QueryStreamSettings",
    "WriterSettings",
    "clear_settings_cache",
    "get_settings",
]
