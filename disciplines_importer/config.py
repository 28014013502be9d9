"""
Configuration settings for the disciplines importer.

Uses Pydantic Settings to load environment variables (and an optional `.env`
file) for the legacy store, the message bus, batching and logging.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from disciplines_importer.errors import ConfigurationError

# Position of this pipeline in the inbound topic; must stay stable across restarts.
CONSUMER_GROUP_ID = "secondary-db-disciplines-importer"


class Settings(BaseSettings):
    # Legacy store
    legacy_db_dsn: str = Field(..., alias="SECONDARY_DEKANAT_DB_DSN", min_length=1)
    db_connect_attempts: int = Field(3, alias="DB_CONNECT_ATTEMPTS", ge=1)

    # Message bus
    kafka_host: str = Field(..., alias="KAFKA_HOST", min_length=1)
    kafka_timeout: float = Field(10.0, alias="KAFKA_TIMEOUT", gt=0)
    kafka_attempts: int = Field(3, alias="KAFKA_ATTEMPTS", ge=0)
    kafka_poll_interval: float = Field(1.0, alias="KAFKA_POLL_INTERVAL", gt=0)
    meta_events_topic: str = Field("meta_events", alias="META_EVENTS_TOPIC")
    disciplines_topic: str = Field("disciplines", alias="DISCIPLINES_TOPIC")

    # Import
    write_threshold: int = Field(100, alias="WRITE_THRESHOLD", ge=1)

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def load_settings() -> Settings:
    """
    Build Settings, turning validation failures into ConfigurationError.

    The message lists the environment variables that are missing or invalid.
    """
    try:
        return Settings()
    except ValidationError as exc:
        problems = ", ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"Failed to load config: {problems}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return load_settings()


__all__ = ["CONSUMER_GROUP_ID", "Settings", "get_settings", "load_settings"]
