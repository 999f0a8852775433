"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SEARCH_TERMS = [
    "space",
    "apollo",
    "mars",
    "earth",
    "galaxy",
    "nebula",
    "satellite",
    "astronaut",
    "moon",
    "jupiter",
    "saturn",
    "hubble",
    "telescope",
    "solar",
    "planet",
    "comet",
]

DEFAULT_THUMBNAIL_HOSTS = ["images-assets.nasa.gov"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # NASA Image API Configuration
    nasa_base_url: str = Field(
        default="https://images-api.nasa.gov", description="Base URL for the NASA image API"
    )
    nasa_search_terms: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SEARCH_TERMS),
        description="Topics rotated through, one per fetched batch",
    )
    nasa_timeout: float | None = Field(
        default=None, description="HTTP request timeout in seconds (unset keeps the transport default)"
    )

    # Thumbnail Configuration
    thumbnail_hosts: list[str] = Field(
        default_factory=lambda: list(DEFAULT_THUMBNAIL_HOSTS),
        description="Hosts the thumbnail proxy may fetch from",
    )

    # Feed Configuration
    feed_prefetch_distance: int = Field(
        default=5, ge=0, description="Load more once the last visible card is this close to the end"
    )

    # Application Configuration
    app_title: str = Field(default="NASA Photos", description="Application title")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(default=True, description="Use JSON log format")
    log_file: str | None = Field(default=None, description="Optional log file path")

    @field_validator("nasa_search_terms")
    @classmethod
    def validate_search_terms(cls, values: list[str]) -> list[str]:
        terms = [value.strip() for value in values if value and value.strip()]
        if not terms:
            raise ValueError("nasa_search_terms must contain at least one non-empty term")
        return terms

    @field_validator("thumbnail_hosts")
    @classmethod
    def validate_thumbnail_hosts(cls, values: list[str]) -> list[str]:
        return [value.strip().lower() for value in values if value and value.strip()]

    @field_validator("nasa_base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        return value.strip().rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
