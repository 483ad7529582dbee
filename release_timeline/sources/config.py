"""Configuration for the scraper source registry."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SourcesConfig(BaseSettings):
    """Settings for seeding the scraper_sources table."""

    model_config = SettingsConfigDict(
        env_prefix="SOURCES_",
        case_sensitive=False,
        extra="ignore",
    )

    seed_on_init: bool = Field(
        default=True,
        description="Seed from JSON on init-db when the table is empty",
    )
    seed_path: Path | None = Field(
        default=None,
        description="Seed file to load instead of the bundled default list",
    )
