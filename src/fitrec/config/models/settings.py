"""fitrec Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fitrec.config.models.app_settings import LoggingSettings
from fitrec.config.models.cache_settings import CacheSettings
from fitrec.config.models.catalog_settings import CatalogSettings
from fitrec.config.models.media_settings import MediaSettings


class Settings(BaseSettings):
    """Unified configuration across the catalog, media, cache and logging domains.

    Environment variables use the ``FITREC_`` prefix with ``__`` separating
    nested fields, e.g. ``FITREC_MEDIA__GIPHY_API_KEY``.
    """

    model_config = SettingsConfigDict(
        env_prefix="FITREC_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    media: MediaSettings = Field(default_factory=MediaSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from a TOML file.

        Values present in the file take precedence; anything the file leaves
        out is filled from the environment, then from defaults.
        """

        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)


__all__ = ["Settings"]
