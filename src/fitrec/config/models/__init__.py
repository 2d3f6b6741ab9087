"""Configuration domain models."""

from __future__ import annotations

from .app_settings import LoggingSettings
from .cache_settings import CacheSettings
from .catalog_settings import CatalogSettings
from .media_settings import MediaSettings
from .settings import Settings

__all__ = [
    "CacheSettings",
    "CatalogSettings",
    "LoggingSettings",
    "MediaSettings",
    "Settings",
]
