"""fitrec configuration package."""

from .loader import load_settings
from .models import (
    CacheSettings,
    CatalogSettings,
    LoggingSettings,
    MediaSettings,
    Settings,
)

__all__ = [
    "CacheSettings",
    "CatalogSettings",
    "LoggingSettings",
    "MediaSettings",
    "Settings",
    "load_settings",
]
