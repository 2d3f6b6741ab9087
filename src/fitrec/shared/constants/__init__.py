"""
fitrec Constants Module

Centralized constants for the fitrec application. Magic values shared by
the configuration defaults, services and pipeline live here so every layer
reads the same number.
"""

from .cache import BASE_DAY, BASE_HOUR, BASE_MINUTE, BASE_SECOND, CacheConfig, CacheKeys
from .network import CatalogConfig, MediaConfig, NetworkConfig, ProviderNames

__all__ = [
    "BASE_DAY",
    "BASE_HOUR",
    "BASE_MINUTE",
    "BASE_SECOND",
    "CacheConfig",
    "CacheKeys",
    "CatalogConfig",
    "MediaConfig",
    "NetworkConfig",
    "ProviderNames",
]
