"""Cache configuration model.

This module contains the cache configuration model for the shared bounded
cache: capacity and the TTL of each cached namespace.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from fitrec.shared.constants import CacheConfig


class CacheSettings(BaseModel):
    """Cache configuration."""

    max_size: int = Field(
        default=CacheConfig.MAX_SIZE,
        gt=0,
        description="Maximum number of cache entries",
    )
    default_ttl: int = Field(
        default=CacheConfig.DEFAULT_TTL,
        gt=0,
        description="TTL in seconds for entries stored without an explicit TTL",
    )
    catalog_ttl: int = Field(
        default=CacheConfig.CATALOG_TTL,
        gt=0,
        description="TTL in seconds for catalog responses",
    )
    media_ttl: int = Field(
        default=CacheConfig.MEDIA_TTL,
        gt=0,
        description="TTL in seconds for fallback media lookups",
    )
    results_ttl: int = Field(
        default=CacheConfig.RESULTS_TTL,
        gt=0,
        description="TTL in seconds for memoized pipeline outcomes",
    )


__all__ = ["CacheSettings"]
