"""Exercise catalog configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from fitrec.shared.constants import CatalogConfig


class CatalogSettings(BaseModel):
    """Exercise catalog API configuration.

    Endpoint location, request deadline and the upstream quota the
    sliding-window limiter enforces.
    """

    base_url: str = Field(
        default=CatalogConfig.BASE_URL,
        description="Catalog API base URL",
    )
    search_endpoint: str = Field(
        default=CatalogConfig.SEARCH_ENDPOINT,
        description="Keyword search endpoint path",
    )
    timeout: float = Field(
        default=CatalogConfig.TIMEOUT,
        gt=0,
        description="Request timeout in seconds",
    )
    rate_limit_per_minute: int = Field(
        default=CatalogConfig.RATE_LIMIT_PER_MINUTE,
        gt=0,
        description="Maximum requests in any rolling 60 second window",
    )
    rate_limit_per_day: int = Field(
        default=CatalogConfig.RATE_LIMIT_PER_DAY,
        gt=0,
        description="Maximum requests per 24 hour window",
    )
    items_per_category: int = Field(
        default=CatalogConfig.ITEMS_PER_CATEGORY,
        gt=0,
        description="Number of catalog items requested per category",
    )


__all__ = ["CatalogSettings"]
