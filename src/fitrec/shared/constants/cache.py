"""
Cache Configuration Constants

TTLs, capacity and key prefixes for the shared bounded cache. Every cached
namespace owns one prefix so it can be invalidated independently.
"""

# Base time units for TTL calculations
BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND
BASE_HOUR = 60 * BASE_MINUTE
BASE_DAY = 24 * BASE_HOUR


class CacheConfig:
    """Default cache sizing and TTL values."""

    MAX_SIZE = 100
    DEFAULT_TTL = 2 * BASE_HOUR

    CATALOG_TTL = BASE_DAY  # catalog content rarely changes
    MEDIA_TTL = BASE_HOUR
    RESULTS_TTL = 2 * BASE_HOUR


class CacheKeys:
    """Cache key prefixes. Components build keys as ``<prefix><parts joined by ':'>``."""

    CATALOG_SEARCH = "catalog:search:"
    CATALOG_CATEGORY = "catalog:category:"
    MEDIA_FALLBACK = "media:fallback:"
    RECOMMENDATIONS = "recommendations:"
    SEPARATOR = ":"
