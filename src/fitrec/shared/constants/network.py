"""
Network Configuration Constants

Endpoints, timeouts and rate limits for the exercise catalog and the
media providers.
"""

from .cache import BASE_SECOND


class NetworkConfig:
    """HTTP client settings shared by every outbound call."""

    USER_AGENT = "fitrec/0.1.0"
    ACCEPT_JSON = "application/json"
    CONNECTION_LIMIT = 20


class CatalogConfig:
    """Exercise catalog defaults."""

    BASE_URL = "https://exercisedb.dev/api/v1"
    SEARCH_ENDPOINT = "/exercises"
    TIMEOUT = 10 * BASE_SECOND

    RATE_LIMIT_PER_MINUTE = 60
    RATE_LIMIT_PER_DAY = 5000
    MINUTE_WINDOW = 60 * BASE_SECOND
    DAY_WINDOW = 24 * 60 * 60 * BASE_SECOND

    ITEMS_PER_CATEGORY = 10


class ProviderNames:
    """Media provider identifiers used in configuration and results."""

    GIPHY = "giphy"
    TENOR = "tenor"
    UNSPLASH = "unsplash"

    ALL = (GIPHY, TENOR, UNSPLASH)


class MediaConfig:
    """Media provider and link probe defaults."""

    GIPHY_BASE_URL = "https://api.giphy.com/v1"
    TENOR_BASE_URL = "https://g.tenor.com/v1"
    UNSPLASH_BASE_URL = "https://api.unsplash.com"

    PROVIDER_ORDER = (ProviderNames.GIPHY, ProviderNames.TENOR)
    PROVIDER_TIMEOUT = 5 * BASE_SECOND
    PROBE_TIMEOUT = 3 * BASE_SECOND

    FALLBACK_LIMIT = 1
    REPAIR_CONCURRENCY = 10

    QUERY_QUALIFIER = "exercise"
    QUERY_NOISE_WORDS = ("exercise", "workout", "training", "fitness")
    QUERY_MAX_CATEGORIES = 2
    QUERY_MIN_CATEGORY_LENGTH = 3
