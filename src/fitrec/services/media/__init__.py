"""Fallback media: providers, cascading resolver and link health check."""

from .link_check import LinkHealthChecker
from .models import FallbackMedia, ResolveOutcome
from .providers import GiphyProvider, MediaProvider, TenorProvider, UnsplashProvider, build_providers
from .resolver import FallbackResolver, build_search_query

__all__ = [
    "FallbackMedia",
    "FallbackResolver",
    "GiphyProvider",
    "LinkHealthChecker",
    "MediaProvider",
    "ResolveOutcome",
    "TenorProvider",
    "UnsplashProvider",
    "build_providers",
    "build_search_query",
]
