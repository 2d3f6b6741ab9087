"""Cascading fallback media resolver.

Tries the configured providers in priority order and stops at the first one
that returns at least one item. Winning results are cached per normalized
query. A provider that errors or is rate limited counts as having nothing;
when every provider fails the outcome is ``success=False`` with no items,
and nothing is raised.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence

from fitrec.services.cache import BoundedCache
from fitrec.services.media.models import ResolveOutcome
from fitrec.services.media.providers import MediaProvider
from fitrec.services.rate_limiter import SlidingWindowRateLimiter
from fitrec.shared.constants import CacheConfig, CacheKeys, MediaConfig
from fitrec.shared.result import Err

logger = logging.getLogger(__name__)

_NOISE_WORDS = re.compile(
    r"\b(" + "|".join(MediaConfig.QUERY_NOISE_WORDS) + r")\b",
    re.IGNORECASE,
)


def normalize_query(query: str) -> str:
    return " ".join(query.lower().split())


def build_search_query(
    name: str,
    categories: Iterable[str],
    qualifier: str = MediaConfig.QUERY_QUALIFIER,
) -> str:
    """Build a provider search query from an exercise name and its categories.

    The name is lower-cased and stripped of generic noise words, then up to
    two category terms longer than two characters and the qualifier are
    appended.

    Example:
        >>> build_search_query("Barbell Bench Press Exercise", ["chest", "upper arms"])
        'barbell bench press chest upper arms exercise'
    """
    cleaned = normalize_query(_NOISE_WORDS.sub(" ", name.lower()))
    terms = [
        term
        for term in (normalize_query(category) for category in categories)
        if len(term) >= MediaConfig.QUERY_MIN_CATEGORY_LENGTH
    ][: MediaConfig.QUERY_MAX_CATEGORIES]
    return " ".join(part for part in (cleaned, *terms, qualifier) if part)


class FallbackResolver:
    """Finds replacement media through an ordered list of providers.

    Args:
        providers: Providers in priority order
        cache: Shared bounded cache
        media_ttl: TTL in seconds for cached winning results
        provider_limiters: Optional limiter per provider name; a denied
            call counts as that provider failing
    """

    def __init__(
        self,
        providers: Sequence[MediaProvider],
        cache: BoundedCache,
        media_ttl: float = CacheConfig.MEDIA_TTL,
        provider_limiters: Mapping[str, SlidingWindowRateLimiter] | None = None,
    ) -> None:
        self.providers = list(providers)
        self._cache = cache
        self._media_ttl = media_ttl
        self._provider_limiters = dict(provider_limiters or {})

    async def resolve(self, query_terms: str, limit: int = MediaConfig.FALLBACK_LIMIT) -> ResolveOutcome:
        query = normalize_query(query_terms)
        cache_key = f"{CacheKeys.MEDIA_FALLBACK}{query}:{limit}"

        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Fallback cache hit for '%s'", query)
            return cached

        for provider in self.providers:
            limiter = self._provider_limiters.get(provider.name)
            if limiter is not None and limiter.try_acquire() is not None:
                logger.debug("Skipping %s: provider rate limit reached", provider.name)
                continue

            try:
                result = await provider.search(query, limit)
            except Exception:
                logger.exception(
                    "Provider %s raised while searching '%s'",
                    provider.name,
                    query,
                    extra={"operation": "resolve_fallback", "provider": provider.name},
                )
                continue
            if isinstance(result, Err):
                logger.debug(
                    "Provider %s produced no fallback for '%s': %s",
                    provider.name,
                    query,
                    result.error.message,
                )
                continue
            if not result.value:
                continue

            outcome = ResolveOutcome(
                items=tuple(result.value),
                provider_used=provider.name,
                success=True,
            )
            self._cache.set(cache_key, outcome, self._media_ttl)
            logger.info(
                "Resolved fallback media for '%s' via %s",
                query,
                provider.name,
                extra={"operation": "resolve_fallback"},
            )
            return outcome

        logger.info(
            "No fallback media found for '%s'",
            query,
            extra={"operation": "resolve_fallback"},
        )
        return ResolveOutcome()

    async def resolve_for_item(
        self,
        name: str,
        body_parts: Iterable[str],
        limit: int = MediaConfig.FALLBACK_LIMIT,
    ) -> ResolveOutcome:
        return await self.resolve(build_search_query(name, body_parts), limit)

    def configured_providers(self) -> dict[str, bool]:
        """Provider name to whether it has a credential, in priority order."""
        return {provider.name: provider.configured for provider in self.providers}


__all__ = [
    "FallbackResolver",
    "build_search_query",
    "normalize_query",
]
