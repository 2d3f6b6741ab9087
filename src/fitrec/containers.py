"""Dependency Injection container for fitrec.

This module wires the services with dependency-injector so no module keeps
its own global instance. One container owns:
- Settings (Singleton)
- The shared BoundedCache and HTTP session manager (Singletons)
- The catalog rate limiter and client
- Media providers, the fallback resolver and the link checker
- The safety filter, repairer and recommendation pipeline
"""

from __future__ import annotations

from dependency_injector import containers, providers

from fitrec.config.loader import load_settings
from fitrec.config.models.settings import Settings
from fitrec.pipeline.filters import SafetyFilter
from fitrec.pipeline.orchestrator import RecommendationPipeline
from fitrec.pipeline.repair import MediaRepairer
from fitrec.services.cache import BoundedCache
from fitrec.services.catalog.client import CatalogClient
from fitrec.services.http import HttpSessionManager
from fitrec.services.media.link_check import LinkHealthChecker
from fitrec.services.media.providers import build_providers
from fitrec.services.media.resolver import FallbackResolver
from fitrec.services.rate_limiter import SlidingWindowRateLimiter


def _provider_limiters(config: Settings) -> dict[str, SlidingWindowRateLimiter]:
    per_minute = config.media.provider_rate_limit_per_minute
    if per_minute is None:
        return {}
    return {
        name: SlidingWindowRateLimiter(
            per_minute=per_minute,
            per_day=config.catalog.rate_limit_per_day,
            name=name,
        )
        for name in config.media.provider_order
    }


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for fitrec services.

    Example:
        >>> container = Container()
        >>> container.config.override(providers.Object(Settings()))
        >>> pipeline = container.pipeline()
        >>> outcome = await pipeline.run("user-1", ["chest"])
    """

    # Configuration
    config = providers.Singleton(load_settings)

    # Shared resources
    cache = providers.Singleton(
        BoundedCache,
        max_size=providers.Callable(lambda config: config.cache.max_size, config=config),
        default_ttl=providers.Callable(lambda config: config.cache.default_ttl, config=config),
    )

    session_manager = providers.Singleton(HttpSessionManager)

    # Catalog
    catalog_rate_limiter = providers.Singleton(
        SlidingWindowRateLimiter,
        per_minute=providers.Callable(
            lambda config: config.catalog.rate_limit_per_minute,
            config=config,
        ),
        per_day=providers.Callable(
            lambda config: config.catalog.rate_limit_per_day,
            config=config,
        ),
    )

    catalog_client = providers.Singleton(
        CatalogClient,
        session_manager=session_manager,
        rate_limiter=catalog_rate_limiter,
        cache=cache,
        settings=providers.Callable(lambda config: config.catalog, config=config),
        catalog_ttl=providers.Callable(lambda config: config.cache.catalog_ttl, config=config),
    )

    # Media
    link_checker = providers.Singleton(
        LinkHealthChecker,
        session_manager=session_manager,
        timeout=providers.Callable(lambda config: config.media.probe_timeout, config=config),
    )

    media_providers = providers.Singleton(
        build_providers,
        session_manager=session_manager,
        media_settings=providers.Callable(lambda config: config.media, config=config),
    )

    fallback_resolver = providers.Singleton(
        FallbackResolver,
        providers=media_providers,
        cache=cache,
        media_ttl=providers.Callable(lambda config: config.cache.media_ttl, config=config),
        provider_limiters=providers.Callable(_provider_limiters, config=config),
    )

    # Pipeline
    safety_filter = providers.Singleton(SafetyFilter)

    repairer = providers.Factory(
        MediaRepairer,
        link_checker=link_checker,
        resolver=fallback_resolver,
        concurrency=providers.Callable(
            lambda config: config.media.repair_concurrency,
            config=config,
        ),
        fallback_limit=providers.Callable(
            lambda config: config.media.fallback_limit,
            config=config,
        ),
    )

    pipeline = providers.Factory(
        RecommendationPipeline,
        catalog_client=catalog_client,
        safety_filter=safety_filter,
        repairer=repairer,
        resolver=fallback_resolver,
        cache=cache,
        session_manager=session_manager,
        results_ttl=providers.Callable(lambda config: config.cache.results_ttl, config=config),
        items_per_category=providers.Callable(
            lambda config: config.catalog.items_per_category,
            config=config,
        ),
    )


__all__ = ["Container"]
