"""Recommendation pipeline orchestrator.

Drives each requested category through fetch -> safety filter -> media
repair -> shaping. Categories are fetched one after another so the catalog
quota is spent predictably; repair fans out per item. A category whose
fetch fails is recorded in ``category_errors`` and skipped, and only a run
in which every category failed raises.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from collections.abc import Iterable
from typing import Any

from fitrec.pipeline.filters import SafetyFilter
from fitrec.pipeline.fingerprint import result_cache_key, subject_prefix
from fitrec.pipeline.models import (
    CategoryState,
    PipelineOutcome,
    PipelineResult,
    SubjectAttributes,
)
from fitrec.pipeline.repair import MediaRepairer
from fitrec.services.cache import BoundedCache
from fitrec.services.catalog.client import CatalogClient
from fitrec.services.http import HttpSessionManager
from fitrec.services.media.resolver import FallbackResolver
from fitrec.shared.constants import CacheConfig
from fitrec.shared.errors import (
    AllCategoriesFailedError,
    ErrorContext,
    create_validation_error,
)
from fitrec.shared.logging import (
    log_operation_error,
    log_operation_start,
    log_operation_success,
    log_state_transition,
)
from fitrec.shared.result import Err

logger = logging.getLogger(__name__)


def _ordered_categories(category_keys: Iterable[str]) -> list[str]:
    seen: list[str] = []
    for key in category_keys:
        normalized = key.strip().lower()
        if normalized and normalized not in seen:
            seen.append(normalized)
    return seen


class RecommendationPipeline:
    """Assembles per-category exercise recommendations for a subject.

    Args:
        catalog_client: Rate-limited catalog client
        safety_filter: Health-condition filter
        repairer: Concurrent media link repairer
        resolver: Fallback resolver, consulted for provider health
        cache: Shared bounded cache used for memoized outcomes
        session_manager: HTTP session owner, closed by ``aclose``
        results_ttl: TTL in seconds of memoized outcomes
        items_per_category: Catalog items requested per category
    """

    def __init__(
        self,
        catalog_client: CatalogClient,
        safety_filter: SafetyFilter,
        repairer: MediaRepairer,
        resolver: FallbackResolver,
        cache: BoundedCache,
        session_manager: HttpSessionManager | None = None,
        results_ttl: float = CacheConfig.RESULTS_TTL,
        items_per_category: int | None = None,
    ) -> None:
        self._catalog = catalog_client
        self._safety_filter = safety_filter
        self._repairer = repairer
        self._resolver = resolver
        self._cache = cache
        self._session_manager = session_manager
        self._results_ttl = results_ttl
        self._items_per_category = items_per_category

    async def __aenter__(self) -> RecommendationPipeline:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def run(
        self,
        subject_id: str,
        category_keys: Iterable[str],
        attributes: SubjectAttributes | None = None,
    ) -> PipelineOutcome:
        """Assemble recommendations for ``category_keys``.

        Args:
            subject_id: Identity the outcome is memoized under
            category_keys: Catalog categories, e.g. ["chest", "back"]
            attributes: Subject attributes driving the safety filter

        Returns:
            PipelineOutcome with one result per category that did not fail

        Raises:
            DomainError: If ``subject_id`` or ``category_keys`` is empty
            AllCategoriesFailedError: If every category failed to fetch
        """
        attributes = attributes or SubjectAttributes()
        categories = _ordered_categories(category_keys)
        if not subject_id:
            raise create_validation_error(
                "subject_id must not be empty",
                field="subject_id",
                operation="pipeline_run",
            )
        if not categories:
            raise create_validation_error(
                "At least one category is required",
                field="category_keys",
                operation="pipeline_run",
            )

        cache_key = result_cache_key(subject_id, categories, attributes)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Serving memoized outcome for %d categories", len(categories))
            return dataclasses.replace(cached, from_cache=True)

        started = time.perf_counter()
        log_operation_start(logger, "pipeline_run", {"categories": categories})

        results: list[PipelineResult] = []
        category_errors: dict[str, str] = {}
        for category in categories:
            result = await self._run_category(category, attributes, category_errors)
            if result is not None:
                results.append(result)

        if not results:
            error = AllCategoriesFailedError(
                category_errors,
                context=ErrorContext(
                    operation="pipeline_run",
                    subject_id=subject_id,
                    additional_data={"category_count": len(categories)},
                ),
            )
            log_operation_error(logger, error)
            raise error

        outcome = PipelineOutcome(results=results, category_errors=category_errors)
        self._cache.set(cache_key, outcome, self._results_ttl)

        log_operation_success(
            logger,
            "pipeline_run",
            duration_ms=(time.perf_counter() - started) * 1000,
            result_info={
                "categories": len(results),
                "failed_categories": len(category_errors),
                "items": sum(len(r.items) for r in results),
            },
        )
        return outcome

    async def refresh(
        self,
        subject_id: str,
        category_keys: Iterable[str],
        attributes: SubjectAttributes | None = None,
    ) -> PipelineOutcome:
        """Drop the subject's memoized outcomes, then run again."""
        self.invalidate_subject(subject_id)
        return await self.run(subject_id, category_keys, attributes)

    def invalidate_subject(self, subject_id: str) -> int:
        """Remove every memoized outcome of ``subject_id``; returns the count removed."""
        removed = self._cache.invalidate_by_prefix(subject_prefix(subject_id))
        logger.debug("Invalidated %d memoized outcome(s)", removed)
        return removed

    def health_status(self) -> dict[str, Any]:
        """Cache statistics, catalog quota usage and provider configuration."""
        return {
            "cache": self._cache.stats().to_dict(),
            "rate_limiter": self._catalog.status().to_dict(),
            "providers": self._resolver.configured_providers(),
        }

    async def aclose(self) -> None:
        if self._session_manager is not None:
            await self._session_manager.close()

    async def _run_category(
        self,
        category: str,
        attributes: SubjectAttributes,
        category_errors: dict[str, str],
    ) -> PipelineResult | None:
        state = CategoryState.PENDING

        def advance(to_state: CategoryState) -> None:
            nonlocal state
            log_state_transition(logger, category, state.value, to_state.value)
            state = to_state

        advance(CategoryState.FETCHING)
        fetched = await self._catalog.items_for_category(category, self._items_per_category)
        if isinstance(fetched, Err):
            category_errors[category] = fetched.error.describe()
            advance(CategoryState.FAILED)
            logger.warning(
                "Category '%s' failed: %s",
                category,
                category_errors[category],
                extra={"operation": "pipeline_run", "category": category},
            )
            return None

        advance(CategoryState.FILTERING)
        safe_items = self._safety_filter.apply(fetched.value, attributes.health_conditions)

        advance(CategoryState.REPAIRING)
        repaired = await self._repairer.repair_all(safe_items)

        advance(CategoryState.SHAPED)
        return PipelineResult(category_key=category, items=repaired)


__all__ = ["RecommendationPipeline"]
