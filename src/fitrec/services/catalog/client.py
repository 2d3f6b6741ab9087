"""Rate-limited exercise catalog client.

Every call passes the sliding-window limiter before any network I/O and
comes back as ``Ok``/``Err``; failures are classified into
``FetchErrorKind`` and never retried here.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import aiohttp
import orjson
from pydantic import ValidationError

from fitrec.config.models.catalog_settings import CatalogSettings
from fitrec.services.cache import BoundedCache
from fitrec.services.catalog.models import CatalogItem, CatalogSearchResponse
from fitrec.services.http import HttpSessionManager
from fitrec.services.rate_limiter import RateLimiterStatus, SlidingWindowRateLimiter
from fitrec.shared.constants import CacheConfig, CacheKeys
from fitrec.shared.errors import (
    FetchError,
    FetchErrorKind,
    InfrastructureError,
    create_type_coercion_error,
)
from fitrec.shared.logging import log_api_call, log_operation_error
from fitrec.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class CatalogClient:
    """Client for the exercise catalog API.

    Args:
        session_manager: Shared HTTP session owner
        rate_limiter: Limiter consulted before every request
        cache: Shared bounded cache for search results
        settings: Endpoint, timeout and page size configuration
        catalog_ttl: TTL in seconds for cached search results
    """

    def __init__(
        self,
        session_manager: HttpSessionManager,
        rate_limiter: SlidingWindowRateLimiter,
        cache: BoundedCache,
        settings: CatalogSettings | None = None,
        catalog_ttl: float = CacheConfig.CATALOG_TTL,
    ) -> None:
        self.settings = settings or CatalogSettings()
        self._session_manager = session_manager
        self._rate_limiter = rate_limiter
        self._cache = cache
        self._catalog_ttl = catalog_ttl

    async def request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Result[dict[str, Any], FetchError]:
        """GET ``base_url + endpoint`` and return the decoded JSON object.

        A denied rate limit check returns ``RATE_LIMIT_EXCEEDED`` without
        touching the network. Permitted calls consume quota even if they fail.
        """
        denied = self._rate_limiter.try_acquire()
        if denied is not None:
            return Err(
                FetchError(
                    kind=FetchErrorKind.RATE_LIMIT_EXCEEDED,
                    message=f"Catalog {denied.value} quota exhausted",
                    endpoint=endpoint,
                )
            )

        url = self.settings.base_url.rstrip("/") + endpoint
        query = {key: str(value) for key, value in (params or {}).items()}
        timeout = aiohttp.ClientTimeout(total=self.settings.timeout)
        started = time.perf_counter()

        try:
            session = await self._session_manager.get_session()
            async with session.get(url, params=query, timeout=timeout) as response:
                status = response.status
                body = await response.read()
        except asyncio.TimeoutError:
            return self._fail(
                FetchErrorKind.TIMEOUT,
                f"No response within {self.settings.timeout}s",
                endpoint,
            )
        except (aiohttp.ClientError, OSError, InfrastructureError) as e:
            return self._fail(FetchErrorKind.TRANSPORT_ERROR, str(e) or type(e).__name__, endpoint)

        log_api_call(
            logger,
            endpoint=endpoint,
            status_code=status,
            duration_ms=(time.perf_counter() - started) * 1000,
        )

        if not 200 <= status < 300:
            return self._fail(
                FetchErrorKind.UPSTREAM_ERROR,
                f"Catalog responded with HTTP {status}",
                endpoint,
                status_code=status,
            )

        try:
            payload = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            return self._fail(FetchErrorKind.MALFORMED_RESPONSE, f"Invalid JSON: {e}", endpoint)

        if not isinstance(payload, dict):
            return self._fail(
                FetchErrorKind.MALFORMED_RESPONSE,
                f"Expected a JSON object, got {type(payload).__name__}",
                endpoint,
            )

        return Ok(payload)

    async def search_items(
        self,
        term: str,
        limit: int | None = None,
    ) -> Result[list[CatalogItem], FetchError]:
        """Keyword search, cached for the catalog TTL.

        The cache holds a tuple; every call returns a fresh list.
        """
        limit = limit or self.settings.items_per_category
        normalized = term.strip().lower()
        cache_key = f"{CacheKeys.CATALOG_SEARCH}{normalized}:{limit}"

        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Catalog search cache hit for '%s'", normalized)
            return Ok(list(cached))

        endpoint = self.settings.search_endpoint
        fetched = await self.request(endpoint, {"search": normalized, "limit": limit})
        if isinstance(fetched, Err):
            return fetched

        parsed = self._parse_search(fetched.value, endpoint)
        if isinstance(parsed, Ok):
            self._cache.set(cache_key, tuple(parsed.value), self._catalog_ttl)
        return parsed

    async def items_for_category(
        self,
        category: str,
        limit: int | None = None,
    ) -> Result[list[CatalogItem], FetchError]:
        """Search by category and keep items whose body parts or muscles match it."""
        limit = limit or self.settings.items_per_category
        normalized = category.strip().lower()
        cache_key = f"{CacheKeys.CATALOG_CATEGORY}{normalized}:{limit}"

        cached = self._cache.get(cache_key)
        if cached is not None:
            return Ok(list(cached))

        searched = await self.search_items(normalized, limit)
        if isinstance(searched, Err):
            return searched

        matching = [item for item in searched.value if item.mentions(normalized)]
        self._cache.set(cache_key, tuple(matching), self._catalog_ttl)
        return Ok(matching)

    def status(self) -> RateLimiterStatus:
        return self._rate_limiter.status()

    def _parse_search(
        self,
        payload: dict[str, Any],
        endpoint: str,
    ) -> Result[list[CatalogItem], FetchError]:
        try:
            response = CatalogSearchResponse.model_validate(payload)
        except ValidationError as e:
            error = create_type_coercion_error(
                message="Catalog search payload failed validation",
                model_name="CatalogSearchResponse",
                validation_errors=e.errors(),
                operation="catalog_search",
                original_error=e,
            )
            log_operation_error(logger, error)
            return Err(
                FetchError(
                    kind=FetchErrorKind.MALFORMED_RESPONSE,
                    message=f"{e.error_count()} validation error(s) in search payload",
                    endpoint=endpoint,
                )
            )

        if not response.success:
            return self._fail(
                FetchErrorKind.UPSTREAM_ERROR,
                "Catalog reported an unsuccessful search",
                endpoint,
            )
        return Ok(response.data.all_items())

    def _fail(
        self,
        kind: FetchErrorKind,
        message: str,
        endpoint: str,
        status_code: int | None = None,
    ) -> Err[FetchError]:
        error = FetchError(
            kind=kind,
            message=message,
            endpoint=endpoint,
            status_code=status_code,
        )
        logger.warning(
            "Catalog request to %s failed: %s",
            endpoint,
            error.describe(),
            extra={"operation": "catalog_request", "error_code": error.code.name},
        )
        return Err(error)


__all__ = ["CatalogClient"]
