"""Concurrent media link repair.

Each item's media link is probed; unhealthy links are replaced from the
fallback resolver. One task per item runs under a semaphore and results are
written back by position, so output order always equals input order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from fitrec.services.catalog.models import CatalogItem
from fitrec.services.media.link_check import LinkHealthChecker
from fitrec.services.media.resolver import FallbackResolver
from fitrec.shared.constants import MediaConfig
from fitrec.shared.errors import ApplicationError, ErrorCode, ErrorContext, FitrecError
from fitrec.shared.logging import log_operation_error

logger = logging.getLogger(__name__)


class MediaRepairer:
    """Repairs broken media links of catalog items.

    Args:
        link_checker: Probe deciding whether a link is healthy
        resolver: Cascading fallback resolver for unhealthy links
        concurrency: Maximum number of items repaired at once
        fallback_limit: Number of fallback media requested per item
        flag_unrepaired: Mark items whose link stays broken with ``media_broken``
    """

    def __init__(
        self,
        link_checker: LinkHealthChecker,
        resolver: FallbackResolver,
        concurrency: int = MediaConfig.REPAIR_CONCURRENCY,
        fallback_limit: int = MediaConfig.FALLBACK_LIMIT,
        *,
        flag_unrepaired: bool = True,
    ) -> None:
        if concurrency < 1:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"concurrency must be at least 1, got {concurrency}",
                context=ErrorContext(
                    operation="repairer_init",
                    additional_data={"concurrency": concurrency},
                ),
            )

        self._link_checker = link_checker
        self._resolver = resolver
        self._concurrency = concurrency
        self._fallback_limit = fallback_limit
        self._flag_unrepaired = flag_unrepaired

    async def repair(self, item: CatalogItem) -> CatalogItem:
        """Return ``item`` unchanged if its link is healthy, else a repaired copy.

        With no fallback available the original link is kept.
        """
        if await self._link_checker.probe(item.media_url):
            return item

        outcome = await self._resolver.resolve_for_item(
            item.name,
            item.body_parts,
            self._fallback_limit,
        )
        replacement = outcome.first
        if not outcome.success or replacement is None:
            logger.debug("No fallback media for '%s'; keeping original link", item.name)
            return item.with_broken_media() if self._flag_unrepaired else item

        return item.with_fallback(
            url=replacement.url,
            source=replacement.provider,
            fallback_id=replacement.id,
        )

    async def repair_all(self, items: Sequence[CatalogItem]) -> list[CatalogItem]:
        """Repair every item concurrently, preserving order.

        An unexpected error while repairing one item keeps that item as it was.
        """
        if not items:
            return []

        semaphore = asyncio.Semaphore(self._concurrency)

        async def wrapped(item: CatalogItem) -> CatalogItem:
            async with semaphore:
                return await self.repair(item)

        results = await asyncio.gather(
            *(wrapped(item) for item in items),
            return_exceptions=True,
        )

        repaired: list[CatalogItem] = []
        for index, (item, result) in enumerate(zip(items, results)):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                self._log_error(result, item, index)
                repaired.append(item)
            else:
                repaired.append(result)
        return repaired

    def _log_error(self, error: Exception, item: CatalogItem, index: int) -> None:
        if isinstance(error, FitrecError):
            log_operation_error(
                logger=logger,
                operation="repair_item",
                error=error,
                additional_context={"item_index": index, "item_id": item.item_id},
            )
        else:
            logger.warning(
                "Unexpected error repairing item '%s'; keeping original: %s",
                item.item_id,
                error,
                extra={"operation": "repair_item"},
            )


__all__ = ["MediaRepairer"]
