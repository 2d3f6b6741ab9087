"""Tests for MediaRepairer."""

from __future__ import annotations

import asyncio

import pytest

from fitrec.pipeline.repair import MediaRepairer
from fitrec.services.cache import BoundedCache
from fitrec.services.catalog.models import CatalogItem
from fitrec.services.media.resolver import FallbackResolver
from fitrec.shared.errors import ApplicationError
from tests.helpers import StubLinkChecker, StubProvider, catalog_item, fallback_media


def make_repairer(
    cache: BoundedCache,
    broken: list[str],
    providers: list[StubProvider] | None = None,
    **kwargs,
) -> tuple[MediaRepairer, StubLinkChecker]:
    checker = StubLinkChecker(broken)
    resolver = FallbackResolver(providers if providers is not None else [], cache)
    return MediaRepairer(checker, resolver, **kwargs), checker


class TestMediaRepairer:
    """Test cases for repair() and repair_all()."""

    def test_invalid_concurrency(self, cache: BoundedCache) -> None:
        """Test a concurrency below one is rejected."""
        with pytest.raises(ApplicationError):
            make_repairer(cache, [], concurrency=0)

    @pytest.mark.asyncio
    async def test_healthy_item_is_returned_unchanged(self, cache: BoundedCache) -> None:
        """Test a healthy link needs no provider call and yields the same object."""
        provider = StubProvider("giphy", [fallback_media()])
        repairer, _ = make_repairer(cache, [], [provider])
        item = catalog_item("1", "Push Up")

        repaired = await repairer.repair(item)

        assert repaired is item
        assert provider.queries == []

    @pytest.mark.asyncio
    async def test_broken_item_gets_fallback(self, cache: BoundedCache) -> None:
        """Test a broken link is replaced and annotated with its source."""
        item = catalog_item("1", "Push Up")
        provider = StubProvider("tenor", [fallback_media("tenor", "t-9")])
        repairer, _ = make_repairer(cache, [item.media_url], [provider])

        repaired = await repairer.repair(item)

        assert repaired.media_url == "https://tenor.example/t-9.gif"
        assert repaired.fallback_source == "tenor"
        assert repaired.fallback_id == "t-9"
        assert repaired.media_broken is False
        assert item.fallback_source is None
        assert provider.queries == ["push up chest exercise"]

    @pytest.mark.asyncio
    async def test_unrepairable_item_keeps_link_and_is_flagged(self, cache: BoundedCache) -> None:
        """Test an item with no fallback keeps its original link, flagged broken."""
        item = catalog_item("1", "Push Up")
        repairer, _ = make_repairer(cache, [item.media_url], [StubProvider("giphy", fail=True)])

        repaired = await repairer.repair(item)

        assert repaired.media_url == item.media_url
        assert repaired.fallback_source is None
        assert repaired.media_broken is True

    @pytest.mark.asyncio
    async def test_flagging_can_be_disabled(self, cache: BoundedCache) -> None:
        """Test flag_unrepaired=False returns the original item untouched."""
        item = catalog_item("1", "Push Up")
        repairer, _ = make_repairer(cache, [item.media_url], flag_unrepaired=False)

        assert await repairer.repair(item) is item

    @pytest.mark.asyncio
    async def test_repair_is_idempotent(self, cache: BoundedCache) -> None:
        """Test repairing an already repaired item changes nothing."""
        item = catalog_item("1", "Push Up")
        provider = StubProvider("giphy", [fallback_media()])
        repairer, _ = make_repairer(cache, [item.media_url], [provider])

        once = await repairer.repair(item)
        twice = await repairer.repair(once)

        assert twice == once

    @pytest.mark.asyncio
    async def test_repair_all_preserves_order(self, cache: BoundedCache) -> None:
        """Test output order equals input order regardless of completion order."""
        items = [catalog_item(str(i), f"Move {i}") for i in range(8)]
        broken = [items[i].media_url for i in (1, 4, 6)]
        provider = StubProvider("giphy", [fallback_media()])
        repairer, checker = make_repairer(cache, broken, [provider], concurrency=3)

        repaired = await repairer.repair_all(items)

        assert [item.item_id for item in repaired] == [item.item_id for item in items]
        assert [i for i, item in enumerate(repaired) if item.fallback_source] == [1, 4, 6]
        assert len(checker.probed) == 8

    @pytest.mark.asyncio
    async def test_repair_all_empty(self, cache: BoundedCache) -> None:
        """Test an empty input returns an empty list."""
        repairer, _ = make_repairer(cache, [])
        assert await repairer.repair_all([]) == []

    @pytest.mark.asyncio
    async def test_repair_all_keeps_item_on_unexpected_error(self, cache: BoundedCache) -> None:
        """Test an error repairing one item keeps that item and repairs the rest."""

        class ExplodingChecker(StubLinkChecker):
            async def probe(self, url: str, timeout: float | None = None) -> bool:
                if url.endswith("/boom.gif"):
                    raise RuntimeError("probe crashed")
                return await super().probe(url, timeout)

        items = [
            catalog_item("1", "Push Up"),
            catalog_item("2", "Squat", gifUrl="https://media.example/boom.gif"),
            catalog_item("3", "Plank"),
        ]
        checker = ExplodingChecker([items[2].media_url])
        resolver = FallbackResolver([StubProvider("giphy", [fallback_media()])], cache)
        repairer = MediaRepairer(checker, resolver)

        repaired = await repairer.repair_all(items)

        assert repaired[0] is items[0]
        assert repaired[1] is items[1]
        assert repaired[2].fallback_source == "giphy"

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, cache: BoundedCache) -> None:
        """Test no more than ``concurrency`` repairs run at once."""
        active = 0
        peak = 0

        class SlowChecker(StubLinkChecker):
            async def probe(self, url: str, timeout: float | None = None) -> bool:
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1
                return True

        items: list[CatalogItem] = [catalog_item(str(i), f"Move {i}") for i in range(10)]
        repairer = MediaRepairer(SlowChecker(), FallbackResolver([], cache), concurrency=2)

        await repairer.repair_all(items)

        assert peak == 2
