"""Tests for CatalogClient: rate limiting, error classification and caching."""

from __future__ import annotations

import asyncio

import aiohttp
import pytest

from fitrec.config.models.catalog_settings import CatalogSettings
from fitrec.services.cache import BoundedCache
from fitrec.services.catalog.client import CatalogClient
from fitrec.services.http import HttpSessionManager
from fitrec.services.rate_limiter import SlidingWindowRateLimiter
from fitrec.shared.errors import ErrorCode, FetchErrorKind
from fitrec.shared.result import Err, Ok
from tests.helpers import FakeClock, FakeResponse, FakeSession, exercise_payload, search_response


@pytest.fixture
def client(
    session_manager: HttpSessionManager,
    limiter: SlidingWindowRateLimiter,
    cache: BoundedCache,
) -> CatalogClient:
    """Catalog client over the fake session."""
    return CatalogClient(session_manager, limiter, cache, CatalogSettings())


class TestCatalogRequest:
    """Tests for request() classification."""

    @pytest.mark.asyncio
    async def test_success_returns_payload(
        self,
        client: CatalogClient,
        fake_session: FakeSession,
    ) -> None:
        """Test a 2xx JSON object comes back as Ok."""
        fake_session.get_handler = FakeResponse(payload={"success": True})

        result = await client.request("/exercises", {"search": "chest", "limit": 5})

        assert result == Ok({"success": True})
        call = fake_session.calls_for("GET")[0]
        assert call.url == "https://exercisedb.dev/api/v1/exercises"
        assert call.params == {"search": "chest", "limit": "5"}
        assert call.timeout.total == 10

    @pytest.mark.asyncio
    async def test_rate_limit_denial_skips_network(
        self,
        session_manager: HttpSessionManager,
        fake_session: FakeSession,
        cache: BoundedCache,
        clock: FakeClock,
    ) -> None:
        """Test the call past the per-minute limit performs no I/O."""
        limiter = SlidingWindowRateLimiter(per_minute=2, per_day=100, clock=clock)
        client = CatalogClient(session_manager, limiter, cache)
        fake_session.get_handler = FakeResponse(payload={"success": True})

        assert isinstance(await client.request("/exercises"), Ok)
        assert isinstance(await client.request("/exercises"), Ok)
        result = await client.request("/exercises")

        assert isinstance(result, Err)
        assert result.error.kind is FetchErrorKind.RATE_LIMIT_EXCEEDED
        assert result.error.code is ErrorCode.RATE_LIMIT_EXCEEDED
        assert len(fake_session.calls) == 2

    @pytest.mark.asyncio
    async def test_failed_call_still_consumes_quota(
        self,
        client: CatalogClient,
        fake_session: FakeSession,
    ) -> None:
        """Test quota is spent before the call and not refunded on failure."""
        fake_session.get_handler = FakeResponse(status=503)

        await client.request("/exercises")

        assert client.status().requests_today == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("outcome", "kind"),
        [
            (asyncio.TimeoutError(), FetchErrorKind.TIMEOUT),
            (aiohttp.ClientConnectionError("refused"), FetchErrorKind.TRANSPORT_ERROR),
            (OSError("dns"), FetchErrorKind.TRANSPORT_ERROR),
            (FakeResponse(status=500), FetchErrorKind.UPSTREAM_ERROR),
            (FakeResponse(status=404), FetchErrorKind.UPSTREAM_ERROR),
            (FakeResponse(body=b"<html>"), FetchErrorKind.MALFORMED_RESPONSE),
            (FakeResponse(payload=[1, 2]), FetchErrorKind.MALFORMED_RESPONSE),
        ],
    )
    async def test_error_classification(
        self,
        client: CatalogClient,
        fake_session: FakeSession,
        outcome: object,
        kind: FetchErrorKind,
    ) -> None:
        """Test each failure mode maps onto its FetchErrorKind."""
        fake_session.get_handler = outcome

        result = await client.request("/exercises")

        assert isinstance(result, Err)
        assert result.error.kind is kind
        assert result.error.endpoint == "/exercises"

    @pytest.mark.asyncio
    async def test_upstream_error_carries_status(
        self,
        client: CatalogClient,
        fake_session: FakeSession,
    ) -> None:
        """Test non-2xx failures record the HTTP status."""
        fake_session.get_handler = FakeResponse(status=502)

        result = await client.request("/exercises")

        assert isinstance(result, Err)
        assert result.error.status_code == 502
        assert "502" in result.error.describe()


class TestCatalogSearch:
    """Tests for search_items() and items_for_category()."""

    @pytest.mark.asyncio
    async def test_search_parses_items(self, client: CatalogClient, fake_session: FakeSession) -> None:
        """Test camelCase payload is validated into CatalogItem models."""
        fake_session.get_handler = search_response(
            exercise_payload("ex-1", "Push Up", body_parts=["chest"]),
            exercise_payload("ex-2", "Chest Dip", body_parts=["chest"], equipment=["dip bars"]),
        )

        result = await client.search_items("Chest", 5)

        assert isinstance(result, Ok)
        assert [item.item_id for item in result.value] == ["ex-1", "ex-2"]
        assert result.value[1].equipment == ["dip bars"]
        assert fake_session.calls[0].params == {"search": "chest", "limit": "5"}

    @pytest.mark.asyncio
    async def test_search_accepts_items_key(self, client: CatalogClient, fake_session: FakeSession) -> None:
        """Test the alternative ``items`` envelope key is accepted."""
        fake_session.get_handler = FakeResponse(
            payload={"success": True, "data": {"items": [exercise_payload("ex-1", "Push Up")]}}
        )

        result = await client.search_items("chest", 5)

        assert isinstance(result, Ok)
        assert len(result.value) == 1

    @pytest.mark.asyncio
    async def test_search_is_cached(self, client: CatalogClient, fake_session: FakeSession) -> None:
        """Test a repeated search is served from the cache."""
        fake_session.get_handler = search_response(exercise_payload("ex-1", "Push Up"))

        first = await client.search_items("chest", 5)
        second = await client.search_items("chest", 5)

        assert first == second
        assert len(fake_session.calls) == 1

    @pytest.mark.asyncio
    async def test_search_unsuccessful_flag(self, client: CatalogClient, fake_session: FakeSession) -> None:
        """Test ``success: false`` is an upstream error and is not cached."""
        fake_session.get_handler = search_response(success=False)

        result = await client.search_items("chest", 5)
        await client.search_items("chest", 5)

        assert isinstance(result, Err)
        assert result.error.kind is FetchErrorKind.UPSTREAM_ERROR
        assert len(fake_session.calls) == 2

    @pytest.mark.asyncio
    async def test_search_schema_violation(self, client: CatalogClient, fake_session: FakeSession) -> None:
        """Test items missing required fields become MALFORMED_RESPONSE."""
        fake_session.get_handler = search_response({"name": "No Id"})

        result = await client.search_items("chest", 5)

        assert isinstance(result, Err)
        assert result.error.kind is FetchErrorKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_category_filters_by_body_part_or_muscle(
        self,
        client: CatalogClient,
        fake_session: FakeSession,
    ) -> None:
        """Test only items naming the category survive the post-filter."""
        fake_session.get_handler = search_response(
            exercise_payload("ex-1", "Push Up", body_parts=["chest"]),
            exercise_payload("ex-2", "Chest Stretch", body_parts=["shoulders"]),
            exercise_payload(
                "ex-3",
                "Cable Fly",
                body_parts=["upper arms"],
                target_muscles=["chest"],
            ),
        )

        result = await client.items_for_category("Chest", 10)

        assert isinstance(result, Ok)
        assert [item.item_id for item in result.value] == ["ex-1", "ex-3"]

    @pytest.mark.asyncio
    async def test_category_matches_within_body_part_names(
        self,
        client: CatalogClient,
        fake_session: FakeSession,
    ) -> None:
        """Test a category contained in a longer body part name still matches."""
        fake_session.get_handler = search_response(
            exercise_payload("ex-1", "Barbell Squat", body_parts=["upper legs"], target_muscles=["quads"]),
            exercise_payload("ex-2", "Calf Raise", body_parts=["LOWER LEGS"], target_muscles=["calves"]),
            exercise_payload("ex-3", "Push Up", body_parts=["chest"]),
        )

        result = await client.items_for_category("legs", 10)

        assert isinstance(result, Ok)
        assert [item.item_id for item in result.value] == ["ex-1", "ex-2"]

    @pytest.mark.asyncio
    async def test_cached_items_are_not_shared_with_callers(
        self,
        client: CatalogClient,
        fake_session: FakeSession,
    ) -> None:
        """Test clearing a returned list leaves the cached category intact."""
        fake_session.get_handler = search_response(exercise_payload("ex-1", "Push Up"))

        first = await client.items_for_category("chest", 10)
        assert isinstance(first, Ok)
        first.value.clear()
        second = await client.items_for_category("chest", 10)

        assert isinstance(second, Ok)
        assert [item.item_id for item in second.value] == ["ex-1"]
        assert len(fake_session.calls) == 1

    @pytest.mark.asyncio
    async def test_category_uses_default_page_size(
        self,
        session_manager: HttpSessionManager,
        fake_session: FakeSession,
        limiter: SlidingWindowRateLimiter,
        cache: BoundedCache,
    ) -> None:
        """Test the configured items_per_category is the default limit."""
        client = CatalogClient(
            session_manager,
            limiter,
            cache,
            CatalogSettings(items_per_category=7),
        )
        fake_session.get_handler = search_response()

        await client.items_for_category("back")

        assert fake_session.calls[0].params["limit"] == "7"
        assert cache.has("catalog:category:back:7")
        assert cache.has("catalog:search:back:7")

    @pytest.mark.asyncio
    async def test_category_propagates_fetch_error(
        self,
        client: CatalogClient,
        fake_session: FakeSession,
    ) -> None:
        """Test a failed search surfaces as Err from items_for_category."""
        fake_session.get_handler = asyncio.TimeoutError()

        result = await client.items_for_category("chest")

        assert isinstance(result, Err)
        assert result.error.kind is FetchErrorKind.TIMEOUT
