"""Test doubles shared across the suite.

The fake session mirrors the small part of ``aiohttp.ClientSession`` the
services use: ``get``/``head`` returning async context managers whose
response exposes ``status`` and ``read()``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Union

import orjson

from fitrec.services.catalog.models import CatalogItem
from fitrec.services.media.models import FallbackMedia
from fitrec.shared.errors import ErrorCode, ProviderError
from fitrec.shared.result import Err, Ok


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, status: int = 200, payload: Any = None, body: bytes | None = None) -> None:
        self.status = status
        if body is None:
            body = orjson.dumps(payload) if payload is not None else b""
        self._body = body

    async def read(self) -> bytes:
        return self._body


Outcome = Union[FakeResponse, BaseException]
Handler = Callable[[str, dict[str, Any]], Outcome]


class _RequestContext:
    def __init__(self, outcome: Outcome) -> None:
        self._outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome

    async def __aexit__(self, *exc_info: object) -> bool:
        return False


@dataclass
class RecordedCall:
    method: str
    url: str
    params: dict[str, Any]
    headers: dict[str, str]
    timeout: Any = None


@dataclass
class FakeSession:
    """Routes requests to handlers or fixed outcomes and records every call."""

    get_handler: Handler | Outcome | None = None
    head_handler: Handler | Outcome | None = None
    calls: list[RecordedCall] = field(default_factory=list)
    closed: bool = False

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append(RecordedCall("GET", url, dict(params or {}), dict(headers or {}), timeout))
        return _RequestContext(self._resolve(self.get_handler, url, params))

    def head(self, url, allow_redirects=True, timeout=None):
        self.calls.append(RecordedCall("HEAD", url, {}, {}, timeout))
        return _RequestContext(self._resolve(self.head_handler, url, {}))

    async def close(self) -> None:
        self.closed = True

    def calls_for(self, method: str) -> list[RecordedCall]:
        return [call for call in self.calls if call.method == method]

    @staticmethod
    def _resolve(handler, url, params) -> Outcome:
        if handler is None:
            return FakeResponse(status=404)
        if isinstance(handler, (FakeResponse, BaseException)):
            return handler
        return handler(url, dict(params or {}))


def exercise_payload(
    item_id: str,
    name: str,
    gif_url: str = "",
    body_parts: Iterable[str] = ("chest",),
    equipment: Iterable[str] = ("body weight",),
    target_muscles: Iterable[str] = ("pectorals",),
) -> dict[str, Any]:
    """One exercise in the catalog's camelCase wire format."""
    return {
        "exerciseId": item_id,
        "name": name,
        "gifUrl": gif_url or f"https://media.example/{item_id}.gif",
        "instructions": ["Step:1 Set up", "Step:2 Move"],
        "targetMuscles": list(target_muscles),
        "bodyParts": list(body_parts),
        "equipments": list(equipment),
        "secondaryMuscles": ["triceps"],
    }


def search_response(*exercises: dict[str, Any], success: bool = True) -> FakeResponse:
    return FakeResponse(payload={"success": success, "data": {"exercises": list(exercises)}})


def catalog_item(item_id: str, name: str, **overrides: Any) -> CatalogItem:
    payload = exercise_payload(item_id, name)
    payload.update(overrides)
    return CatalogItem.model_validate(payload)


def fallback_media(provider: str = "giphy", media_id: str = "g-1") -> FallbackMedia:
    return FallbackMedia(
        id=media_id,
        url=f"https://{provider}.example/{media_id}.gif",
        provider=provider,
        title="demo",
        width=200,
        height=200,
    )


class StubProvider:
    """Provider double with a fixed answer and a call log."""

    def __init__(
        self,
        name: str,
        items: list[FallbackMedia] | None = None,
        *,
        configured: bool = True,
        fail: bool = False,
        raises: Exception | None = None,
    ) -> None:
        self.name = name
        self.items = items or []
        self.configured = configured
        self.fail = fail
        self.raises = raises
        self.queries: list[str] = []

    async def search(self, query: str, limit: int):
        self.queries.append(query)
        if self.raises is not None:
            raise self.raises
        if not self.configured:
            return Err(ProviderError(self.name, ErrorCode.PROVIDER_NOT_CONFIGURED, "no key"))
        if self.fail:
            return Err(ProviderError(self.name, ErrorCode.PROVIDER_REQUEST_FAILED, "HTTP 500"))
        return Ok(self.items[:limit])


class StubLinkChecker:
    """Link checker answering from a set of known-broken URLs."""

    def __init__(self, broken: Iterable[str] = ()) -> None:
        self.broken = set(broken)
        self.probed: list[str] = []

    async def probe(self, url: str, timeout: float | None = None) -> bool:
        self.probed.append(url)
        return bool(url) and url not in self.broken
