"""Fallback media value types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FallbackMedia:
    """A replacement media link returned by a provider search."""

    id: str
    url: str
    provider: str
    title: str = ""
    width: int | None = None
    height: int | None = None
    preview_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "provider": self.provider,
            "title": self.title,
            "width": self.width,
            "height": self.height,
            "preview_url": self.preview_url,
        }


@dataclass(frozen=True)
class ResolveOutcome:
    """Result of a cascading fallback lookup.

    ``success`` is False with no ``items`` when no provider produced
    anything; callers treat that as "no fallback available". Outcomes are
    cached and shared, so ``items`` is a tuple.
    """

    items: tuple[FallbackMedia, ...] = ()
    provider_used: str | None = None
    success: bool = False

    @property
    def first(self) -> FallbackMedia | None:
        return self.items[0] if self.items else None


__all__ = ["FallbackMedia", "ResolveOutcome"]
