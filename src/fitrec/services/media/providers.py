"""Third-party media search providers.

Each provider wraps one keyword search API, requests its strictest
safe-content filter, and returns ``Ok(list[FallbackMedia])`` or
``Err(ProviderError)``. A provider without a credential is unconfigured
and fails every search without any network I/O.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import aiohttp
import orjson

from fitrec.config.models.media_settings import MediaSettings
from fitrec.services.http import HttpSessionManager
from fitrec.services.media.models import FallbackMedia
from fitrec.shared.constants import MediaConfig, ProviderNames
from fitrec.shared.errors import ErrorCode, InfrastructureError, ProviderError
from fitrec.shared.logging import log_api_call
from fitrec.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> int | None:
    # GIPHY reports dimensions as strings
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class MediaProvider(ABC):
    """Base class for keyword media search providers.

    Args:
        session_manager: Shared HTTP session owner
        credential: API key or access key; empty means unconfigured
        base_url: Provider API root
        timeout: Request timeout in seconds
    """

    name: str = ""

    def __init__(
        self,
        session_manager: HttpSessionManager,
        credential: str,
        base_url: str,
        timeout: float = MediaConfig.PROVIDER_TIMEOUT,
    ) -> None:
        self._session_manager = session_manager
        self._credential = credential
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._credential)

    async def search(self, query: str, limit: int) -> Result[list[FallbackMedia], ProviderError]:
        """Search the provider and return at most ``limit`` usable items."""
        if not self.configured:
            return Err(
                ProviderError(
                    provider=self.name,
                    code=ErrorCode.PROVIDER_NOT_CONFIGURED,
                    message=f"{self.name} has no credential configured",
                )
            )

        url, params, headers = self._build_request(query, limit)
        started = time.perf_counter()
        try:
            session = await self._session_manager.get_session()
            async with session.get(
                url,
                params=params,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                status = response.status
                body = await response.read()
        except asyncio.TimeoutError:
            return self._fail(f"timed out after {self.timeout}s")
        except (aiohttp.ClientError, OSError, InfrastructureError) as e:
            return self._fail(str(e) or type(e).__name__)

        log_api_call(
            logger,
            endpoint=url,
            status_code=status,
            duration_ms=(time.perf_counter() - started) * 1000,
            context={"provider": self.name},
        )

        if not 200 <= status < 300:
            return self._fail(f"HTTP {status}")

        try:
            payload = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            return self._fail(f"invalid JSON: {e}")
        if not isinstance(payload, dict):
            return self._fail("response is not a JSON object")

        try:
            parsed = self._parse(payload)
        except (AttributeError, TypeError, KeyError, IndexError) as e:
            return self._fail(f"unexpected payload shape: {e}")

        items = [item for item in parsed if item.url]
        return Ok(items[:limit])

    @abstractmethod
    def _build_request(
        self,
        query: str,
        limit: int,
    ) -> tuple[str, dict[str, str], dict[str, str]]:
        """Return (url, query params, extra headers) for a search."""

    @abstractmethod
    def _parse(self, payload: dict[str, Any]) -> list[FallbackMedia]:
        """Convert a response payload into media items (URL may be empty)."""

    def _fail(self, message: str) -> Err[ProviderError]:
        logger.debug("Provider %s failed: %s", self.name, message)
        return Err(
            ProviderError(
                provider=self.name,
                code=ErrorCode.PROVIDER_REQUEST_FAILED,
                message=message,
            )
        )


class GiphyProvider(MediaProvider):
    name = ProviderNames.GIPHY

    def _build_request(self, query: str, limit: int) -> tuple[str, dict[str, str], dict[str, str]]:
        params = {
            "api_key": self._credential,
            "q": query,
            "limit": str(limit),
            "rating": "g",
            "lang": "en",
        }
        return f"{self.base_url}/gifs/search", params, {}

    def _parse(self, payload: dict[str, Any]) -> list[FallbackMedia]:
        results = []
        for gif in payload.get("data") or []:
            if not isinstance(gif, dict):
                continue
            images = gif.get("images") or {}
            rendition = images.get("fixed_height") or images.get("original") or {}
            still = images.get("fixed_height_still") or {}
            results.append(
                FallbackMedia(
                    id=str(gif.get("id", "")),
                    url=rendition.get("url") or "",
                    provider=self.name,
                    title=gif.get("title") or "",
                    width=_as_int(rendition.get("width")),
                    height=_as_int(rendition.get("height")),
                    preview_url=still.get("url"),
                )
            )
        return results


class TenorProvider(MediaProvider):
    name = ProviderNames.TENOR

    def _build_request(self, query: str, limit: int) -> tuple[str, dict[str, str], dict[str, str]]:
        params = {
            "key": self._credential,
            "q": query,
            "limit": str(limit),
            "contentfilter": "high",
            "media_filter": "minimal",
            "locale": "en_US",
        }
        return f"{self.base_url}/search", params, {}

    def _parse(self, payload: dict[str, Any]) -> list[FallbackMedia]:
        results = []
        for gif in payload.get("results") or []:
            if not isinstance(gif, dict):
                continue
            media = (gif.get("media") or [{}])[0] or {}
            rendition = media.get("gif") or media.get("tinygif") or {}
            dims = rendition.get("dims") or []
            results.append(
                FallbackMedia(
                    id=str(gif.get("id", "")),
                    url=rendition.get("url") or "",
                    provider=self.name,
                    title=gif.get("title") or gif.get("content_description") or "",
                    width=_as_int(dims[0]) if len(dims) > 0 else None,
                    height=_as_int(dims[1]) if len(dims) > 1 else None,
                    preview_url=rendition.get("preview"),
                )
            )
        return results


class UnsplashProvider(MediaProvider):
    name = ProviderNames.UNSPLASH

    def _build_request(self, query: str, limit: int) -> tuple[str, dict[str, str], dict[str, str]]:
        params = {
            "query": query,
            "per_page": str(limit),
            "orientation": "landscape",
            "content_filter": "high",
        }
        headers = {
            "Authorization": f"Client-ID {self._credential}",
            "Accept-Version": "v1",
        }
        return f"{self.base_url}/search/photos", params, headers

    def _parse(self, payload: dict[str, Any]) -> list[FallbackMedia]:
        results = []
        for photo in payload.get("results") or []:
            if not isinstance(photo, dict):
                continue
            urls = photo.get("urls") or {}
            results.append(
                FallbackMedia(
                    id=str(photo.get("id", "")),
                    url=urls.get("regular") or "",
                    provider=self.name,
                    title=photo.get("alt_description") or photo.get("description") or "",
                    width=_as_int(photo.get("width")),
                    height=_as_int(photo.get("height")),
                    preview_url=urls.get("thumb") or urls.get("small"),
                )
            )
        return results


PROVIDER_CLASSES: dict[str, type[MediaProvider]] = {
    ProviderNames.GIPHY: GiphyProvider,
    ProviderNames.TENOR: TenorProvider,
    ProviderNames.UNSPLASH: UnsplashProvider,
}


def build_providers(
    session_manager: HttpSessionManager,
    media_settings: MediaSettings,
) -> list[MediaProvider]:
    """Instantiate providers in the configured priority order.

    Args:
        session_manager: Shared HTTP session owner
        media_settings: ``MediaSettings`` carrying order, credentials and base URLs
    """
    base_urls = {
        ProviderNames.GIPHY: media_settings.giphy_base_url,
        ProviderNames.TENOR: media_settings.tenor_base_url,
        ProviderNames.UNSPLASH: media_settings.unsplash_base_url,
    }
    return [
        PROVIDER_CLASSES[name](
            session_manager,
            credential=media_settings.credential_for(name),
            base_url=base_urls[name],
            timeout=media_settings.provider_timeout,
        )
        for name in media_settings.provider_order
    ]


__all__ = [
    "PROVIDER_CLASSES",
    "GiphyProvider",
    "MediaProvider",
    "TenorProvider",
    "UnsplashProvider",
    "build_providers",
]
