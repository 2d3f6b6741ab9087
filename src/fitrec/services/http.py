"""Async HTTP session manager.

Owns the single aiohttp.ClientSession shared by the catalog client, the
media providers and the link health checker. The session is created
lazily on first use and closed by the pipeline's ``aclose``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

import aiohttp

from fitrec.shared.constants import NetworkConfig
from fitrec.shared.errors import ErrorCode, ErrorContext, InfrastructureError

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Any]


def _default_session_factory() -> aiohttp.ClientSession:
    connector = aiohttp.TCPConnector(
        limit=NetworkConfig.CONNECTION_LIMIT,
        enable_cleanup_closed=True,
    )
    headers = {
        "User-Agent": NetworkConfig.USER_AGENT,
        "Accept": NetworkConfig.ACCEPT_JSON,
    }
    # Per-request deadlines are set by each caller
    return aiohttp.ClientSession(connector=connector, headers=headers)


class HttpSessionManager:
    """Manages the aiohttp.ClientSession lifecycle.

    Args:
        session_factory: Callable building a session. Tests pass a factory
            returning a fake session with the same ``get``/``head`` surface.
    """

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._session_factory = session_factory or _default_session_factory
        self._session: Any = None
        self._session_lock = asyncio.Lock()

    async def get_session(self) -> Any:
        """Get or create the HTTP session.

        Raises:
            InfrastructureError: If the session cannot be created
        """
        async with self._session_lock:
            if self._session is None or getattr(self._session, "closed", False):
                try:
                    self._session = self._session_factory()
                except (aiohttp.ClientError, OSError, RuntimeError) as e:
                    raise InfrastructureError(
                        code=ErrorCode.RESOURCE_UNAVAILABLE,
                        message=f"Failed to create HTTP session: {e}",
                        context=ErrorContext(operation="create_http_session"),
                        original_error=e,
                    ) from e
                logger.debug("HTTP session created")
            return self._session

    def is_session_ready(self) -> bool:
        return self._session is not None and not getattr(self._session, "closed", False)

    async def close(self) -> None:
        """Close the HTTP session and clean up resources."""
        async with self._session_lock:
            if self._session is not None and not getattr(self._session, "closed", False):
                try:
                    await self._session.close()
                    logger.debug("HTTP session closed")
                except (aiohttp.ClientError, OSError) as e:
                    logger.warning("Error closing HTTP session: %s", e)
                finally:
                    self._session = None


__all__ = ["HttpSessionManager"]
