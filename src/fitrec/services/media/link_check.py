"""Media link health check."""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from fitrec.services.http import HttpSessionManager
from fitrec.shared.constants import MediaConfig
from fitrec.shared.errors import InfrastructureError

logger = logging.getLogger(__name__)


class LinkHealthChecker:
    """Decides whether a media URL is reachable with a HEAD request.

    ``probe`` answers True only for a 2xx response. Empty or non-HTTP URLs,
    timeouts, DNS and connection failures and non-2xx statuses all answer
    False; the probe never raises.
    """

    def __init__(
        self,
        session_manager: HttpSessionManager,
        timeout: float = MediaConfig.PROBE_TIMEOUT,
    ) -> None:
        self._session_manager = session_manager
        self.timeout = timeout

    async def probe(self, url: str, timeout: float | None = None) -> bool:
        if not url or not url.startswith(("http://", "https://")):
            return False

        deadline = timeout if timeout is not None else self.timeout
        try:
            session = await self._session_manager.get_session()
            async with session.head(
                url,
                allow_redirects=True,
                timeout=aiohttp.ClientTimeout(total=deadline),
            ) as response:
                healthy = 200 <= response.status < 300
        except asyncio.TimeoutError:
            logger.debug("Link probe timed out after %ss: %s", deadline, url)
            return False
        except (aiohttp.ClientError, OSError, ValueError, InfrastructureError) as e:
            logger.debug("Link probe failed for %s: %s", url, e)
            return False
        except Exception as e:
            logger.debug("Link probe raised %s for %s: %s", type(e).__name__, url, e)
            return False

        if not healthy:
            logger.debug("Link probe got HTTP %s for %s", response.status, url)
        return healthy


__all__ = ["LinkHealthChecker"]
