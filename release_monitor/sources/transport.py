from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from release_monitor import __version__
from release_monitor.sources.errors import TransientNetworkError, UpstreamPayloadError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0
USER_AGENT = f"release-monitor/{__version__}"


class Transport(Protocol):
    async def get_text(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> str: ...

    async def get_json(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> Any: ...


class HttpTransport:
    def __init__(
        self,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._transport = transport

    async def get_text(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> str:
        logger.debug("GET %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise TransientNetworkError(f"timed out after {self._timeout_s}s", url=url) from exc
        except httpx.HTTPStatusError as exc:
            raise TransientNetworkError(
                f"upstream returned HTTP {exc.response.status_code}",
                url=url,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransientNetworkError(f"request failed: {exc}", url=url) from exc
        return response.text

    async def get_json(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        return decode_json(await self.get_text(url, params=params))


def decode_json(body: str) -> Any:
    try:
        return json.loads(body)
    except ValueError as exc:
        raise UpstreamPayloadError(f"response body is not valid JSON: {exc}") from exc
