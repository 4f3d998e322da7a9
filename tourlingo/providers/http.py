"""Shared aiohttp plumbing for the external speech and translation services."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Type

import aiohttp

from ..errors import ServiceError

logger = logging.getLogger(__name__)

# Error bodies are kept for diagnostics but trimmed in exception messages.
_ERROR_DETAIL_CHARS = 500


class HttpServiceClient:
    """Owns (or borrows) an aiohttp session and bounds every call with a timeout."""

    service_name = "service"
    error_cls: Type[ServiceError] = ServiceError

    def __init__(self, *, timeout_s: float, session: Optional[aiohttp.ClientSession] = None):
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session = session
        self._owns_session = session is None

    def _http(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        return await self._request(method, url, read_json=True, **kwargs)

    async def _request_bytes(self, method: str, url: str, **kwargs: Any) -> bytes:
        return await self._request(method, url, read_json=False, **kwargs)

    async def _request(self, method: str, url: str, *, read_json: bool, **kwargs: Any) -> Any:
        try:
            async with self._http().request(method, url, timeout=self._timeout, **kwargs) as resp:
                await self._raise_for_status(resp)
                if read_json:
                    return await resp.json(content_type=None)
                return await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("%s_request_failed error=%s", self.service_name, type(exc).__name__)
            raise self.error_cls(f"request failed: {exc or type(exc).__name__}") from exc
        except ValueError as exc:
            raise self.error_cls(f"invalid response body: {exc}") from exc

    async def _raise_for_status(self, resp: aiohttp.ClientResponse) -> None:
        if 200 <= resp.status < 300:
            return
        body = await resp.text()
        logger.warning("%s_http_error status=%s", self.service_name, resp.status)
        raise self.error_cls(
            body[:_ERROR_DETAIL_CHARS] or str(resp.reason),
            status=resp.status,
            body=body,
        )


__all__ = ["HttpServiceClient"]
