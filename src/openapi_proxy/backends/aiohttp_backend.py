from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Protocol

import aiohttp

from ..errors import TransportError
from .base import BackendResponse, Timeout


class AiohttpResponseProtocol(Protocol):
    status: int
    reason: str | None
    headers: Mapping[str, str]

    async def read(self) -> bytes: ...

    async def __aenter__(self) -> "AiohttpResponseProtocol": ...

    async def __aexit__(self, *_: object) -> None: ...


class AiohttpSessionProtocol(Protocol):
    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None,
        data: bytes | None,
        timeout: aiohttp.ClientTimeout,
    ) -> AiohttpResponseProtocol: ...

    async def close(self) -> None: ...


class AiohttpBackend:
    """Send requests through an ``aiohttp.ClientSession``.

    Without a session, one is opened on the first request so it binds to
    the running event loop.
    """

    def __init__(self, session: AiohttpSessionProtocol | None = None) -> None:
        self._owns_session = session is None
        self._session = session
        self._closed = False

    def _get_session(self) -> AiohttpSessionProtocol:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None,
        body: bytes | None,
        timeout: Timeout,
    ) -> BackendResponse:
        client_timeout = aiohttp.ClientTimeout(sock_connect=timeout.connect, sock_read=timeout.read)
        try:
            async with self._get_session().request(
                method,
                url,
                headers=headers,
                data=body,
                timeout=client_timeout,
            ) as response:
                data = await response.read()
                return BackendResponse(
                    status=response.status,
                    reason=response.reason or "",
                    headers=[(str(k), str(v)) for k, v in response.headers.items()],
                    content=data,
                )
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Request timed out: {method} {url}", kind="timeout") from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"Request failed: {method} {url}: {exc}", kind="connection") from exc

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_session and self._session is not None:
            await self._session.close()
