from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, cast

import httpx

from ..errors import TransportError
from .base import BackendResponse, Timeout


class HttpxHeadersProtocol(Protocol):
    def multi_items(self) -> list[tuple[str, str]]: ...


class HttpxResponseProtocol(Protocol):
    status_code: int
    reason_phrase: str
    headers: HttpxHeadersProtocol
    content: bytes


class HttpxClientProtocol(Protocol):
    def request(self, method: str, url: str, **kwargs: object) -> HttpxResponseProtocol: ...

    def close(self) -> None: ...


class HttpxAsyncClientProtocol(Protocol):
    async def request(self, method: str, url: str, **kwargs: object) -> HttpxResponseProtocol: ...

    async def aclose(self) -> None: ...


def _httpx_timeout(timeout: Timeout) -> httpx.Timeout:
    return httpx.Timeout(connect=timeout.connect, read=timeout.read, write=timeout.read, pool=timeout.connect)


def _to_backend_response(response: HttpxResponseProtocol) -> BackendResponse:
    headers = response.headers
    if hasattr(headers, "multi_items"):
        items = [(str(k), str(v)) for k, v in headers.multi_items()]
    else:
        items = [(str(k), str(v)) for k, v in cast(Mapping[str, str], headers).items()]
    return BackendResponse(
        status=response.status_code,
        reason=getattr(response, "reason_phrase", "") or "",
        headers=items,
        content=response.content,
    )


class HttpxBackend:
    """Send requests through an ``httpx.Client``.

    A client created here is owned and closed by ``close()``; a client
    passed in is left open for its owner.
    """

    def __init__(self, client: HttpxClientProtocol | None = None) -> None:
        self._owns_client = client is None
        self._client: HttpxClientProtocol = client if client is not None else httpx.Client()
        self._closed = False

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None,
        body: bytes | None,
        timeout: Timeout,
    ) -> BackendResponse:
        try:
            response = self._client.request(
                method=method,
                url=url,
                headers=headers,
                content=body,
                timeout=_httpx_timeout(timeout),
            )
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request timed out: {method} {url}", kind="timeout") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request failed: {method} {url}: {exc}", kind="connection") from exc
        return _to_backend_response(response)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            self._client.close()


class HttpxAsyncBackend:
    def __init__(self, client: HttpxAsyncClientProtocol | None = None) -> None:
        self._owns_client = client is None
        self._client: HttpxAsyncClientProtocol = client if client is not None else httpx.AsyncClient()
        self._closed = False

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None,
        body: bytes | None,
        timeout: Timeout,
    ) -> BackendResponse:
        try:
            response = await self._client.request(
                method=method,
                url=url,
                headers=headers,
                content=body,
                timeout=_httpx_timeout(timeout),
            )
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request timed out: {method} {url}", kind="timeout") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request failed: {method} {url}: {exc}", kind="connection") from exc
        return _to_backend_response(response)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            await self._client.aclose()
