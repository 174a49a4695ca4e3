from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

import requests
from urllib3.exceptions import ReadTimeoutError

from ..errors import TransportError
from .base import BackendResponse, Timeout


class RequestsResponseProtocol(Protocol):
    status_code: int
    reason: str | None
    headers: Mapping[str, str]
    content: bytes


class RequestsSessionProtocol(Protocol):
    def request(
        self,
        *,
        method: str,
        url: str,
        headers: dict[str, str] | None,
        data: bytes | None,
        timeout: tuple[float, float],
    ) -> RequestsResponseProtocol: ...

    def close(self) -> None: ...


def _header_items(response: RequestsResponseProtocol) -> list[tuple[str, str]]:
    # requests folds repeated headers into one value; urllib3 keeps them apart
    raw_headers = getattr(getattr(response, "raw", None), "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return [(str(name), str(value)) for name in raw_headers.keys() for value in raw_headers.getlist(name)]
    return [(str(k), str(v)) for k, v in response.headers.items()]


class RequestsBackend:
    def __init__(self, session: RequestsSessionProtocol | None = None) -> None:
        self._owns_session = session is None
        self._session: RequestsSessionProtocol = session if session is not None else requests.Session()
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
            response = self._session.request(
                method=method,
                url=url,
                headers=headers,
                data=body,
                timeout=(timeout.connect, timeout.read),
            )
        except requests.Timeout as exc:
            raise TransportError(f"Request timed out: {method} {url}", kind="timeout") from exc
        except requests.RequestException as exc:
            # a read timeout while the body streams in arrives wrapped in ConnectionError
            if isinstance(exc, requests.ConnectionError) and exc.args and isinstance(exc.args[0], ReadTimeoutError):
                raise TransportError(f"Request timed out: {method} {url}", kind="timeout") from exc
            raise TransportError(f"Request failed: {method} {url}: {exc}", kind="connection") from exc
        return BackendResponse(
            status=response.status_code,
            reason=response.reason or "",
            headers=_header_items(response),
            content=response.content,
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_session:
            self._session.close()
