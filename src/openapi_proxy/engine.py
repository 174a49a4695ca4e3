"""HTTP engine: dispatches prepared requests and decodes responses.

The engines never raise on HTTP error statuses. A status of 400 or above
comes back as a ``ResponseRecord`` with ``error`` set; only failures before
a response arrives raise ``TransportError``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from .backends.base import AsyncBackend, BackendResponse, SyncBackend, Timeout
from .errors import ProxyError, TransportError
from .logging import redact_headers, redact_url
from .request import (
    DEFAULT_HEADERS,
    ENTITY_ENCLOSING_METHODS,
    PreparedRequest,
    append_query,
    encode_body,
    merge_headers,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseRecord:
    """Uniform result of a call.

    Attributes:
        status_code: The HTTP status code
        status_text: The reason phrase, empty when the server sent none
        headers: Response headers, each name mapped to its values in arrival order
        data: The decoded JSON value, or the raw body text
        error: ``"HTTP <code>: <reason>"`` when status_code >= 400, else None
    """

    status_code: int
    status_text: str = ""
    headers: dict[str, list[str]] = field(default_factory=dict)
    data: object = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def to_dict(self) -> dict[str, object]:
        result: dict[str, object] = {
            "statusCode": self.status_code,
            "statusText": self.status_text,
            "headers": self.headers,
            "data": self.data,
        }
        if self.error is not None:
            result["error"] = self.error
        return result


def decode_response(response: BackendResponse) -> ResponseRecord:
    headers: dict[str, list[str]] = {}
    for name, value in response.headers:
        if not name:
            continue
        headers.setdefault(name, []).append(value)
    status_text = response.reason or ""
    error = f"HTTP {response.status}: {status_text}" if response.status >= 400 else None
    return ResponseRecord(
        status_code=response.status,
        status_text=status_text,
        headers=headers,
        data=decode_body(response.content),
        error=error,
    )


def decode_body(content: bytes | None) -> object:
    """Decode a response payload.

    Bodies that look structural (leading ``{`` or ``[``) are parsed as JSON
    and fall back to the raw text when parsing fails. Empty and ``null``
    bodies decode to an empty string.
    """
    if not content:
        return ""
    text = content.decode("utf-8", errors="replace")
    trimmed = text.strip()
    if not trimmed or trimmed == "null":
        return ""
    if trimmed[0] in "{[":
        try:
            return json.loads(trimmed)
        except json.JSONDecodeError:
            return text
    return text


class HttpEngine:
    """Blocking engine around a sync backend.

    Safe for concurrent use as long as the backend is; the default httpx
    backend is.
    """

    def __init__(self, backend: SyncBackend, timeout: Timeout | None = None) -> None:
        self._backend = backend
        self._timeout = timeout or Timeout()
        self._closed = False

    @property
    def timeout(self) -> Timeout:
        return self._timeout

    def send(self, request: PreparedRequest) -> ResponseRecord:
        return self.execute(request.method, request.url, request.headers, request.body)

    def execute(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> ResponseRecord:
        request_headers = dict(headers or {})
        logger.debug("%s %s headers=%s", method, redact_url(url), redact_headers(request_headers))
        try:
            response = self._backend.request(method, url, request_headers, body, self._timeout)
        except ProxyError:
            raise
        except Exception as exc:
            backend_name = type(self._backend).__name__
            raise TransportError(f"Backend request failed: {backend_name}") from exc
        logger.debug("%s %s -> %d", method, redact_url(url), response.status)
        return decode_response(response)

    def request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, object] | None = None,
        body: object | None = None,
    ) -> ResponseRecord:
        prepared = _prepare(method, url, headers, query, body)
        return self.send(prepared)

    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, object] | None = None,
    ) -> ResponseRecord:
        return self.request("GET", url, headers, query)

    def post(self, url: str, headers: Mapping[str, str] | None = None, body: object | None = None) -> ResponseRecord:
        return self.request("POST", url, headers, body=body)

    def put(self, url: str, headers: Mapping[str, str] | None = None, body: object | None = None) -> ResponseRecord:
        return self.request("PUT", url, headers, body=body)

    def delete(self, url: str, headers: Mapping[str, str] | None = None) -> ResponseRecord:
        return self.request("DELETE", url, headers)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._backend.close()


class AsyncHttpEngine:
    def __init__(self, backend: AsyncBackend, timeout: Timeout | None = None) -> None:
        self._backend = backend
        self._timeout = timeout or Timeout()
        self._closed = False

    @property
    def timeout(self) -> Timeout:
        return self._timeout

    async def send(self, request: PreparedRequest) -> ResponseRecord:
        return await self.execute(request.method, request.url, request.headers, request.body)

    async def execute(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> ResponseRecord:
        request_headers = dict(headers or {})
        logger.debug("%s %s headers=%s", method, redact_url(url), redact_headers(request_headers))
        try:
            response = await self._backend.request(method, url, request_headers, body, self._timeout)
        except ProxyError:
            raise
        except Exception as exc:
            backend_name = type(self._backend).__name__
            raise TransportError(f"Backend request failed: {backend_name}") from exc
        logger.debug("%s %s -> %d", method, redact_url(url), response.status)
        return decode_response(response)

    async def request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, object] | None = None,
        body: object | None = None,
    ) -> ResponseRecord:
        prepared = _prepare(method, url, headers, query, body)
        return await self.send(prepared)

    async def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, object] | None = None,
    ) -> ResponseRecord:
        return await self.request("GET", url, headers, query)

    async def post(
        self, url: str, headers: Mapping[str, str] | None = None, body: object | None = None
    ) -> ResponseRecord:
        return await self.request("POST", url, headers, body=body)

    async def put(
        self, url: str, headers: Mapping[str, str] | None = None, body: object | None = None
    ) -> ResponseRecord:
        return await self.request("PUT", url, headers, body=body)

    async def delete(self, url: str, headers: Mapping[str, str] | None = None) -> ResponseRecord:
        return await self.request("DELETE", url, headers)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._backend.close()


def _prepare(
    method: str,
    url: str,
    headers: Mapping[str, str] | None,
    query: Mapping[str, object] | None,
    body: object | None,
) -> PreparedRequest:
    method = method.upper()
    payload = None
    if body is not None and method in ENTITY_ENCLOSING_METHODS:
        payload = encode_body(body)
    return PreparedRequest(
        method=method,
        url=append_query(url, query or {}),
        headers=merge_headers(DEFAULT_HEADERS, headers or {}),
        body=payload,
    )
