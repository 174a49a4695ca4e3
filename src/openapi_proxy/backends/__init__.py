from .aiohttp_backend import AiohttpBackend
from .base import AsyncBackend, BackendResponse, SyncBackend, Timeout
from .httpx_backend import HttpxAsyncBackend, HttpxBackend
from .requests_backend import RequestsBackend

__all__ = [
    "AiohttpBackend",
    "AsyncBackend",
    "BackendResponse",
    "HttpxBackend",
    "HttpxAsyncBackend",
    "RequestsBackend",
    "SyncBackend",
    "Timeout",
]
