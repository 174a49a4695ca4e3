from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Protocol


@dataclass(frozen=True)
class Timeout:
    """Connect and read timeouts in seconds."""

    connect: float = 30.0
    read: float = 30.0


class BackendResponse(NamedTuple):
    status: int
    reason: str
    headers: list[tuple[str, str]]
    content: bytes


class SyncBackend(Protocol):
    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None,
        body: bytes | None,
        timeout: Timeout,
    ) -> BackendResponse: ...

    def close(self) -> None: ...


class AsyncBackend(Protocol):
    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None,
        body: bytes | None,
        timeout: Timeout,
    ) -> BackendResponse: ...

    async def close(self) -> None: ...
