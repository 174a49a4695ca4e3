from __future__ import annotations

import json
from pathlib import Path

import pytest

from openapi_proxy.backends.base import BackendResponse, Timeout


class RecordingBackend:
    """Sync backend that records requests and replays a canned response."""

    def __init__(self, response: BackendResponse | None = None) -> None:
        self.response = response or BackendResponse(200, "OK", [("content-type", "application/json")], b"{}")
        self.requests: list[dict[str, object]] = []
        self.closed = 0

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None,
        body: bytes | None,
        timeout: Timeout,
    ) -> BackendResponse:
        self.requests.append({"method": method, "url": url, "headers": headers, "body": body, "timeout": timeout})
        return self.response

    def close(self) -> None:
        self.closed += 1


@pytest.fixture()
def minimal_openapi_document() -> dict[str, object]:
    return {
        "openapi": "3.0.3",
        "info": {"title": "Example", "version": "1.0.0"},
        "paths": {},
    }


@pytest.fixture()
def sample_document() -> dict[str, object]:
    return {
        "openapi": "3.0.3",
        "info": {"title": "Sample", "version": "1.0.0"},
        "servers": [{"url": "https://api.example.com/"}],
        "paths": {
            "/users/{id}": {
                "get": {
                    "summary": "Get a user",
                    "parameters": [{"name": "id", "in": "path", "required": True, "description": "User id"}],
                    "responses": {"200": {"description": "ok"}},
                },
            },
            "/search": {
                "get": {
                    "operationId": "search",
                    "parameters": [
                        {"name": "q", "in": "query"},
                        {"name": "limit", "in": "query"},
                        {"name": "X-Trace", "in": "header"},
                    ],
                    "responses": {"200": {"description": "ok"}},
                },
            },
            "/items": {
                "post": {
                    "operationId": "createItem",
                    "parameters": [{"name": "tenant", "in": "query"}],
                    "requestBody": {"content": {"application/json": {"schema": {"type": "object"}}}},
                    "responses": {"201": {"description": "created"}},
                },
            },
            "/health": {
                "get": {
                    "operationId": "health",
                    "responses": {"200": {"description": "ok"}},
                },
            },
        },
    }


@pytest.fixture()
def sample_spec_path(tmp_path: Path, sample_document: dict[str, object]) -> Path:
    path = tmp_path / "openapi.json"
    path.write_text(json.dumps(sample_document), encoding="utf-8")
    return path


@pytest.fixture()
def recording_backend() -> RecordingBackend:
    return RecordingBackend()
