from __future__ import annotations

import logging

import pytest

from openapi_proxy.engine import HttpEngine
from openapi_proxy.logging import REDACTED, redact_headers, redact_url
from openapi_proxy.request import PreparedRequest
from tests.conftest import RecordingBackend


class TestRedactHeaders:
    @pytest.mark.parametrize(
        "name",
        [
            pytest.param("Authorization", id="authorization"),
            pytest.param("Cookie", id="cookie"),
            pytest.param("X-Api-Key", id="api-key"),
            pytest.param("x-auth-token", id="token"),
        ],
    )
    def test_sensitive_values_masked(self, name: str) -> None:
        assert redact_headers({name: "secret-value"}) == {name: REDACTED}

    def test_other_values_kept(self) -> None:
        assert redact_headers({"Accept": "application/json"}) == {"Accept": "application/json"}

    def test_engine_never_logs_credentials(self, caplog: pytest.LogCaptureFixture) -> None:
        engine = HttpEngine(RecordingBackend())
        with caplog.at_level(logging.DEBUG, logger="openapi_proxy.engine"):
            engine.send(PreparedRequest("GET", "http://api.test/", {"Authorization": "Bearer hunter2"}))
        assert "hunter2" not in caplog.text
        assert REDACTED in caplog.text


class TestRedactUrl:
    @pytest.mark.parametrize(
        "url, expected",
        [
            pytest.param("http://api.test/items", "http://api.test/items", id="no-query"),
            pytest.param("http://api.test/items?q=a%20b", "http://api.test/items?q=a%20b", id="plain-query"),
            pytest.param(
                "http://api.test/items?q=x&api_key=s3cret&access%5Ftoken=t0k",
                f"http://api.test/items?q=x&api_key={REDACTED}&access%5Ftoken={REDACTED}",
                id="credentials",
            ),
        ],
    )
    def test_redact_url(self, url: str, expected: str) -> None:
        assert redact_url(url) == expected

    def test_engine_never_logs_query_credentials(self, caplog: pytest.LogCaptureFixture) -> None:
        engine = HttpEngine(RecordingBackend())
        with caplog.at_level(logging.DEBUG, logger="openapi_proxy.engine"):
            engine.get("http://api.test/items", query={"api_key": "s3cret", "q": "cats"})
        assert "s3cret" not in caplog.text
        assert "q=cats" in caplog.text
