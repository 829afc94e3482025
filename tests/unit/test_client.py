"""
Unit tests for the HTTP client and configuration.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from fossapi.adapters.http import FossaClient, encode_segment
from fossapi.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, FossaConfig
from fossapi.domain.exceptions import (
    ApiError,
    ConfigError,
    NotFound,
    RateLimited,
    TransportError,
    Unauthorized,
)


def make_client(
    handler: Callable[[httpx.Request], httpx.Response], **kwargs: object
) -> FossaClient:
    return FossaClient(
        "secret-token",
        base_url="https://fossa.test/api",
        transport=httpx.MockTransport(handler),
        **kwargs,  # type: ignore[arg-type]
    )


class TestEncodeSegment:
    """Tests for locator path encoding."""

    def test_encodes_locator_separators(self) -> None:
        assert encode_segment("custom+1/demo$main") == "custom%2B1%2Fdemo%24main"

    def test_encodes_backslash_and_space(self) -> None:
        assert encode_segment("a\\b c") == "a%5Cb%20c"


class TestRequests:
    """Tests for request construction and decoding."""

    def test_sends_bearer_token_and_joins_path(self) -> None:
        """Paths are relative to the base URL, which keeps its /api prefix."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        with make_client(handler) as client:
            result = client.get_json("projects/custom%2B1%2Fdemo", params={"count": 5})

        assert result == {"ok": True}
        request = seen[0]
        assert request.headers["Authorization"] == "Bearer secret-token"
        assert request.headers["User-Agent"].startswith("fossapi/")
        assert request.url.raw_path == b"/api/projects/custom%2B1%2Fdemo?count=5"

    def test_put_sends_json_body(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"title": "T"})

        with make_client(handler) as client:
            client.put_json("projects/x", {"title": "T"})

        assert seen[0].method == "PUT"
        assert json.loads(seen[0].content) == {"title": "T"}

    def test_non_json_success_returns_text(self) -> None:
        with make_client(lambda request: httpx.Response(200, text="ok")) as client:
            assert client.get_json("health") == "ok"

    def test_empty_success_returns_none(self) -> None:
        with make_client(lambda request: httpx.Response(204)) as client:
            assert client.get_json("anything") is None

    def test_repr_hides_token(self) -> None:
        client = make_client(lambda request: httpx.Response(200))

        assert "secret-token" not in repr(client)
        assert "fossa.test" in repr(client)

    def test_empty_token_rejected(self) -> None:
        with pytest.raises(ConfigError):
            FossaClient("")


class TestErrorMapping:
    """Tests for translating error statuses into exceptions."""

    @pytest.mark.parametrize("status", [401, 403])
    def test_unauthorized(self, status: int) -> None:
        with make_client(lambda request: httpx.Response(status, json={"message": "bad token"})) as client:
            with pytest.raises(Unauthorized) as exc_info:
                client.get_json("v2/projects")
        assert exc_info.value.status_code == status
        assert exc_info.value.message == "bad token"

    def test_not_found_carries_entity(self) -> None:
        with make_client(lambda request: httpx.Response(404, json={"error": "Project not found"})) as client:
            with pytest.raises(NotFound) as exc_info:
                client.get_json("projects/x", entity_type="project", entity_id="custom+1/x")
        assert exc_info.value.entity_type == "project"
        assert exc_info.value.entity_id == "custom+1/x"

    def test_rate_limited_with_retry_after(self) -> None:
        response = httpx.Response(429, headers={"Retry-After": "30"}, text="slow down")
        with make_client(lambda request: response) as client:
            with pytest.raises(RateLimited) as exc_info:
                client.get_json("v2/issues")
        assert exc_info.value.retry_after == 30
        assert exc_info.value.status_code == 429

    def test_rate_limited_without_retry_after(self) -> None:
        with make_client(lambda request: httpx.Response(429)) as client:
            with pytest.raises(RateLimited) as exc_info:
                client.get_json("v2/issues")
        assert exc_info.value.retry_after is None

    def test_server_error(self) -> None:
        with make_client(lambda request: httpx.Response(500, text="boom")) as client:
            with pytest.raises(ApiError) as exc_info:
                client.get_json("v2/issues")
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "boom"

    def test_network_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with make_client(handler) as client:
            with pytest.raises(TransportError) as exc_info:
                client.get_json("v2/issues")
        assert exc_info.value.status_code is None

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        with make_client(handler) as client:
            with pytest.raises(TransportError, match="timed out"):
                client.get_json("v2/issues")


class TestRetry:
    """Tests for the optional rate-limit retry."""

    def test_no_retry_by_default(self) -> None:
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(429)

        with make_client(handler) as client:
            with pytest.raises(RateLimited):
                client.get_json("v2/issues")
        assert len(calls) == 1

    def test_retries_then_succeeds(self) -> None:
        """Retry-After is honoured between attempts."""
        responses = [
            httpx.Response(429, headers={"Retry-After": "2"}),
            httpx.Response(429),
            httpx.Response(200, json={"issues": []}),
        ]
        delays: list[float] = []

        with make_client(lambda request: responses.pop(0), max_retries=3, sleep=delays.append) as client:
            assert client.get_json("v2/issues") == {"issues": []}
        assert delays == [2, 2]

    def test_gives_up_after_max_retries(self) -> None:
        delays: list[float] = []

        with make_client(lambda request: httpx.Response(429), max_retries=2, sleep=delays.append) as client:
            with pytest.raises(RateLimited):
                client.get_json("v2/issues")
        assert delays == [1, 2]


class TestConfig:
    """Tests for environment configuration."""

    def test_from_env_defaults(self) -> None:
        config = FossaConfig.from_env({"FOSSA_API_KEY": "abc"})

        assert config.api_key.get_secret_value() == "abc"
        assert config.api_url == DEFAULT_API_URL
        assert config.timeout == DEFAULT_TIMEOUT

    def test_from_env_overrides(self) -> None:
        config = FossaConfig.from_env(
            {"FOSSA_API_KEY": "abc", "FOSSA_API_URL": "http://localhost:8080/", "FOSSA_TIMEOUT": "5"}
        )

        assert config.api_url == "http://localhost:8080"
        assert config.timeout == 5.0

    def test_missing_key(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            FossaConfig.from_env({})
        assert exc_info.value.config_key == "FOSSA_API_KEY"

    @pytest.mark.parametrize(
        "env,key",
        [
            ({"FOSSA_API_KEY": "abc", "FOSSA_API_URL": "ftp://x"}, "FOSSA_API_URL"),
            ({"FOSSA_API_KEY": "abc", "FOSSA_TIMEOUT": "-1"}, "FOSSA_TIMEOUT"),
            ({"FOSSA_API_KEY": "abc", "FOSSA_TIMEOUT": "soon"}, "FOSSA_TIMEOUT"),
            ({"FOSSA_API_KEY": "   "}, "FOSSA_API_KEY"),
        ],
    )
    def test_invalid_values(self, env: dict[str, str], key: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            FossaConfig.from_env(env)
        assert exc_info.value.config_key == key

    def test_secret_not_in_repr(self) -> None:
        config = FossaConfig.from_env({"FOSSA_API_KEY": "abc"})

        assert "abc" not in repr(config)

    def test_client_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FOSSA_API_KEY", "abc")
        monkeypatch.setenv("FOSSA_API_URL", "http://localhost:9000/api/")

        with FossaClient.from_env() as client:
            assert client.base_url == "http://localhost:9000/api"
