"""
HTTP adapter for fossapi.

FossaClient wraps a pooled httpx client: bearer authentication, JSON
decoding, and translation of error responses into the fossapi error
taxonomy. Rate-limited requests can optionally be retried here; nothing
above this layer retries.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote

import httpx

from fossapi import __version__
from fossapi.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, FossaConfig
from fossapi.domain.exceptions import (
    ApiError,
    ConfigError,
    NotFound,
    RateLimited,
    TransportError,
    Unauthorized,
)

logger = logging.getLogger(__name__)

USER_AGENT = f"fossapi/{__version__}"


def encode_segment(value: object) -> str:
    """Percent-encode a path segment, including '/', '+' and '$'."""
    return quote(str(value), safe="")


def _parse_retry_after(value: str | None) -> int | None:
    if value is None:
        return None
    value = value.strip()
    return int(value) if value.isdigit() else None


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, Mapping):
        for key in ("message", "error"):
            if isinstance(payload.get(key), str) and payload[key]:
                return payload[key]
    text = response.text.strip()
    return text or response.reason_phrase or f"HTTP {response.status_code}"


class FossaClient:
    """
    Client for the FOSSA REST API.

    Holds one connection pool for its lifetime; use it as a context manager
    or call ``close()``.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        max_retries: int = 0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: API token sent as a bearer credential.
            base_url: API base URL, e.g. https://app.fossa.com/api.
            timeout: Request timeout in seconds.
            transport: Custom httpx transport (the mock server supplies one).
            max_retries: How many times to retry a rate-limited request.
            sleep: Delay function used between retries.
        """
        if not token:
            raise ConfigError("API token is empty", config_key="token")
        self.base_url = base_url.rstrip("/")
        self.max_retries = max(0, max_retries)
        self._sleep = sleep
        self._http = httpx.Client(
            base_url=self.base_url + "/",
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: FossaConfig, **kwargs: Any) -> FossaClient:
        return cls(
            config.api_key.get_secret_value(),
            base_url=config.api_url,
            timeout=config.timeout,
            **kwargs,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> FossaClient:
        """Build a client from FOSSA_API_KEY / FOSSA_API_URL / FOSSA_TIMEOUT."""
        return cls.from_config(FossaConfig.from_env(), **kwargs)

    def __repr__(self) -> str:
        return f"FossaClient(base_url={self.base_url!r})"

    def __enter__(self) -> FossaClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def get_json(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        entity_type: str = "resource",
        entity_id: str | None = None,
    ) -> Any:
        """
        GET a path relative to the base URL and decode the JSON body.

        Args:
            path: Relative path with locator segments already encoded.
            params: Query parameters.
            entity_type: Entity name used in NotFound errors.
            entity_id: Entity id used in NotFound errors.

        Returns:
            Decoded JSON.

        Raises:
            NotFound: On 404.
            Unauthorized: On 401/403.
            RateLimited: On 429 once retries are exhausted.
            ApiError: On any other error status.
            TransportError: On network failures and timeouts.
        """
        return self._request("GET", path, params=params, entity_type=entity_type, entity_id=entity_id)

    def put_json(
        self,
        path: str,
        body: Mapping[str, Any],
        entity_type: str = "resource",
        entity_id: str | None = None,
    ) -> Any:
        """PUT a JSON body; errors are mapped as in ``get_json``."""
        return self._request("PUT", path, json=dict(body), entity_type=entity_type, entity_id=entity_id)

    def _request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        entity_type: str = "resource",
        entity_id: str | None = None,
    ) -> Any:
        attempt = 0
        while True:
            logger.debug("%s %s params=%s", method, path, dict(params or {}))
            try:
                response = self._http.request(method, path, params=params, json=json)
            except httpx.TimeoutException as e:
                raise TransportError(f"Request timed out: {method} {path}") from e
            except httpx.HTTPError as e:
                raise TransportError(f"Request failed: {method} {path}: {e}") from e

            try:
                return self._decode(response, entity_type, entity_id or path)
            except RateLimited as e:
                if attempt >= self.max_retries:
                    raise
                delay = e.retry_after if e.retry_after is not None else 2**attempt
                attempt += 1
                logger.warning(
                    "Rate limited on %s %s, retrying in %ss (%d/%d)",
                    method,
                    path,
                    delay,
                    attempt,
                    self.max_retries,
                )
                self._sleep(delay)

    def _decode(self, response: httpx.Response, entity_type: str, entity_id: str) -> Any:
        status = response.status_code
        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                return response.text

        message = _error_message(response)
        logger.debug("HTTP %d: %s", status, message)
        if status in (401, 403):
            raise Unauthorized(message, status_code=status)
        if status == 404:
            raise NotFound(entity_type, entity_id, message=message)
        if status == 429:
            raise RateLimited(message, retry_after=_parse_retry_after(response.headers.get("Retry-After")))
        raise ApiError(message, status_code=status)
