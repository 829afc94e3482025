"""
Mock FOSSA API server.

The same MockApi dispatcher can be reached two ways:

- in process, through an ``httpx.MockTransport`` (``MockServer.client()``
  returns a FossaClient wired to it), which is what the tests use;
- over HTTP, through a FastAPI app served by uvicorn
  (``fossapi mock-server``).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool

from fossapi import __version__
from fossapi.adapters.http import FossaClient
from fossapi.mock.fixtures import default_store
from fossapi.mock.handlers import MockApi
from fossapi.mock.state import MockStore

logger = logging.getLogger(__name__)

_METHODS = ["GET", "PUT", "POST", "PATCH", "DELETE"]


def create_app(api: MockApi) -> FastAPI:
    """
    Expose a MockApi as an ASGI app.

    Every path is forwarded to the dispatcher untouched, including the
    percent-encoding of locator segments.
    """
    app = FastAPI(
        title="fossapi mock server",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.api_route("/{path:path}", methods=_METHODS)
    async def dispatch(request: Request) -> Response:
        raw_path = request.scope.get("raw_path")
        path = raw_path.decode("latin-1") if raw_path else request.url.path
        body = await request.body()
        # Dispatch takes the store lock, so it runs on a worker thread.
        result = await run_in_threadpool(
            api.dispatch,
            request.method,
            path,
            query=dict(request.query_params),
            body=body or None,
            headers=dict(request.headers),
        )
        return Response(
            content=result.content(),
            status_code=result.status_code,
            media_type=result.media_type,
        )

    return app


class MockServer:
    """
    A mock FOSSA API over a MockStore.

    With no store the default fixture scenario is loaded; use ``empty()`` to
    start from nothing.
    """

    BASE_URL = "http://fossa.mock"

    def __init__(self, store: MockStore | None = None, required_token: str | None = None) -> None:
        self.api = MockApi(store if store is not None else default_store(), required_token)
        self.transport = httpx.MockTransport(self.handle_request)

    @classmethod
    def empty(cls, required_token: str | None = None) -> MockServer:
        return cls(MockStore(), required_token=required_token)

    @property
    def store(self) -> MockStore:
        return self.api.store

    @property
    def url(self) -> str:
        return self.BASE_URL

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """Serve one httpx request from the dispatcher."""
        raw_path = request.url.raw_path.decode("ascii")
        result = self.api.dispatch(
            request.method,
            raw_path,
            query=dict(request.url.params),
            body=request.content or None,
            headers=dict(request.headers),
        )
        return httpx.Response(
            result.status_code,
            content=result.content(),
            headers={"Content-Type": result.media_type},
        )

    def client(self, token: str = "test-token", **kwargs: Any) -> FossaClient:
        """A FossaClient whose requests are served in process."""
        return FossaClient(token, base_url=self.BASE_URL, transport=self.transport, **kwargs)

    def app(self) -> FastAPI:
        return create_app(self.api)

    def serve(self, host: str = "127.0.0.1", port: int = 8080, log_level: str = "info") -> None:
        """Serve over HTTP until interrupted."""
        import uvicorn

        logger.info("Mock FOSSA API listening on http://%s:%d", host, port)
        uvicorn.run(self.app(), host=host, port=port, log_level=log_level)
