"""
Request handlers for the mock FOSSA API.

``MockApi.dispatch`` maps one HTTP request onto the store and returns a
status code plus JSON payload shaped like the real API's. It is independent
of any web framework: the in-process httpx transport and the FastAPI app in
``fossapi.mock.server`` both call it.

Routing uses the still-encoded request path, so a locator's ``/`` (sent as
``%2F``) is never mistaken for a path separator.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, Optional
from urllib.parse import unquote

from pydantic import BaseModel, ConfigDict

from fossapi.domain.exceptions import (
    LocatorKindMismatch,
    NotFound,
    ParseError,
    ValidationError,
)
from fossapi.domain.models import (
    ProjectUpdateParams,
    coerce_issue_id,
    dump_entity,
    load_entity,
    parse_category,
)
from fossapi.domain.pagination import clamp_page, clamp_page_size
from fossapi.mock.state import MockStore

logger = logging.getLogger(__name__)

Handler = Callable[..., "MockResponse"]

WILDCARD = "*"


class MockResponse(BaseModel):
    """Status code and decoded body of a mock response."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    body: Any = None

    @property
    def media_type(self) -> str:
        return "text/plain" if isinstance(self.body, str) else "application/json"

    def content(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode()
        return json.dumps(self.body).encode()


def _ok(body: Any) -> MockResponse:
    return MockResponse(status_code=200, body=body)


def _error(status_code: int, error: str, message: str) -> MockResponse:
    return MockResponse(status_code=status_code, body={"error": error, "message": message})


def paginate(items: list[Any], page: int, count: int) -> tuple[list[Any], bool]:
    """
    Slice one page out of the full result.

    Returns:
        The page's items and whether any items follow the slice.
    """
    start = page * count
    end = start + count
    return items[start:end], end < len(items)


def _int_param(query: Mapping[str, str], name: str) -> int | None:
    raw = query.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError(f"Query parameter '{name}' must be an integer, got {raw!r}") from e


def _page_window(query: Mapping[str, str]) -> tuple[int, int]:
    return clamp_page(_int_param(query, "page")), clamp_page_size(_int_param(query, "count"))


class MockApi:
    """
    Framework-free dispatcher over a MockStore.

    Routes:
        GET  /health
        GET  /projects/{locator}
        PUT  /projects/{locator}
        GET  /projects/{locator}/revisions
        GET  /v2/projects
        GET  /revisions/{locator}
        GET  /v2/revisions/{locator}/dependencies
        GET  /v2/issues
        GET  /v2/issues/{id}
    """

    def __init__(self, store: MockStore | None = None, required_token: str | None = None) -> None:
        """
        Initialize the dispatcher.

        Args:
            store: Backing store (a new empty store if None).
            required_token: When set, requests must send this bearer token.
        """
        self.store = store if store is not None else MockStore()
        self.required_token = required_token
        self._routes: list[tuple[tuple[str, ...], dict[str, Handler]]] = [
            (("health",), {"GET": self._health}),
            (("projects", WILDCARD), {"GET": self._get_project, "PUT": self._update_project}),
            (("projects", WILDCARD, "revisions"), {"GET": self._list_revisions}),
            (("v2", "projects"), {"GET": self._list_projects}),
            (("revisions", WILDCARD), {"GET": self._get_revision}),
            (("v2", "revisions", WILDCARD, "dependencies"), {"GET": self._list_dependencies}),
            (("v2", "issues"), {"GET": self._list_issues}),
            (("v2", "issues", WILDCARD), {"GET": self._get_issue}),
        ]

    def dispatch(
        self,
        method: str,
        path: str,
        query: Mapping[str, str] | None = None,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> MockResponse:
        """
        Handle one request.

        Args:
            method: HTTP method.
            path: Raw (percent-encoded) request path; a query string is ignored.
            query: Decoded query parameters.
            body: Raw request body.
            headers: Request headers.

        Returns:
            The response to send.
        """
        method = method.upper()
        segments = [segment for segment in path.split("?", 1)[0].split("/") if segment]
        if segments and segments[0] == "api":
            segments = segments[1:]

        matched = self._match(segments)
        if matched is None:
            logger.debug("No route for %s %s", method, path)
            return _error(404, "Not found", f"No route for {method} {path}")
        methods, args = matched

        handler = methods.get(method)
        if handler is None:
            return _error(405, "Method not allowed", f"{method} is not supported on {path}")

        if self.required_token is not None and handler != self._health:
            if not self._authorized(headers or {}):
                return _error(401, "Unauthorized", "Missing or invalid API token")

        logger.debug("%s %s -> %s", method, path, handler.__name__)
        try:
            return handler(*args, query=query or {}, body=body)
        except NotFound as e:
            return _error(404, f"{e.entity_type.capitalize()} not found", e.message)
        except (ParseError, LocatorKindMismatch, ValidationError) as e:
            return _error(400, "Validation error", e.message)

    def _match(self, segments: list[str]) -> Optional[tuple[dict[str, Handler], list[str]]]:
        for pattern, methods in self._routes:
            if len(pattern) != len(segments):
                continue
            args: list[str] = []
            for expected, actual in zip(pattern, segments):
                if expected == WILDCARD:
                    args.append(unquote(actual))
                elif expected != actual:
                    break
            else:
                return methods, args
        return None

    def _authorized(self, headers: Mapping[str, str]) -> bool:
        lowered = {key.lower(): value for key, value in headers.items()}
        return lowered.get("authorization") == f"Bearer {self.required_token}"

    # --- Handlers ---

    def _health(self, **_: Any) -> MockResponse:
        return _ok("ok")

    def _get_project(self, locator: str, **_: Any) -> MockResponse:
        return _ok(dump_entity(self.store.get_project(locator)))

    def _update_project(self, locator: str, body: bytes | None = None, **_: Any) -> MockResponse:
        try:
            data = json.loads(body) if body else {}
        except ValueError as e:
            raise ValidationError(f"Request body is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        params = load_entity(ProjectUpdateParams, data)
        return _ok(dump_entity(self.store.update_project(locator, params)))

    def _list_projects(self, query: Mapping[str, str], **_: Any) -> MockResponse:
        page, count = _page_window(query)
        projects = self.store.list_projects(title=query.get("title") or None)
        items, has_more = paginate(projects, page, count)
        return _ok(
            {
                "projects": [dump_entity(project) for project in items],
                "total": len(projects),
                "hasMore": has_more,
            }
        )

    def _list_revisions(self, locator: str, query: Mapping[str, str], **_: Any) -> MockResponse:
        page, count = _page_window(query)
        revisions = self.store.list_revisions(locator)
        items, has_more = paginate(revisions, page, count)
        return _ok(
            {
                "revisions": [dump_entity(revision) for revision in items],
                "total": len(revisions),
                "hasMore": has_more,
            }
        )

    def _get_revision(self, locator: str, **_: Any) -> MockResponse:
        return _ok(dump_entity(self.store.get_revision(locator)))

    def _list_dependencies(self, locator: str, query: Mapping[str, str], **_: Any) -> MockResponse:
        page, count = _page_window(query)
        dependencies = self.store.list_dependencies(locator)
        items, has_more = paginate(dependencies, page, count)
        return _ok(
            {
                "dependencies": [dump_entity(dep) for dep in items],
                "count": len(dependencies),
                "hasMore": has_more,
            }
        )

    def _get_issue(self, issue_id: str, query: Mapping[str, str], **_: Any) -> MockResponse:
        issue = self.store.get_issue(coerce_issue_id(issue_id))
        category = query.get("category")
        if category and issue.issue_type != parse_category(category):
            raise NotFound("issue", issue_id, message=f"No {category} issue found with ID: {issue_id}")
        return _ok(dump_entity(issue))

    def _list_issues(self, query: Mapping[str, str], **_: Any) -> MockResponse:
        page, count = _page_window(query)
        category = parse_category(query["category"]) if query.get("category") else None

        project = query.get("project")
        scope_type = query.get("scopeType")
        if scope_type:
            if scope_type != "project":
                raise ValidationError(f"Unsupported scopeType {scope_type!r}; only 'project' is supported")
            project = query.get("scopeId") or project

        issues = self.store.list_issues(category=category, project=project or None)
        items, has_more = paginate(issues, page, count)
        return _ok(
            {
                "issues": [dump_entity(issue) for issue in items],
                "total": len(issues),
                "hasMore": has_more,
            }
        )
