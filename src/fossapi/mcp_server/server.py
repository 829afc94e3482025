"""
MCP tool server for fossapi.

Three tools, ``get``, ``list`` and ``update``, expose the entity operations
to MCP clients. ``FossaTools`` holds the tool logic so it can be used and
tested without the protocol; ``create_server`` registers it on a FastMCP
instance.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import BaseModel

from fossapi.adapters.http import FossaClient
from fossapi.domain.exceptions import FossaError
from fossapi.domain.models import IssueCategory, ProjectUpdateParams, dump_entity, parse_category
from fossapi.domain.pagination import Page, clamp_page_size
from fossapi.domain.queries import DependencyListQuery, IssueListQuery, ProjectListQuery, RevisionListQuery
from fossapi.mcp_server.params import EntityType, GetParams, ListParams, UpdateParams
from fossapi.operations import DependencyOps, IssueOps, ProjectOps, RevisionOps

logger = logging.getLogger(__name__)

SERVER_NAME = "fossapi"

SERVER_INSTRUCTIONS = """\
Query the FOSSA API for projects, revisions, dependencies and issues.

Locators:
  project     custom+{org_id}/{name}
  revision    custom+{org_id}/{name}${ref}
  dependency  {fetcher}+{package}${version}

Use `list` with entity=revision and a project parent to find revisions,
then `list` with entity=dependency and a revision parent for dependencies.
Issues are fetched by numeric id. Only projects can be updated.
"""


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


def _page_result(page: Page[Any]) -> str:
    return _to_json(
        {
            "items": [dump_entity(item) for item in page.items],
            "page": page.page,
            "count": page.count,
            "total": page.total,
            "hasMore": page.has_more,
        }
    )


class FossaTools:
    """Tool implementations over one FossaClient."""

    def __init__(self, client: FossaClient) -> None:
        self.client = client
        self.projects = ProjectOps(client)
        self.revisions = RevisionOps(client)
        self.dependencies = DependencyOps(client)
        self.issues = IssueOps(client)

    def get(self, params: GetParams) -> str:
        """
        Fetch one entity as pretty JSON.

        Raises:
            ToolError: If the entity cannot be fetched or does not support get.
        """
        logger.debug("get %s %s", params.entity.value, params.id)
        entity: BaseModel
        try:
            match params.entity:
                case EntityType.PROJECT:
                    entity = self.projects.get(params.id)
                case EntityType.REVISION:
                    entity = self.revisions.get(params.id)
                case EntityType.ISSUE:
                    entity = self.issues.get(params.id, category=params.category)
                case EntityType.DEPENDENCY:
                    raise ToolError(
                        "Dependencies cannot be fetched individually; "
                        "use list with entity=dependency and a revision parent"
                    )
        except FossaError as e:
            raise ToolError(e.message) from e
        return _to_json(dump_entity(entity))

    def list(self, params: ListParams) -> str:
        """
        Fetch one page of entities as pretty JSON.

        Raises:
            ToolError: If a required parent is missing or the request fails.
        """
        count = clamp_page_size(params.count)
        logger.debug("list %s parent=%s page=%d count=%d", params.entity.value, params.parent, params.page, count)
        try:
            match params.entity:
                case EntityType.PROJECT:
                    page = self.projects.list_page(ProjectListQuery(), params.page, count)
                case EntityType.REVISION:
                    parent = self._require_parent(params, "a project locator")
                    page = self.revisions.list_page(RevisionListQuery(project=parent), params.page, count)
                case EntityType.DEPENDENCY:
                    parent = self._require_parent(params, "a revision locator")
                    page = self.dependencies.list_page(
                        DependencyListQuery(revision=parent), params.page, count
                    )
                case EntityType.ISSUE:
                    query = IssueListQuery(category=params.category, project=params.parent or None)
                    page = self.issues.list_page(query, params.page, count)
        except FossaError as e:
            raise ToolError(e.message) from e
        except ValueError as e:
            raise ToolError(str(e)) from e
        return _page_result(page)

    def update(self, params: UpdateParams) -> str:
        """
        Apply a partial update to a project and return it as pretty JSON.

        Raises:
            ToolError: For non-project entities, empty updates, or failed requests.
        """
        if params.entity != EntityType.PROJECT:
            raise ToolError(f"Update is only supported for projects, not {params.entity.value}s")
        update = ProjectUpdateParams(
            title=params.title,
            description=params.description,
            url=params.url,
            public=params.public,
        )
        if update.is_empty:
            raise ToolError("Nothing to update; provide title, description, url or public")
        logger.debug("update project %s: %s", params.locator, sorted(update.changes()))
        try:
            project = self.projects.update(params.locator, update)
        except FossaError as e:
            raise ToolError(e.message) from e
        return _to_json(dump_entity(project))

    @staticmethod
    def _require_parent(params: ListParams, what: str) -> str:
        if not params.parent:
            raise ToolError(f"Listing {params.entity.value}s requires parent ({what})")
        return params.parent


def _category(value: str | None) -> IssueCategory | None:
    if not value:
        return None
    try:
        return parse_category(value)
    except FossaError as e:
        raise ToolError(e.message) from e


def create_server(client: FossaClient) -> FastMCP:
    """
    Create the MCP server with all tools registered.

    Args:
        client: Client used by every tool call.

    Returns:
        FastMCP server instance.
    """
    tools = FossaTools(client)
    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)

    @mcp.tool(name="get")
    def get_entity(entity: EntityType, id: str, category: str | None = None) -> str:
        """Get a project or revision by locator, or an issue by numeric id.

        Args:
            entity: project, revision or issue.
            id: Locator or issue id.
            category: Optional issue category (vulnerability, licensing, quality).
        """
        return tools.get(GetParams(entity=entity, id=id, category=_category(category)))

    @mcp.tool(name="list")
    def list_entities(
        entity: EntityType,
        parent: str | None = None,
        page: int = 0,
        count: int = 20,
        category: str | None = None,
    ) -> str:
        """List entities one page at a time (pages start at 0, count max 100).

        Args:
            entity: project, revision, dependency or issue.
            parent: Project locator for revisions, revision locator for
                dependencies, optional project scope for issues.
            page: 0-indexed page number.
            count: Items per page.
            category: Issue category filter.
        """
        return tools.list(
            ListParams(
                entity=entity,
                parent=parent,
                page=max(0, page),
                count=count,
                category=_category(category),
            )
        )

    @mcp.tool(name="update")
    def update_entity(
        entity: EntityType,
        locator: str,
        title: str | None = None,
        description: str | None = None,
        url: str | None = None,
        public: bool | None = None,
    ) -> str:
        """Update a project's title, description, url or visibility.

        Args:
            entity: Must be project.
            locator: Project locator.
            title: New title.
            description: New description.
            url: New URL.
            public: Whether the project is public.
        """
        return tools.update(
            UpdateParams(
                entity=entity,
                locator=locator,
                title=title,
                description=description,
                url=url,
                public=public,
            )
        )

    return mcp


def run_server(client: FossaClient, transport: str = "stdio") -> None:
    """Run the MCP server until the client disconnects."""
    logger.info("Starting MCP server on %s", transport)
    create_server(client).run(transport=transport)  # type: ignore[arg-type]
