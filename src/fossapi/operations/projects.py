"""
Project operations: Get, List and Update.
"""

from __future__ import annotations

from fossapi.adapters.http import encode_segment
from fossapi.domain.locator import LocatorKind, ProjectLocator, coerce_locator
from fossapi.domain.models import Project, ProjectUpdateParams, Revision
from fossapi.domain.pagination import DEFAULT_PAGE_SIZE, Page
from fossapi.domain.queries import ProjectListQuery, RevisionListQuery
from fossapi.operations.base import BaseOps, fetch_all


class ProjectOps(BaseOps):
    """Projects support every operation."""

    entity_name = "project"

    def get(self, id: ProjectLocator | str) -> Project:
        """
        Fetch a project by locator.

        Args:
            id: Project locator or its text.

        Returns:
            The project.
        """
        locator = coerce_locator(id, LocatorKind.PROJECT)
        payload = self.client.get_json(
            f"projects/{encode_segment(locator)}",
            entity_type=self.entity_name,
            entity_id=str(locator),
        )
        return self._load(Project, payload)

    def list_page(
        self,
        query: ProjectListQuery | None = None,
        page: int = 0,
        count: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Project]:
        query = query or ProjectListQuery()
        page, count, params = self._page_params(page, count)
        payload = self.client.get_json(
            "v2/projects", params={**query.to_params(), **params}, entity_type=self.entity_name
        )
        return self._page(Project, payload, "projects", page, count)

    def update(self, id: ProjectLocator | str, params: ProjectUpdateParams) -> Project:
        """
        Apply a partial update.

        Args:
            id: Project locator or its text.
            params: Fields to change; unset fields are left alone.

        Returns:
            The project as stored after the update.
        """
        locator = coerce_locator(id, LocatorKind.PROJECT)
        payload = self.client.put_json(
            f"projects/{encode_segment(locator)}",
            params.to_body(),
            entity_type=self.entity_name,
            entity_id=str(locator),
        )
        return self._load(Project, payload)

    def revisions(self, id: ProjectLocator | str) -> list[Revision]:
        """All revisions of a project."""
        from fossapi.operations.revisions import RevisionOps

        project = coerce_locator(id, LocatorKind.PROJECT)
        return fetch_all(RevisionOps(self.client), RevisionListQuery(project=project))

    def latest_revision(self, id: ProjectLocator | str) -> Revision | None:
        """The project's latest revision, if it has one."""
        from fossapi.operations.revisions import RevisionOps

        project = self.get(id)
        if project.latest_revision_locator is None:
            return None
        return RevisionOps(self.client).get(project.latest_revision_locator)
