"""
Revision operations: Get and List. Revisions cannot be updated.
"""

from __future__ import annotations

from typing import Any

from fossapi.adapters.http import encode_segment
from fossapi.domain.locator import LocatorKind, RevisionLocator, coerce_locator
from fossapi.domain.models import Dependency, Revision
from fossapi.domain.pagination import DEFAULT_PAGE_SIZE, Page
from fossapi.domain.queries import DependencyListQuery, RevisionListQuery
from fossapi.operations.base import BaseOps, fetch_all


def _flatten_branches(payload: Any) -> Any:
    # Some deployments group revisions by branch: {"main": [...], "dev": [...]}.
    if isinstance(payload, dict) and "revisions" not in payload:
        grouped = [rev for value in payload.values() if isinstance(value, list) for rev in value]
        return {"revisions": grouped}
    return payload


class RevisionOps(BaseOps):
    entity_name = "revision"

    def get(self, id: RevisionLocator | str) -> Revision:
        """
        Fetch a revision by locator.

        A project locator is rejected with LocatorKindMismatch before any
        request is made.
        """
        locator = coerce_locator(id, LocatorKind.REVISION)
        payload = self.client.get_json(
            f"revisions/{encode_segment(locator)}",
            entity_type=self.entity_name,
            entity_id=str(locator),
        )
        return self._load(Revision, payload)

    def list_page(
        self,
        query: RevisionListQuery,
        page: int = 0,
        count: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Revision]:
        page, count, params = self._page_params(page, count)
        payload = self.client.get_json(
            f"projects/{encode_segment(query.project)}/revisions",
            params={**query.to_params(), **params},
            entity_type="project",
            entity_id=str(query.project),
        )
        return self._page(Revision, _flatten_branches(payload), "revisions", page, count)

    def dependencies(self, id: RevisionLocator | str) -> list[Dependency]:
        """All dependencies of a revision."""
        from fossapi.operations.dependencies import DependencyOps

        revision = coerce_locator(id, LocatorKind.REVISION)
        return fetch_all(DependencyOps(self.client), DependencyListQuery(revision=revision))
