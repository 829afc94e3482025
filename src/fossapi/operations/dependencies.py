"""
Dependency operations: List only.

Dependencies are scoped to a revision and are not addressable on their own,
so there is no Get; the API offers no Update.
"""

from __future__ import annotations

from fossapi.adapters.http import encode_segment
from fossapi.domain.models import Dependency
from fossapi.domain.pagination import DEFAULT_PAGE_SIZE, Page
from fossapi.domain.queries import DependencyListQuery
from fossapi.operations.base import BaseOps


class DependencyOps(BaseOps):
    entity_name = "dependency"

    def list_page(
        self,
        query: DependencyListQuery,
        page: int = 0,
        count: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Dependency]:
        """
        Fetch one page of a revision's dependencies.

        Args:
            query: Carries the parent revision and optional filters.
            page: 0-indexed page number.
            count: Page size, clamped to the API maximum.

        Returns:
            The page.
        """
        page, count, params = self._page_params(page, count)
        payload = self.client.get_json(
            f"v2/revisions/{encode_segment(query.revision)}/dependencies",
            params={**query.to_params(), **params},
            entity_type="revision",
            entity_id=str(query.revision),
        )
        return self._page(Dependency, payload, "dependencies", page, count, total_key="count")
