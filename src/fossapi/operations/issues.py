"""
Issue operations: Get and List.
"""

from __future__ import annotations

from fossapi.domain.models import Issue, IssueCategory, coerce_issue_id, parse_category
from fossapi.domain.pagination import DEFAULT_PAGE_SIZE, Page
from fossapi.domain.queries import IssueListQuery
from fossapi.operations.base import BaseOps


class IssueOps(BaseOps):
    entity_name = "issue"

    def get(self, id: int | str, category: IssueCategory | str | None = None) -> Issue:
        """
        Fetch an issue by numeric id.

        Args:
            id: Issue id.
            category: Category hint forwarded to the API.

        Returns:
            The issue.
        """
        issue_id = coerce_issue_id(id)
        params = {"category": parse_category(category).value} if category else None
        payload = self.client.get_json(
            f"v2/issues/{issue_id}",
            params=params,
            entity_type=self.entity_name,
            entity_id=str(issue_id),
        )
        return self._load(Issue, payload)

    def list_page(
        self,
        query: IssueListQuery | None = None,
        page: int = 0,
        count: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Issue]:
        query = query or IssueListQuery()
        page, count, params = self._page_params(page, count)
        payload = self.client.get_json(
            "v2/issues", params={**query.to_params(), **params}, entity_type=self.entity_name
        )
        return self._page(Issue, payload, "issues", page, count)
