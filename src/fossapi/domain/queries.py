"""
List query models.

Each query carries the parent scope a list needs (if any) plus optional
filters. Filters are forwarded to the API as opaque query parameters.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from fossapi.domain.models import IssueCategory, ProjectLocatorField, RevisionLocatorField


class ListQuery(BaseModel):
    """Base for list queries."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Fields that form part of the request path rather than the query string.
    path_fields: ClassVar[frozenset[str]] = frozenset()

    def to_params(self) -> dict[str, Any]:
        """Query-string parameters for this query."""
        return self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude=set(self.path_fields)
        )


class ProjectListQuery(ListQuery):
    title: str | None = Field(default=None, description="Title substring filter")
    sort: str | None = None


class RevisionListQuery(ListQuery):
    """Revisions of one project."""

    path_fields: ClassVar[frozenset[str]] = frozenset({"project"})

    project: ProjectLocatorField = Field(..., description="Parent project")
    branch: str | None = None


class DependencyListQuery(ListQuery):
    """Dependencies of one revision."""

    path_fields: ClassVar[frozenset[str]] = frozenset({"revision"})

    revision: RevisionLocatorField = Field(..., description="Parent revision")
    title: str | None = None
    direct_only: bool | None = Field(default=None, alias="directOnly")


class IssueListQuery(ListQuery):
    """Issue filters. ``project`` scopes the aggregate to one project."""

    category: IssueCategory | None = None
    project: ProjectLocatorField | None = None
    status: str | None = None
    sort: str | None = None
