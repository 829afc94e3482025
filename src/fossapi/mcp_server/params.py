"""
Parameter models for the MCP tools.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from fossapi.domain.models import IssueCategory
from fossapi.domain.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class EntityType(str, Enum):
    """Entity kinds the tools operate on."""

    PROJECT = "project"
    REVISION = "revision"
    DEPENDENCY = "dependency"
    ISSUE = "issue"


class GetParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    entity: EntityType = Field(..., description="Type of entity to fetch")
    id: str = Field(..., description="Locator (project, revision) or numeric id (issue)")
    category: IssueCategory | None = Field(default=None, description="Issue category hint")


class ListParams(BaseModel):
    """Parameters for the ``list`` tool. Pages are 0-indexed."""

    model_config = ConfigDict(frozen=True)

    entity: EntityType = Field(..., description="Type of entity to list")
    parent: str | None = Field(
        default=None,
        description="Parent locator: project for revisions, revision for dependencies, "
        "optional project scope for issues",
    )
    page: int = Field(default=0, ge=0, description="0-indexed page number")
    count: int = Field(
        default=DEFAULT_PAGE_SIZE, description=f"Items per page (clamped to 1-{MAX_PAGE_SIZE})"
    )
    category: IssueCategory | None = Field(default=None, description="Issue category filter")


class UpdateParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    entity: EntityType = Field(..., description="Type of entity to update (project only)")
    locator: str = Field(..., description="Project locator")
    title: str | None = Field(default=None, description="New title")
    description: str | None = Field(default=None, description="New description")
    url: str | None = Field(default=None, description="New URL")
    public: bool | None = Field(default=None, description="Whether the project is public")
