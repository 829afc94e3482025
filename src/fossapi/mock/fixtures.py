"""
Entity factories and canned scenarios for the mock server.

The default scenario contains one analyzed npm project:

    custom+1/test-project           "Test Project", branch main
    custom+1/test-project$main      resolved npm revision
        npm+lodash$4.17.21          depth 1
        npm+express$4.18.0          depth 1
        npm+accepts$1.3.8           depth 2
    issue 1                         vulnerability CVE-2024-0001 (high) on lodash
    issue 2                         licensing GPL-3.0 on npm+gpl-package$1.0.0
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from fossapi.domain.locator import parse_project
from fossapi.domain.models import (
    Dependency,
    Issue,
    IssueCategory,
    IssueSeverity,
    Project,
    Revision,
    RevisionSource,
)
from fossapi.mock.state import MockStore

DEFAULT_PROJECT = "custom+1/test-project"
DEFAULT_REVISION = f"{DEFAULT_PROJECT}$main"


def minimal_project(locator: str, title: str) -> Project:
    return Project(id=locator, title=title)


def analyzed_project(locator: str, title: str, branch: str) -> Project:
    """A project whose latest revision is ``{locator}${branch}``."""
    revision = parse_project(locator).revision(branch)
    return Project(
        id=locator,
        title=title,
        branch=branch,
        latest_revision={"locator": revision, "message": "Latest analysis"},
        latest_build_status="SUCCEEDED",
    )


def minimal_revision(locator: str) -> Revision:
    return Revision(locator=locator, resolved=True)


def resolved_revision(locator: str, source_type: str) -> Revision:
    return Revision(
        locator=locator,
        resolved=True,
        source_type=source_type,
        source=RevisionSource.CLI,
    )


def minimal_dependency(locator: str, depth: int = 1) -> Dependency:
    return Dependency(locator=locator, depth=depth)


def npm_dependency(name: str, version: str, depth: int = 1, licenses: list[str] | None = None) -> Dependency:
    """An npm package dependency titled after the package."""
    return Dependency(
        locator=f"npm+{name}${version}",
        title=name,
        depth=depth,
        licenses=licenses or [],
    )


def vulnerability_issue(issue_id: int, cve: str, severity: str, package_locator: str) -> Issue:
    return Issue(
        id=issue_id,
        issue_type=IssueCategory.VULNERABILITY,
        source={"id": package_locator},
        depths={"direct": 1, "deep": 0},
        statuses={"active": 1, "ignored": 0},
        cve=cve,
        cvss=7.5,
        severity=IssueSeverity(severity),
        details=f"Vulnerability {cve} in package",
        vuln_id=f"{cve}_{package_locator}",
        title=f"{cve} Vulnerability",
    )


def licensing_issue(issue_id: int, license: str, package_locator: str) -> Issue:
    return Issue(
        id=issue_id,
        issue_type=IssueCategory.LICENSING,
        source={"id": package_locator},
        depths={"direct": 0, "deep": 1},
        statuses={"active": 1, "ignored": 0},
        license=license,
    )


def quality_issue(issue_id: int, rule: str, severity: str, package_locator: str) -> Issue:
    return Issue(
        id=issue_id,
        issue_type=IssueCategory.QUALITY,
        source={"id": package_locator},
        statuses={"active": 1, "ignored": 0},
        severity=IssueSeverity(severity),
        quality_rule={"type": rule},
    )


class Scenario(BaseModel):
    """A set of entities to seed a MockStore with."""

    model_config = ConfigDict(frozen=True)

    projects: list[Project] = Field(default_factory=list)
    revisions: list[Revision] = Field(default_factory=list)
    dependencies: dict[str, list[Dependency]] = Field(default_factory=dict)
    issues: list[Issue] = Field(default_factory=list)

    def build_store(self) -> MockStore:
        return MockStore.from_scenario(
            projects=self.projects,
            revisions=self.revisions,
            dependencies=self.dependencies,
            issues=self.issues,
        )


def default_scenario() -> Scenario:
    return Scenario(
        projects=[analyzed_project(DEFAULT_PROJECT, "Test Project", "main")],
        revisions=[resolved_revision(DEFAULT_REVISION, "npm")],
        dependencies={
            DEFAULT_REVISION: [
                npm_dependency("lodash", "4.17.21", 1),
                npm_dependency("express", "4.18.0", 1),
                npm_dependency("accepts", "1.3.8", 2),
            ]
        },
        issues=[
            vulnerability_issue(1, "CVE-2024-0001", "high", "npm+lodash$4.17.21"),
            licensing_issue(2, "GPL-3.0", "npm+gpl-package$1.0.0"),
        ],
    )


def default_store() -> MockStore:
    """A fresh store seeded with the default scenario."""
    return default_scenario().build_store()
