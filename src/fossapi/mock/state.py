"""
In-memory relational state for the mock FOSSA API.

Four independent maps hold the entities: projects and revisions keyed by
locator text, dependencies keyed by (revision, dependency) locator text,
and issues keyed by id. Dict insertion order is the stable ordering every
list uses. One lock guards all reads and writes.

Relationships are checked when entities are written. A revision needs its
project and a dependency needs its revision; a rejected write leaves the
store unchanged. Cross-entity views (a project's revisions, a project's
issue aggregate) are computed when read and never stored.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Any

from fossapi.domain.exceptions import NotFound, OrphanDependency, OrphanRevision
from fossapi.domain.locator import (
    LocatorKind,
    ProjectLocator,
    RevisionLocator,
    coerce_locator,
)
from fossapi.domain.models import (
    Dependency,
    Issue,
    IssueCategory,
    Project,
    ProjectIssues,
    ProjectUpdateParams,
    Revision,
    load_entity,
)

logger = logging.getLogger(__name__)


def _key(value: Any, expected: LocatorKind) -> str:
    return str(coerce_locator(value, expected))


class MockStore:
    """
    Thread-safe entity store backing the mock server.

    Locator arguments accept either parsed locators or their text.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._projects: dict[str, Project] = {}
        self._revisions: dict[str, Revision] = {}
        self._dependencies: dict[tuple[str, str], Dependency] = {}
        self._issues: dict[int, Issue] = {}

    @classmethod
    def from_scenario(
        cls,
        projects: Iterable[Project] = (),
        revisions: Iterable[Revision] = (),
        dependencies: dict[RevisionLocator | str, list[Dependency]] | None = None,
        issues: Iterable[Issue] = (),
    ) -> MockStore:
        """
        Build a store from entity collections, inserted parents first.

        Raises:
            OrphanRevision: If a revision's project is not among ``projects``.
            OrphanDependency: If a dependency's revision is not among ``revisions``.
        """
        store = cls()
        for project in projects:
            store.add_project(project)
        for revision in revisions:
            store.add_revision(revision)
        for revision_locator, deps in (dependencies or {}).items():
            store.add_dependencies(revision_locator, deps)
        for issue in issues:
            store.add_issue(issue)
        return store

    # --- Writes ---

    def add_project(self, project: Project | dict[str, Any]) -> Project:
        """Insert a project. Re-adding a locator replaces it in place."""
        project = load_entity(Project, project)
        with self._lock:
            self._projects[str(project.id)] = project
        logger.debug("Stored project %s", project.id)
        return project

    def add_revision(self, revision: Revision | dict[str, Any]) -> Revision:
        """
        Insert a revision.

        Raises:
            OrphanRevision: If the revision's project does not exist.
        """
        revision = load_entity(Revision, revision)
        project_key = str(revision.project_locator)
        with self._lock:
            if project_key not in self._projects:
                raise OrphanRevision(
                    f"Cannot add revision {revision.locator}: project {project_key} does not exist",
                    locator=str(revision.locator),
                    missing=project_key,
                )
            self._revisions[str(revision.locator)] = revision
        logger.debug("Stored revision %s", revision.locator)
        return revision

    def add_dependency(
        self, revision: RevisionLocator | str, dependency: Dependency | dict[str, Any]
    ) -> Dependency:
        """Insert one dependency under a revision."""
        return self.add_dependencies(revision, [dependency])[0]

    def add_dependencies(
        self,
        revision: RevisionLocator | str,
        dependencies: Iterable[Dependency | dict[str, Any]],
    ) -> list[Dependency]:
        """
        Insert dependencies under a revision, all or nothing.

        Raises:
            OrphanDependency: If the revision does not exist.
            ValidationError: If any dependency is invalid; nothing is stored.
        """
        revision_key = _key(revision, LocatorKind.REVISION)
        loaded = [load_entity(Dependency, dep) for dep in dependencies]
        with self._lock:
            if revision_key not in self._revisions:
                raise OrphanDependency(
                    f"Cannot add dependencies: revision {revision_key} does not exist",
                    locator=revision_key,
                    missing=revision_key,
                )
            for dep in loaded:
                self._dependencies[(revision_key, str(dep.locator))] = dep
        logger.debug("Stored %d dependencies under %s", len(loaded), revision_key)
        return loaded

    def add_issue(self, issue: Issue | dict[str, Any]) -> Issue:
        """Insert an issue. Re-adding an id replaces it in place."""
        issue = load_entity(Issue, issue)
        with self._lock:
            self._issues[issue.id] = issue
        logger.debug("Stored %s issue %d", issue.issue_type.value, issue.id)
        return issue

    def update_project(self, locator: ProjectLocator | str, params: ProjectUpdateParams) -> Project:
        """
        Apply a partial update to an existing project.

        Raises:
            NotFound: If the project does not exist. Updates never create.
        """
        key = _key(locator, LocatorKind.PROJECT)
        with self._lock:
            current = self._projects.get(key)
            if current is None:
                raise NotFound("project", key)
            updated = current.apply(params)
            self._projects[key] = updated
            logger.debug("Updated project %s: %s", key, sorted(params.changes()))
            return self._with_issue_counts(updated)

    # --- Reads ---

    def get_project(self, locator: ProjectLocator | str) -> Project:
        """Fetch a project with issue counts derived from current state."""
        key = _key(locator, LocatorKind.PROJECT)
        with self._lock:
            project = self._projects.get(key)
            if project is None:
                raise NotFound("project", key)
            return self._with_issue_counts(project)

    def list_projects(self, title: str | None = None) -> list[Project]:
        """Projects in creation order, optionally filtered by a case-insensitive title substring."""
        needle = title.lower() if title else None
        with self._lock:
            return [
                self._with_issue_counts(project)
                for project in self._projects.values()
                if needle is None or needle in project.title.lower()
            ]

    def get_revision(self, locator: RevisionLocator | str) -> Revision:
        key = _key(locator, LocatorKind.REVISION)
        with self._lock:
            revision = self._revisions.get(key)
            if revision is None:
                raise NotFound("revision", key)
            return revision

    def list_revisions(self, project: ProjectLocator | str) -> list[Revision]:
        """
        Revisions whose derived project is ``project``, in creation order.

        Raises:
            NotFound: If the project does not exist.
        """
        key = _key(project, LocatorKind.PROJECT)
        with self._lock:
            if key not in self._projects:
                raise NotFound("project", key)
            return self._revisions_of(key)

    def list_dependencies(self, revision: RevisionLocator | str) -> list[Dependency]:
        """
        Dependencies of one revision, in creation order.

        Raises:
            NotFound: If the revision does not exist.
        """
        key = _key(revision, LocatorKind.REVISION)
        with self._lock:
            if key not in self._revisions:
                raise NotFound("revision", key)
            return self._dependencies_of(key)

    def get_issue(self, issue_id: int) -> Issue:
        with self._lock:
            issue = self._issues.get(issue_id)
            if issue is None:
                raise NotFound("issue", str(issue_id))
            return issue

    def list_issues(
        self,
        category: IssueCategory | None = None,
        project: ProjectLocator | str | None = None,
    ) -> list[Issue]:
        """
        Issues in creation order, filtered by category and project scope.

        Raises:
            NotFound: If ``project`` is given and does not exist.
        """
        with self._lock:
            if project is None:
                issues = list(self._issues.values())
            else:
                key = _key(project, LocatorKind.PROJECT)
                if key not in self._projects:
                    raise NotFound("project", key)
                issues = self._issues_of(key)
        if category is not None:
            issues = [issue for issue in issues if issue.issue_type == category]
        return issues

    def project_issues(self, project: ProjectLocator | str) -> list[Issue]:
        """Issues raised against a project, its revisions, or their dependencies."""
        key = _key(project, LocatorKind.PROJECT)
        with self._lock:
            if key not in self._projects:
                raise NotFound("project", key)
            return self._issues_of(key)

    def counts(self) -> dict[str, int]:
        """Number of stored entities per map."""
        with self._lock:
            return {
                "projects": len(self._projects),
                "revisions": len(self._revisions),
                "dependencies": len(self._dependencies),
                "issues": len(self._issues),
            }

    # --- Derived views (callers hold the lock) ---

    def _revisions_of(self, project_key: str) -> list[Revision]:
        return [
            revision
            for revision in self._revisions.values()
            if str(revision.project_locator) == project_key
        ]

    def _dependencies_of(self, revision_key: str) -> list[Dependency]:
        return [dep for (owner, _), dep in self._dependencies.items() if owner == revision_key]

    def _issues_of(self, project_key: str) -> list[Issue]:
        scope = {project_key}
        for revision in self._revisions_of(project_key):
            revision_key = str(revision.locator)
            scope.add(revision_key)
            scope.update(str(dep.locator) for dep in self._dependencies_of(revision_key))
        return [issue for issue in self._issues.values() if str(issue.source.id) in scope]

    def _with_issue_counts(self, project: Project) -> Project:
        issues = self._issues_of(str(project.id))
        by_category = {category: 0 for category in IssueCategory}
        for issue in issues:
            by_category[issue.issue_type] += 1
        counts = ProjectIssues(
            total=len(issues),
            licensing=by_category[IssueCategory.LICENSING],
            security=by_category[IssueCategory.VULNERABILITY],
            quality=by_category[IssueCategory.QUALITY],
        )
        return project.model_copy(update={"issues": counts})
