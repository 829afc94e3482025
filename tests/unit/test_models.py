"""
Unit tests for entity models.
"""

from __future__ import annotations

import pydantic
import pytest

from fossapi.domain.exceptions import ValidationError
from fossapi.domain.locator import DependencyLocator, ProjectLocator, RevisionLocator
from fossapi.domain.models import (
    Dependency,
    DependencyIssueType,
    Issue,
    IssueCategory,
    IssueSeverity,
    LicenseDetail,
    Project,
    ProjectUpdateParams,
    Revision,
    coerce_issue_id,
    dump_entity,
    load_entity,
    parse_category,
)


class TestProject:
    """Tests for the Project model."""

    def test_accepts_id_or_locator_key(self) -> None:
        """The primary key may arrive as 'id' or 'locator'."""
        by_id = Project.model_validate({"id": "custom+1/demo", "title": "Demo"})
        by_locator = Project.model_validate({"locator": "custom+1/demo", "title": "Demo"})

        assert by_id.id == by_locator.id == ProjectLocator(org_id=1, name="demo")

    def test_camel_case_wire_format(self) -> None:
        """camelCase keys are read and written."""
        project = Project.model_validate(
            {
                "id": "custom+1/demo",
                "title": "Demo",
                "latestRevision": {"locator": "custom+1/demo$abc"},
                "latestBuildStatus": "SUCCEEDED",
                "type": "npm",
            }
        )

        assert project.latest_revision_locator == RevisionLocator(
            project=ProjectLocator(org_id=1, name="demo"), ref="abc"
        )
        data = dump_entity(project)
        assert data["id"] == "custom+1/demo"
        assert data["latestRevision"]["locator"] == "custom+1/demo$abc"
        assert data["latestBuildStatus"] == "SUCCEEDED"
        assert data["type"] == "npm"

    def test_rejects_revision_locator_as_id(self) -> None:
        """A project id must be a project locator."""
        with pytest.raises(ValidationError) as exc_info:
            load_entity(Project, {"id": "custom+1/demo$main", "title": "Demo"})
        assert exc_info.value.entity_type == "Project"

    def test_frozen(self, sample_project: Project) -> None:
        """Projects are immutable."""
        with pytest.raises(pydantic.ValidationError):
            sample_project.title = "Changed"  # type: ignore[misc]

    def test_apply_changes_only_set_fields(self, sample_project: Project) -> None:
        """Unset update fields leave the project unchanged."""
        project = sample_project.model_copy(update={"description": "keep me"})

        updated = project.apply(ProjectUpdateParams(title="Renamed"))

        assert updated.title == "Renamed"
        assert updated.description == "keep me"
        assert updated.id == project.id
        assert project.title == "Demo"

    def test_apply_default_branch(self, sample_project: Project) -> None:
        """default_branch updates the project's branch."""
        updated = sample_project.apply(ProjectUpdateParams(default_branch="develop"))

        assert updated.branch == "develop"


class TestProjectUpdateParams:
    """Tests for partial update parameters."""

    def test_body_contains_only_set_fields(self) -> None:
        """Unset fields are not sent."""
        params = ProjectUpdateParams(title="T", public=False)

        assert params.to_body() == {"title": "T", "public": False}

    def test_body_uses_camel_case(self) -> None:
        params = ProjectUpdateParams(policy_id=3, default_branch="main")

        assert params.to_body() == {"policyId": 3, "defaultBranch": "main"}

    def test_empty(self) -> None:
        assert ProjectUpdateParams().is_empty
        assert not ProjectUpdateParams(public=False).is_empty

    def test_blank_title_rejected(self) -> None:
        """An empty title is not a valid update."""
        with pytest.raises(ValidationError):
            load_entity(ProjectUpdateParams, {"title": ""})


class TestRevision:
    """Tests for the Revision model."""

    def test_project_derived_from_locator(self, sample_revision: Revision) -> None:
        assert str(sample_revision.project_locator) == "custom+1/demo"
        assert sample_revision.ref == "abc123"

    def test_source_is_case_insensitive(self) -> None:
        """Enum values from the API are matched case-insensitively."""
        revision = Revision.model_validate({"locator": "custom+1/demo$x", "source": "CLI"})

        assert revision.source is not None
        assert revision.source.value == "cli"


class TestDependency:
    """Tests for the Dependency model."""

    def test_depth_must_be_positive(self) -> None:
        """Depth 0 would be the revision itself."""
        with pytest.raises(ValidationError):
            load_entity(Dependency, {"locator": "npm+a$1", "depth": 0})

    def test_direct_and_transitive(self, sample_dependencies: list[Dependency]) -> None:
        direct = [dep for dep in sample_dependencies if dep.is_direct]
        transitive = [dep for dep in sample_dependencies if dep.is_transitive]

        assert [dep.package_name for dep in direct] == ["left-pad", "chalk"]
        assert [dep.package_name for dep in transitive] == ["ansi-styles"]

    def test_locator_parts(self) -> None:
        dep = Dependency.model_validate({"locator": "pip+requests$2.31.0"})

        assert dep.locator == DependencyLocator(fetcher="pip", package="requests", version="2.31.0")
        assert dep.fetcher == "pip"
        assert dep.version == "2.31.0"

    def test_rejects_project_locator(self) -> None:
        """A custom locator cannot name a dependency."""
        with pytest.raises(ValidationError):
            load_entity(Dependency, {"locator": "custom+1/demo"})

    def test_licenses_accept_strings_and_details(self) -> None:
        """License entries may be plain names or structured records."""
        dep = Dependency.model_validate(
            {
                "locator": "npm+a$1",
                "licenses": ["MIT", {"id": "Apache-2.0", "name": "Apache 2.0", "declared": True}],
            }
        )

        assert isinstance(dep.licenses[0], str)
        assert isinstance(dep.licenses[1], LicenseDetail)
        assert dep.license_names == ["MIT", "Apache 2.0"]

    def test_unknown_issue_type_is_tolerated(self) -> None:
        """Unrecognised dependency issue types map to UNKNOWN."""
        dep = Dependency.model_validate(
            {"locator": "npm+a$1", "issues": [{"id": 5, "type": "something_new"}]}
        )

        assert dep.issues[0].issue_type == DependencyIssueType.UNKNOWN


class TestIssue:
    """Tests for the Issue model and its category rules."""

    def test_vulnerability_fields(self) -> None:
        issue = Issue.model_validate(
            {
                "id": 1,
                "type": "vulnerability",
                "source": {"id": "npm+lodash$4.17.20"},
                "cve": "CVE-2021-23337",
                "cvss": 7.2,
                "severity": "HIGH",
                "statuses": {"active": 2, "ignored": 1},
            }
        )

        assert issue.category == IssueCategory.VULNERABILITY
        assert issue.severity == IssueSeverity.HIGH
        assert issue.source_locator == DependencyLocator(
            fetcher="npm", package="lodash", version="4.17.20"
        )
        assert issue.active_count == 2
        assert issue.ignored_count == 1

    def test_source_may_be_project(self) -> None:
        """Issues can be raised against any locator kind."""
        issue = Issue.model_validate(
            {"id": 2, "type": "licensing", "source": {"id": "custom+1/demo"}, "license": "GPL-3.0"}
        )

        assert isinstance(issue.source_locator, ProjectLocator)

    def test_licensing_issue_cannot_carry_cve(self) -> None:
        """Vulnerability-only fields are rejected on other categories."""
        with pytest.raises(ValidationError) as exc_info:
            load_entity(
                Issue,
                {"id": 3, "type": "licensing", "source": {"id": "npm+a$1"}, "cve": "CVE-1"},
            )
        assert "cve" in exc_info.value.message

    def test_vulnerability_cannot_carry_license(self) -> None:
        with pytest.raises(ValidationError):
            load_entity(
                Issue,
                {"id": 4, "type": "vulnerability", "source": {"id": "npm+a$1"}, "license": "MIT"},
            )

    def test_empty_containers_count_as_absent(self) -> None:
        """An empty quality rule on a licensing issue is not a populated field."""
        issue = load_entity(
            Issue,
            {"id": 7, "type": "licensing", "source": {"id": "npm+a$1"}, "qualityRule": {}, "cwes": []},
        )

        assert issue.license is None

    def test_populated_quality_rule_on_licensing_rejected(self) -> None:
        with pytest.raises(ValidationError):
            load_entity(
                Issue,
                {"id": 8, "type": "licensing", "source": {"id": "npm+a$1"}, "qualityRule": {"type": "x"}},
            )

    def test_missing_category_fields_are_allowed(self) -> None:
        """A vulnerability without a CVE is still a valid issue."""
        issue = load_entity(Issue, {"id": 5, "type": "vulnerability", "source": {"id": "npm+a$1"}})

        assert issue.cve is None

    def test_dump_uses_type_key(self) -> None:
        issue = Issue.model_validate(
            {"id": 6, "type": "quality", "source": {"id": "npm+a$1"}, "qualityRule": {"type": "outdated"}}
        )

        data = dump_entity(issue)
        assert data["type"] == "quality"
        assert data["source"]["id"] == "npm+a$1"
        assert data["qualityRule"] == {"type": "outdated"}


class TestBoundaryHelpers:
    """Tests for category and id parsing helpers."""

    def test_parse_category_case_insensitive(self) -> None:
        assert parse_category("Licensing") == IssueCategory.LICENSING

    def test_parse_category_unknown(self) -> None:
        with pytest.raises(ValidationError):
            parse_category("security")

    @pytest.mark.parametrize("value,expected", [(7, 7), ("42", 42), (" 3 ", 3), (0, 0)])
    def test_coerce_issue_id(self, value: int | str, expected: int) -> None:
        assert coerce_issue_id(value) == expected

    @pytest.mark.parametrize("value", ["abc", "-1", -1, "1.5", "", True])
    def test_coerce_issue_id_rejects(self, value: object) -> None:
        with pytest.raises(ValidationError):
            coerce_issue_id(value)  # type: ignore[arg-type]

    def test_load_entity_passes_instances_through(self, sample_project: Project) -> None:
        assert load_entity(Project, sample_project) is sample_project

    def test_load_entity_reports_field_errors(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            load_entity(Project, {"id": "custom+1/demo"})
        assert any(err["loc"] == ["title"] for err in exc_info.value.errors)
