"""
Unit tests for the locator grammar.
"""

from __future__ import annotations

import pydantic
import pytest

from fossapi.domain.exceptions import (
    EmptyField,
    InvalidNamespace,
    LocatorKindMismatch,
    MalformedLocator,
    ParseError,
)
from fossapi.domain.locator import (
    DependencyLocator,
    LocatorKind,
    ProjectLocator,
    RevisionLocator,
    coerce_locator,
    find_unescaped,
    kind,
    parse,
    parse_dependency,
    parse_project,
    parse_revision,
    serialize,
    strip_ref,
)


class TestParse:
    """Tests for parsing each locator shape."""

    def test_project(self) -> None:
        """Should parse org id and project name."""
        locator = parse("custom+1/demo")

        assert isinstance(locator, ProjectLocator)
        assert locator.org_id == 1
        assert locator.name == "demo"
        assert locator.kind == LocatorKind.PROJECT

    def test_revision(self) -> None:
        """Should split the ref at the first '$'."""
        locator = parse("custom+42/my-app$abc123")

        assert isinstance(locator, RevisionLocator)
        assert locator.project == ProjectLocator(org_id=42, name="my-app")
        assert locator.ref == "abc123"

    def test_dependency_with_version(self) -> None:
        """Should split fetcher, package and version."""
        locator = parse("npm+lodash$4.17.21")

        assert locator == DependencyLocator(fetcher="npm", package="lodash", version="4.17.21")
        assert locator.kind == LocatorKind.DEPENDENCY

    def test_dependency_without_version(self) -> None:
        """A dependency without '$' has no version."""
        locator = parse("pip+requests")

        assert isinstance(locator, DependencyLocator)
        assert locator.version is None

    def test_dependency_with_empty_version_differs_from_absent(self) -> None:
        """'npm+x$' has an empty version, distinct from 'npm+x'."""
        assert parse("npm+x$").version == ""
        assert parse("npm+x$") != parse("npm+x")

    def test_revision_with_empty_ref_is_not_project(self) -> None:
        """'custom+1/p$' is a revision with empty ref."""
        locator = parse("custom+1/p$")

        assert isinstance(locator, RevisionLocator)
        assert locator.ref == ""

    def test_first_dollar_wins(self) -> None:
        """Everything after the first '$' belongs to the ref."""
        locator = parse("custom+1/p$a$b")

        assert isinstance(locator, RevisionLocator)
        assert locator.project.name == "p"
        assert locator.ref == "a$b"

    def test_dependency_version_keeps_later_dollars(self) -> None:
        """Later '$' characters stay in the version."""
        assert parse("go+example.com/mod$v1$beta").version == "v1$beta"

    def test_escaped_dollar_is_not_a_separator(self) -> None:
        """A backslash-escaped '$' stays in the project name."""
        locator = parse("custom+1/weird\\$name$main")

        assert isinstance(locator, RevisionLocator)
        assert locator.project.name == "weird\\$name"
        assert locator.ref == "main"

    def test_slashes_and_plus_in_project_name(self) -> None:
        """Only the first '/' separates org from name; later '+' is literal."""
        locator = parse("custom+1/group/sub+project")

        assert isinstance(locator, ProjectLocator)
        assert locator.name == "group/sub+project"

    def test_dependency_package_with_slashes(self) -> None:
        """Scoped and path-like package names are preserved."""
        locator = parse("npm+@types/node$20.1.0")

        assert locator.package == "@types/node"
        assert locator.version == "20.1.0"


class TestParseErrors:
    """Tests for rejected locator text."""

    @pytest.mark.parametrize("text", ["", "no-plus-here", "custom1/demo"])
    def test_missing_plus(self, text: str) -> None:
        """Text without '+' is malformed."""
        with pytest.raises(MalformedLocator):
            parse(text)

    def test_empty_namespace(self) -> None:
        """'+pkg' has an empty namespace."""
        with pytest.raises(EmptyField) as exc_info:
            parse("+lodash")
        assert exc_info.value.field == "namespace"

    def test_project_without_slash(self) -> None:
        """A custom locator needs '{org}/{name}'."""
        with pytest.raises(MalformedLocator):
            parse("custom+demo")

    @pytest.mark.parametrize("text", ["custom+abc/demo", "custom+01/demo", "custom+0/demo", "custom+-1/demo"])
    def test_bad_org_id(self, text: str) -> None:
        """org_id must be a positive integer without leading zeros."""
        with pytest.raises(MalformedLocator) as exc_info:
            parse(text)
        assert exc_info.value.field == "org_id"

    def test_empty_org_id(self) -> None:
        """'custom+/demo' has an empty org id."""
        with pytest.raises(EmptyField) as exc_info:
            parse("custom+/demo")
        assert exc_info.value.field == "org_id"

    def test_empty_project_name(self) -> None:
        """'custom+1/' has an empty project name."""
        with pytest.raises(EmptyField) as exc_info:
            parse("custom+1/")
        assert exc_info.value.field == "project_name"

    def test_empty_package(self) -> None:
        """'npm+' and 'npm+$1.0' have an empty package."""
        with pytest.raises(EmptyField):
            parse("npm+")
        with pytest.raises(EmptyField):
            parse("npm+$1.0")

    @pytest.mark.parametrize("text", ["np$m+lodash", "np\\m+lodash"])
    def test_bad_fetcher(self, text: str) -> None:
        """A fetcher containing '$' or '\\' is malformed."""
        with pytest.raises(MalformedLocator):
            parse(text)

    def test_dangling_escape(self) -> None:
        """An identity ending in a lone escape cannot be serialized safely."""
        with pytest.raises(MalformedLocator):
            parse("custom+1/demo\\")

    def test_errors_are_value_errors(self) -> None:
        """Parse errors are ValueErrors and carry the input text."""
        with pytest.raises(ValueError) as exc_info:
            parse("garbage")
        assert isinstance(exc_info.value, ParseError)
        assert exc_info.value.text == "garbage"


class TestExpectedKind:
    """Tests for kind-specific parsing."""

    def test_parse_project_accepts_project(self) -> None:
        """parse_project returns a ProjectLocator."""
        assert parse_project("custom+1/demo") == ProjectLocator(org_id=1, name="demo")

    def test_parse_project_rejects_revision(self) -> None:
        """A revision is the right family but the wrong kind."""
        with pytest.raises(LocatorKindMismatch) as exc_info:
            parse_project("custom+1/demo$main")
        assert exc_info.value.expected == "project"
        assert exc_info.value.actual == "revision"

    def test_parse_revision_rejects_project(self) -> None:
        """A project where a revision is expected is a kind mismatch."""
        with pytest.raises(LocatorKindMismatch):
            parse_revision("custom+1/demo")

    def test_parse_project_rejects_dependency_namespace(self) -> None:
        """A package fetcher is the wrong namespace for a project."""
        with pytest.raises(InvalidNamespace) as exc_info:
            parse_project("npm+lodash$1.0.0")
        assert exc_info.value.namespace == "npm"

    def test_parse_dependency_rejects_custom_namespace(self) -> None:
        """'custom' is reserved for projects and revisions."""
        with pytest.raises(InvalidNamespace):
            parse_dependency("custom+1/demo")

    def test_coerce_checks_parsed_locators(self) -> None:
        """Parsed locators are checked against the expected kind too."""
        revision = parse_revision("custom+1/demo$main")

        assert coerce_locator(revision, LocatorKind.REVISION) is revision
        with pytest.raises(LocatorKindMismatch):
            coerce_locator(revision, LocatorKind.PROJECT)
        with pytest.raises(InvalidNamespace):
            coerce_locator(revision, LocatorKind.DEPENDENCY)


class TestRoundTrip:
    """serialize(parse(text)) == text for valid locators."""

    @pytest.mark.parametrize(
        "text",
        [
            "custom+1/demo",
            "custom+1/demo$abc123",
            "custom+1/p$",
            "custom+1/p$a$b",
            "custom+7/weird\\$name$ref\\$x",
            "custom+12/group/sub+project$refs/heads/main",
            "npm+lodash",
            "npm+lodash$4.17.21",
            "npm+x$",
            "npm+@babel/core$7.0.0",
            "git+github.com/org/repo$deadbeef",
            "mvn+org.apache:commons\\\\lang$3.0",
        ],
    )
    def test_round_trip(self, text: str) -> None:
        """Serializing a parsed locator reproduces the text exactly."""
        assert serialize(parse(text)) == text
        assert str(parse(text)) == text


class TestDerivedProject:
    """Tests for revision-to-project derivation."""

    def test_revision_project_is_prefix(self) -> None:
        """The derived project is the text before the first unescaped '$'."""
        revision = parse_revision("custom+1/demo$abc123")

        assert str(revision.project) == "custom+1/demo"
        assert revision.project == parse_project(strip_ref("custom+1/demo$abc123"))

    def test_derived_project_with_ambiguous_ref(self) -> None:
        """A '$' inside the ref does not move the project boundary."""
        assert str(parse_revision("custom+1/p$a$b").project) == "custom+1/p"

    def test_project_builds_revision(self) -> None:
        """ProjectLocator.revision composes a revision locator."""
        project = parse_project("custom+3/app")

        assert str(project.revision("v1.0")) == "custom+3/app$v1.0"

    def test_kind_helper(self) -> None:
        """kind() accepts text or parsed locators."""
        assert kind("custom+1/demo") == LocatorKind.PROJECT
        assert kind("custom+1/demo$x") == LocatorKind.REVISION
        assert kind(parse("npm+a$1")) == LocatorKind.DEPENDENCY


class TestLocatorModels:
    """Tests for direct construction of locator values."""

    def test_locators_are_hashable_and_frozen(self) -> None:
        """Locators can key dicts and cannot be mutated."""
        locator = ProjectLocator(org_id=1, name="demo")

        assert {locator: 1}[parse_project("custom+1/demo")] == 1
        with pytest.raises(pydantic.ValidationError):
            locator.name = "other"  # type: ignore[misc]

    def test_name_with_unescaped_dollar_is_rejected(self) -> None:
        """A name that would not survive serialization is invalid."""
        with pytest.raises(pydantic.ValidationError):
            ProjectLocator(org_id=1, name="a$b")

    def test_non_positive_org_id_is_rejected(self) -> None:
        """org_id must be positive."""
        with pytest.raises(pydantic.ValidationError):
            ProjectLocator(org_id=0, name="demo")

    def test_fetcher_cannot_be_custom(self) -> None:
        """The custom namespace never names a package fetcher."""
        with pytest.raises(pydantic.ValidationError):
            DependencyLocator(fetcher="custom", package="x")


class TestFindUnescaped:
    """Tests for the escape-aware scanner."""

    def test_skips_escaped(self) -> None:
        assert find_unescaped("a\\$b$c", "$") == 4

    def test_escaped_backslash_does_not_escape_next(self) -> None:
        assert find_unescaped("a\\\\$b", "$") == 3

    def test_not_found(self) -> None:
        assert find_unescaped("abc", "$") == -1
