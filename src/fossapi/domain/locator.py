"""
Locator grammar for FOSSA entity identifiers.

Three textual shapes are recognised:

    Project     custom+{org_id}/{project_name}
    Revision    custom+{org_id}/{project_name}${revision_ref}
    Dependency  {fetcher}+{package}[${version}]

Parsing is a single left-to-right scan. The namespace ends at the first
``+``; ``custom`` selects the project/revision family and anything else is a
dependency fetcher. The first unescaped ``$`` after the namespace separates
the base identity from the ref or version, and everything after it is kept
verbatim. A backslash escapes the character that follows it. Segments keep
their escape sequences so ``serialize(parse(text)) == text`` for every valid
locator.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fossapi.domain.exceptions import (
    EmptyField,
    InvalidNamespace,
    LocatorKindMismatch,
    MalformedLocator,
)

PROJECT_NAMESPACE = "custom"
NAMESPACE_SEPARATOR = "+"
REF_SEPARATOR = "$"
ORG_SEPARATOR = "/"
ESCAPE = "\\"


class LocatorKind(str, Enum):
    """The three locator shapes."""

    PROJECT = "project"
    REVISION = "revision"
    DEPENDENCY = "dependency"


def find_unescaped(text: str, target: str, start: int = 0) -> int:
    """Index of the first ``target`` not preceded by an escape, or -1."""
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if escaped:
            escaped = False
        elif char == ESCAPE:
            escaped = True
        elif char == target:
            return index
    return -1


def _is_plain_segment(value: str) -> bool:
    # No unescaped separator and no trailing escape that would swallow one.
    probe = value + REF_SEPARATOR
    return find_unescaped(probe, REF_SEPARATOR) == len(value)


def strip_ref(text: str) -> str:
    """Return the text before the first unescaped ``$`` (the base identity)."""
    plus = text.find(NAMESPACE_SEPARATOR)
    dollar = find_unescaped(text, REF_SEPARATOR, plus + 1 if plus >= 0 else 0)
    return text if dollar == -1 else text[:dollar]


class ProjectLocator(BaseModel):
    """Identity of a project: ``custom+{org_id}/{name}``."""

    model_config = ConfigDict(frozen=True)

    org_id: int = Field(..., gt=0, strict=True, description="Numeric organization id")
    name: str = Field(..., min_length=1, description="Project name, escapes preserved")

    @field_validator("name")
    @classmethod
    def _name_is_plain(cls, value: str) -> str:
        if not _is_plain_segment(value):
            raise ValueError("project name must not contain an unescaped '$' or end in an escape")
        return value

    @property
    def kind(self) -> LocatorKind:
        return LocatorKind.PROJECT

    def revision(self, ref: str) -> RevisionLocator:
        """Build the locator of one of this project's revisions."""
        return RevisionLocator(project=self, ref=ref)

    def __str__(self) -> str:
        return f"{PROJECT_NAMESPACE}+{self.org_id}/{self.name}"


class RevisionLocator(BaseModel):
    """
    Identity of a project revision: ``custom+{org_id}/{name}${ref}``.

    The ref may be empty and may itself contain ``$`` characters; only the
    first unescaped ``$`` is structural.
    """

    model_config = ConfigDict(frozen=True)

    project: ProjectLocator = Field(..., description="The project this revision belongs to")
    ref: str = Field(..., description="Revision reference (commit, branch, tag)")

    @property
    def kind(self) -> LocatorKind:
        return LocatorKind.REVISION

    def __str__(self) -> str:
        return f"{self.project}{REF_SEPARATOR}{self.ref}"


class DependencyLocator(BaseModel):
    """Identity of a package: ``{fetcher}+{package}`` with an optional ``${version}``."""

    model_config = ConfigDict(frozen=True)

    fetcher: str = Field(..., min_length=1, description="Package ecosystem, e.g. npm")
    package: str = Field(..., min_length=1, description="Package name, escapes preserved")
    version: str | None = Field(default=None, description="Version; None when absent")

    @field_validator("fetcher")
    @classmethod
    def _fetcher_is_token(cls, value: str) -> str:
        if any(char in value for char in (REF_SEPARATOR, ESCAPE, NAMESPACE_SEPARATOR)):
            raise ValueError("fetcher must not contain '$', '+' or '\\'")
        if value == PROJECT_NAMESPACE:
            raise ValueError(f"'{PROJECT_NAMESPACE}' is reserved for project locators")
        return value

    @field_validator("package")
    @classmethod
    def _package_is_plain(cls, value: str) -> str:
        if not _is_plain_segment(value):
            raise ValueError("package must not contain an unescaped '$' or end in an escape")
        return value

    @property
    def kind(self) -> LocatorKind:
        return LocatorKind.DEPENDENCY

    def __str__(self) -> str:
        base = f"{self.fetcher}{NAMESPACE_SEPARATOR}{self.package}"
        if self.version is None:
            return base
        return f"{base}{REF_SEPARATOR}{self.version}"


Locator = Union[ProjectLocator, RevisionLocator, DependencyLocator]

_PROJECT_FAMILY = (LocatorKind.PROJECT, LocatorKind.REVISION)


def parse(text: str, expected: LocatorKind | None = None) -> Locator:
    """
    Parse locator text.

    Args:
        text: Locator text.
        expected: If given, the kind the caller needs.

    Returns:
        The parsed locator.

    Raises:
        MalformedLocator: If the text matches no locator shape.
        EmptyField: If a required segment is empty.
        InvalidNamespace: If ``expected`` belongs to the other family.
        LocatorKindMismatch: If the text is a valid locator of another kind.
    """
    if not isinstance(text, str):
        raise MalformedLocator(f"locator must be text, got {type(text).__name__}", repr(text))

    plus = text.find(NAMESPACE_SEPARATOR)
    if plus == -1:
        raise MalformedLocator(f"missing '+' after namespace in locator: {text!r}", text)

    namespace = text[:plus]
    if not namespace:
        raise EmptyField(f"empty namespace in locator: {text!r}", text, field="namespace")
    if REF_SEPARATOR in namespace or ESCAPE in namespace:
        raise MalformedLocator(
            f"namespace must not contain '$' or '\\': {text!r}", text, field="namespace"
        )

    is_project_family = namespace == PROJECT_NAMESPACE
    if expected is not None and (expected in _PROJECT_FAMILY) != is_project_family:
        wanted = "custom" if expected in _PROJECT_FAMILY else "a package fetcher"
        raise InvalidNamespace(
            f"expected {expected.value} locator with namespace {wanted}, got {namespace!r}",
            text,
            namespace,
        )

    rest = text[plus + 1 :]
    dollar = find_unescaped(rest, REF_SEPARATOR)
    base = rest if dollar == -1 else rest[:dollar]
    tail = None if dollar == -1 else rest[dollar + 1 :]
    if base and not _is_plain_segment(base):
        raise MalformedLocator(f"dangling escape at end of identity: {text!r}", text)

    locator: Locator
    if is_project_family:
        project = _parse_project_base(text, base)
        locator = project if tail is None else RevisionLocator(project=project, ref=tail)
    else:
        if not base:
            raise EmptyField(f"empty package in locator: {text!r}", text, field="package")
        locator = DependencyLocator(fetcher=namespace, package=base, version=tail)

    if expected is not None and locator.kind != expected:
        raise LocatorKindMismatch(
            f"expected a {expected.value} locator, got a {locator.kind.value} locator: {text!r}",
            expected=expected.value,
            actual=locator.kind.value,
            locator=text,
        )
    return locator


def _parse_project_base(text: str, base: str) -> ProjectLocator:
    slash = base.find(ORG_SEPARATOR)
    if slash == -1:
        raise MalformedLocator(
            f"project locator needs '{{org_id}}/{{name}}': {text!r}", text, field="org_id"
        )

    org, name = base[:slash], base[slash + 1 :]
    if not org:
        raise EmptyField(f"empty org_id in locator: {text!r}", text, field="org_id")
    if not (org.isascii() and org.isdigit()) or org.startswith("0"):
        raise MalformedLocator(
            f"org_id must be a positive integer without leading zeros: {text!r}",
            text,
            field="org_id",
        )
    if not name:
        raise EmptyField(f"empty project name in locator: {text!r}", text, field="project_name")
    return ProjectLocator(org_id=int(org), name=name)


def parse_project(text: str) -> ProjectLocator:
    """Parse text that must be a project locator."""
    return parse(text, LocatorKind.PROJECT)  # type: ignore[return-value]


def parse_revision(text: str) -> RevisionLocator:
    """Parse text that must be a revision locator."""
    return parse(text, LocatorKind.REVISION)  # type: ignore[return-value]


def parse_dependency(text: str) -> DependencyLocator:
    """Parse text that must be a dependency locator."""
    return parse(text, LocatorKind.DEPENDENCY)  # type: ignore[return-value]


def coerce_locator(value: Locator | str, expected: LocatorKind | None = None) -> Locator:
    """
    Accept either locator text or an already-parsed locator.

    Parsed locators are checked against ``expected`` the same way text is.
    """
    if isinstance(value, str):
        return parse(value, expected)
    if not isinstance(value, (ProjectLocator, RevisionLocator, DependencyLocator)):
        raise MalformedLocator(f"not a locator: {value!r}", repr(value))
    if expected is not None and value.kind != expected:
        if (expected in _PROJECT_FAMILY) != (value.kind in _PROJECT_FAMILY):
            raise InvalidNamespace(
                f"expected a {expected.value} locator, got {value}",
                str(value),
                str(value).split(NAMESPACE_SEPARATOR, 1)[0],
            )
        raise LocatorKindMismatch(
            f"expected a {expected.value} locator, got a {value.kind.value} locator: {value}",
            expected=expected.value,
            actual=value.kind.value,
            locator=str(value),
        )
    return value


def serialize(locator: Locator) -> str:
    """Render a locator back to its canonical text."""
    return str(locator)


def kind(locator: Locator | str) -> LocatorKind:
    """Return the kind of a locator or of locator text."""
    return coerce_locator(locator).kind
