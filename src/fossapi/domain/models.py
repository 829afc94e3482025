"""
Domain models for fossapi.

Typed records for the four FOSSA entities (Project, Revision, Dependency,
Issue). All models are frozen Pydantic v2 models. Python attributes are
snake_case; the wire format is camelCase and both spellings are accepted
on input. Locator fields hold parsed locators and serialize back to text.

The domain layer has no external dependencies beyond Pydantic.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Callable, TypeVar, Union

import pydantic
from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    WithJsonSchema,
    model_validator,
)
from pydantic.alias_generators import to_camel

from fossapi.domain.exceptions import ValidationError
from fossapi.domain.locator import (
    DependencyLocator,
    Locator,
    LocatorKind,
    ProjectLocator,
    RevisionLocator,
    coerce_locator,
)


def _locator_validator(expected: LocatorKind | None) -> Callable[[Any], Locator]:
    def validate(value: Any) -> Locator:
        return coerce_locator(value, expected)

    return validate


def _locator_field(base: Any, expected: LocatorKind | None) -> Any:
    return Annotated[
        base,
        BeforeValidator(_locator_validator(expected)),
        PlainSerializer(str, return_type=str),
        WithJsonSchema({"type": "string", "format": "locator"}),
    ]


ProjectLocatorField = _locator_field(ProjectLocator, LocatorKind.PROJECT)
RevisionLocatorField = _locator_field(RevisionLocator, LocatorKind.REVISION)
DependencyLocatorField = _locator_field(DependencyLocator, LocatorKind.DEPENDENCY)
AnyLocatorField = _locator_field(Locator, None)


class WireModel(BaseModel):
    """Base for records exchanged with the API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class _LenientEnum(str, Enum):
    """String enum that matches its values case-insensitively."""

    @classmethod
    def _missing_(cls, value: object) -> Any:
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class IssueCategory(_LenientEnum):
    """Issue classification."""

    VULNERABILITY = "vulnerability"
    LICENSING = "licensing"
    QUALITY = "quality"


class IssueSeverity(_LenientEnum):
    """Severity of a vulnerability or quality issue."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RevisionSource(_LenientEnum):
    """How a revision was submitted."""

    CLI = "cli"
    API = "api"


class DependencyIssueType(_LenientEnum):
    """Issue kinds attached to a dependency. Unrecognised values map to UNKNOWN."""

    VULNERABILITY = "vulnerability"
    POLICY_FLAG = "policy_flag"
    POLICY_CONFLICT = "policy_conflict"
    UNLICENSED_DEPENDENCY = "unlicensed_dependency"
    OUTDATED_DEPENDENCY = "outdated_dependency"
    BLACKLISTED_DEPENDENCY = "blacklisted_dependency"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> Any:
        return super()._missing_(value) or cls.UNKNOWN


# --- Project ---


class ProjectIssues(WireModel):
    """Aggregate issue counts for a project."""

    total: int = Field(default=0, ge=0)
    licensing: int = Field(default=0, ge=0)
    security: int = Field(default=0, ge=0)
    quality: int = Field(default=0, ge=0)


class LatestRevision(WireModel):
    """Pointer to the most recent revision of a project."""

    locator: RevisionLocatorField
    message: str | None = None


class Project(WireModel):
    """
    A FOSSA project.

    The locator is the primary key and accepts either ``id`` or ``locator``
    on input. Projects change only through ``ProjectUpdateParams``.
    """

    id: ProjectLocatorField = Field(
        ...,
        validation_alias=AliasChoices("id", "locator"),
        description="Project locator",
    )
    title: str = Field(..., description="Display title")
    description: str | None = Field(default=None, description="Free-form description")
    url: str | None = Field(default=None, description="Project homepage")
    public: bool = Field(default=False, description="Whether the project is public")
    branch: str | None = Field(default=None, description="Default branch")
    version: str | None = None
    project_type: str | None = Field(default=None, alias="type")
    policy_id: int | None = None
    labels: list[str] = Field(default_factory=list)
    teams: list[str] = Field(default_factory=list)
    issues: ProjectIssues | None = Field(default=None, description="Aggregate issue counts")
    latest_revision: LatestRevision | None = None
    scanned: datetime | None = None
    last_analyzed: datetime | None = None
    latest_build_status: str | None = None

    @property
    def locator(self) -> ProjectLocator:
        return self.id

    @property
    def is_analyzed(self) -> bool:
        return self.last_analyzed is not None

    @property
    def latest_revision_locator(self) -> RevisionLocator | None:
        return self.latest_revision.locator if self.latest_revision else None

    def apply(self, params: ProjectUpdateParams) -> Project:
        """
        Return a copy with the fields set in ``params`` applied.

        Args:
            params: Partial update. Unset fields leave the project unchanged.

        Returns:
            The updated project.
        """
        changes = params.changes()
        if "default_branch" in changes:
            changes["branch"] = changes.pop("default_branch")
        return self.model_copy(update=changes)


class ProjectUpdateParams(WireModel):
    """Partial project update. Only fields that are set are sent and applied."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    url: str | None = None
    public: bool | None = None
    policy_id: int | None = Field(default=None, ge=1)
    default_branch: str | None = Field(default=None, min_length=1)

    def changes(self) -> dict[str, Any]:
        """Fields that carry a value, keyed by attribute name."""
        return self.model_dump(exclude_none=True)

    def to_body(self) -> dict[str, Any]:
        """The JSON body for ``PUT /projects/{locator}``."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def is_empty(self) -> bool:
        return not self.changes()


# --- Revision ---


class Revision(WireModel):
    """An analyzed snapshot of a project at a ref."""

    locator: RevisionLocatorField = Field(..., description="Revision locator")
    resolved: bool = Field(default=False, description="Whether analysis finished")
    source: RevisionSource | None = Field(default=None, description="Submission channel")
    source_type: str | None = Field(default=None, description="Build system, e.g. npm")
    unresolved_issue_count: int = Field(default=0, ge=0)
    message: str | None = None
    error: str | None = None
    author: str | None = None
    url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def project_locator(self) -> ProjectLocator:
        return self.locator.project

    @property
    def ref(self) -> str:
        return self.locator.ref


# --- Dependency ---


class LicenseDetail(WireModel):
    """A structured license entry."""

    id: str | None = None
    name: str | None = None
    title: str | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    declared: bool = False
    discovered: bool = False

    @property
    def label(self) -> str | None:
        return self.name or self.title or self.id


LicenseInfo = Union[str, LicenseDetail]


class DependencyIssue(WireModel):
    """A reference from a dependency to one of its issues."""

    id: int = Field(..., ge=0)
    issue_type: DependencyIssueType = Field(..., alias="type")
    status: str | None = None
    severity: IssueSeverity | None = None
    cve: str | None = None
    cvss_score: float | None = None


class DependencyStatus(WireModel):
    """Analysis state of a single dependency."""

    resolved: bool = False
    unsupported: bool = False
    analyzing: bool = False
    error: str | None = None


class Dependency(WireModel):
    """A package in a revision's dependency graph. Depth 1 means direct."""

    locator: DependencyLocatorField = Field(..., description="Package locator")
    title: str | None = None
    depth: int = Field(default=1, ge=1, description="Distance from the revision root")
    licenses: list[LicenseInfo] = Field(default_factory=list)
    declared_licenses: list[str] = Field(default_factory=list)
    issues: list[DependencyIssue] = Field(default_factory=list)
    origin_paths: list[str] = Field(default_factory=list)
    package_labels: list[str] = Field(default_factory=list)
    is_manual: bool = False
    is_ignored: bool = False
    is_unknown: bool = False
    status: DependencyStatus | None = None

    @property
    def is_direct(self) -> bool:
        return self.depth == 1

    @property
    def is_transitive(self) -> bool:
        return self.depth > 1

    @property
    def fetcher(self) -> str:
        return self.locator.fetcher

    @property
    def package_name(self) -> str:
        return self.locator.package

    @property
    def version(self) -> str | None:
        return self.locator.version

    @property
    def license_names(self) -> list[str]:
        names = []
        for entry in self.licenses:
            label = entry if isinstance(entry, str) else entry.label
            if label:
                names.append(label)
        return names


# --- Issue ---


class IssueSource(WireModel):
    """The entity an issue was raised against."""

    id: AnyLocatorField
    name: str | None = None
    url: str | None = None
    version: str | None = None
    package_manager: str | None = None


class IssueDepths(WireModel):
    direct: int = Field(default=0, ge=0)
    deep: int = Field(default=0, ge=0)


class IssueStatuses(WireModel):
    active: int = Field(default=0, ge=0)
    ignored: int = Field(default=0, ge=0)


class IssueProject(WireModel):
    """A project affected by an issue."""

    id: ProjectLocatorField
    status: str | None = None
    depth: int | None = None
    title: str | None = None


class IssueRemediation(WireModel):
    partial_fix: str | None = None
    complete_fix: str | None = None
    partial_fix_distance: str | None = None
    complete_fix_distance: str | None = None


class IssueEpss(WireModel):
    score: float | None = None
    percentile: float | None = None


_VULNERABILITY_ONLY = {IssueCategory.VULNERABILITY}

# Optional fields that may only be populated for the listed categories.
CATEGORY_FIELDS: dict[str, set[IssueCategory]] = {
    "vuln_id": _VULNERABILITY_ONLY,
    "cve": _VULNERABILITY_ONLY,
    "cvss": _VULNERABILITY_ONLY,
    "cvss_vector": _VULNERABILITY_ONLY,
    "cwes": _VULNERABILITY_ONLY,
    "remediation": _VULNERABILITY_ONLY,
    "published": _VULNERABILITY_ONLY,
    "exploitability": _VULNERABILITY_ONLY,
    "epss": _VULNERABILITY_ONLY,
    "severity": {IssueCategory.VULNERABILITY, IssueCategory.QUALITY},
    "license": {IssueCategory.LICENSING},
    "quality_rule": {IssueCategory.QUALITY},
}


class Issue(WireModel):
    """
    A vulnerability, licensing or quality finding.

    The category decides which optional fields may be populated. A missing
    category field is fine; a field populated on the wrong category fails
    validation.
    """

    id: int = Field(..., ge=0, description="Numeric issue id")
    issue_type: IssueCategory = Field(..., alias="type", description="Issue category")
    source: IssueSource = Field(..., description="Affected entity")
    depths: IssueDepths = Field(default_factory=IssueDepths)
    statuses: IssueStatuses = Field(default_factory=IssueStatuses)
    projects: list[IssueProject] = Field(default_factory=list)
    created_at: datetime | None = None
    title: str | None = None
    details: str | None = None

    severity: IssueSeverity | None = None

    vuln_id: str | None = None
    cve: str | None = None
    cvss: float | None = Field(default=None, ge=0.0, le=10.0)
    cvss_vector: str | None = None
    cwes: list[str] = Field(default_factory=list)
    remediation: IssueRemediation | None = None
    published: datetime | None = None
    exploitability: str | None = None
    epss: IssueEpss | None = None

    license: str | None = None

    quality_rule: Any = None

    @model_validator(mode="after")
    def _check_category_fields(self) -> Issue:
        misplaced = [
            name
            for name, categories in CATEGORY_FIELDS.items()
            if self.issue_type not in categories and getattr(self, name) not in (None, [], {})
        ]
        if misplaced:
            raise ValueError(
                f"{self.issue_type.value} issue cannot carry: {', '.join(sorted(misplaced))}"
            )
        return self

    @property
    def category(self) -> IssueCategory:
        return self.issue_type

    @property
    def source_locator(self) -> Locator:
        return self.source.id

    @property
    def active_count(self) -> int:
        return self.statuses.active

    @property
    def ignored_count(self) -> int:
        return self.statuses.ignored


# --- Boundary helpers ---

ModelT = TypeVar("ModelT", bound=BaseModel)


def load_entity(model: type[ModelT], data: Any) -> ModelT:
    """
    Validate an API payload into a model.

    Args:
        model: Target model class.
        data: Decoded JSON (or an instance of ``model``).

    Returns:
        The validated model.

    Raises:
        ValidationError: If the payload does not fit the model.
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in e.errors()
        ]
        summary = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in errors
        )
        raise ValidationError(
            f"Invalid {model.__name__}: {summary}",
            entity_type=model.__name__,
            errors=errors,
        ) from e


def dump_entity(entity: BaseModel) -> dict[str, Any]:
    """Serialize a model to its camelCase wire form."""
    return entity.model_dump(mode="json", by_alias=True, exclude_none=True)


def parse_category(value: IssueCategory | str) -> IssueCategory:
    """Parse an issue category, raising the domain ValidationError on unknown values."""
    try:
        return IssueCategory(value)
    except ValueError as e:
        choices = ", ".join(member.value for member in IssueCategory)
        raise ValidationError(
            f"Unknown issue category {value!r}; expected one of: {choices}",
            entity_type="Issue",
        ) from e


def coerce_issue_id(value: int | str) -> int:
    """Issue ids are non-negative integers; numeric text is accepted."""
    if isinstance(value, bool):
        raise ValidationError(f"Issue id must be a number, got {value!r}", entity_type="Issue")
    if isinstance(value, int):
        issue_id = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        issue_id = int(value.strip())
    else:
        raise ValidationError(f"Issue id must be a number, got {value!r}", entity_type="Issue")
    if issue_id < 0:
        raise ValidationError(f"Issue id must not be negative, got {issue_id}", entity_type="Issue")
    return issue_id
