"""
Domain layer for fossapi.

Locators, entity records, pagination and the error taxonomy, with zero
external dependencies beyond Pydantic.
"""

from fossapi.domain.exceptions import (
    ApiError,
    ConfigError,
    EmptyField,
    FossaError,
    InvalidNamespace,
    LocatorKindMismatch,
    MalformedLocator,
    NotFound,
    OrphanDependency,
    OrphanRevision,
    ParseError,
    RateLimited,
    TransportError,
    Unauthorized,
    ValidationError,
)
from fossapi.domain.locator import (
    DependencyLocator,
    Locator,
    LocatorKind,
    ProjectLocator,
    RevisionLocator,
    parse,
    parse_dependency,
    parse_project,
    parse_revision,
    serialize,
)
from fossapi.domain.models import (
    Dependency,
    Issue,
    IssueCategory,
    IssueSeverity,
    LicenseDetail,
    Project,
    ProjectUpdateParams,
    Revision,
)
from fossapi.domain.pagination import Page

__all__ = [
    # Locators
    "DependencyLocator",
    "Locator",
    "LocatorKind",
    "ProjectLocator",
    "RevisionLocator",
    "parse",
    "parse_dependency",
    "parse_project",
    "parse_revision",
    "serialize",
    # Entities
    "Dependency",
    "Issue",
    "IssueCategory",
    "IssueSeverity",
    "LicenseDetail",
    "Project",
    "ProjectUpdateParams",
    "Revision",
    "Page",
    # Exceptions
    "ApiError",
    "ConfigError",
    "EmptyField",
    "FossaError",
    "InvalidNamespace",
    "LocatorKindMismatch",
    "MalformedLocator",
    "NotFound",
    "OrphanDependency",
    "OrphanRevision",
    "ParseError",
    "RateLimited",
    "TransportError",
    "Unauthorized",
    "ValidationError",
]
