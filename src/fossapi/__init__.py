"""
fossapi: typed client for the FOSSA vulnerability and license-compliance API

Includes a CLI, an MCP tool server, and an in-memory mock of the API for
integration tests.

Usage:
    # CLI
    $ fossapi list dependencies "custom+1/my-project$main"

    # Python API
    from fossapi import FossaClient, ProjectOps, parse

    with FossaClient.from_env() as client:
        project = ProjectOps(client).get("custom+1/my-project")

    # Mock server
    from fossapi.mock import MockServer

    client = MockServer().client()
"""

__version__ = "0.1.0"

from fossapi.adapters.http import FossaClient
from fossapi.config import FossaConfig
from fossapi.domain.exceptions import FossaError, NotFound, ParseError
from fossapi.domain.locator import (
    DependencyLocator,
    LocatorKind,
    ProjectLocator,
    RevisionLocator,
    parse,
    serialize,
)
from fossapi.domain.models import (
    Dependency,
    Issue,
    IssueCategory,
    Project,
    ProjectUpdateParams,
    Revision,
)
from fossapi.domain.pagination import Page
from fossapi.operations import (
    DependencyOps,
    IssueOps,
    ProjectOps,
    RevisionOps,
    fetch_all,
)

__all__ = [
    # Version
    "__version__",
    # Client
    "FossaClient",
    "FossaConfig",
    # Locators
    "DependencyLocator",
    "LocatorKind",
    "ProjectLocator",
    "RevisionLocator",
    "parse",
    "serialize",
    # Entities
    "Dependency",
    "Issue",
    "IssueCategory",
    "Page",
    "Project",
    "ProjectUpdateParams",
    "Revision",
    # Operations
    "DependencyOps",
    "IssueOps",
    "ProjectOps",
    "RevisionOps",
    "fetch_all",
    # Errors
    "FossaError",
    "NotFound",
    "ParseError",
]
