"""
Pytest configuration and shared fixtures for fossapi tests.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from fossapi.adapters.http import FossaClient
from fossapi.domain.models import Dependency, Issue, Project, Revision
from fossapi.mock import MockServer, MockStore
from fossapi.mock import fixtures


# --- Markers ---

def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# --- Fixtures: Sample Entities ---

@pytest.fixture
def sample_project() -> Project:
    """A minimal project."""
    return fixtures.minimal_project("custom+1/demo", "Demo")


@pytest.fixture
def sample_revision() -> Revision:
    """A resolved npm revision of the sample project."""
    return fixtures.resolved_revision("custom+1/demo$abc123", "npm")


@pytest.fixture
def sample_dependencies() -> list[Dependency]:
    """Three npm dependencies at depths 1, 1 and 2."""
    return [
        fixtures.npm_dependency("left-pad", "1.3.0", 1, licenses=["MIT"]),
        fixtures.npm_dependency("chalk", "5.3.0", 1, licenses=["MIT"]),
        fixtures.npm_dependency("ansi-styles", "6.2.1", 2, licenses=["MIT"]),
    ]


@pytest.fixture
def licensing_issues(sample_dependencies: list[Dependency]) -> list[Issue]:
    """One licensing issue per sample dependency."""
    return [
        fixtures.licensing_issue(100 + index, "GPL-3.0", str(dep.locator))
        for index, dep in enumerate(sample_dependencies)
    ]


# --- Fixtures: Mock State ---

@pytest.fixture
def empty_store() -> MockStore:
    """A store with no entities."""
    return MockStore()


@pytest.fixture
def demo_store(
    sample_project: Project,
    sample_revision: Revision,
    sample_dependencies: list[Dependency],
    licensing_issues: list[Issue],
) -> MockStore:
    """
    custom+1/demo with revision $abc123, three dependencies (depths 1, 1, 2)
    and one licensing issue per dependency.
    """
    store = MockStore()
    store.add_project(sample_project)
    store.add_revision(sample_revision)
    store.add_dependencies(sample_revision.locator, sample_dependencies)
    for issue in licensing_issues:
        store.add_issue(issue)
    return store


@pytest.fixture
def default_store() -> MockStore:
    """A store seeded with the default fixture scenario."""
    return fixtures.default_store()


# --- Fixtures: Servers and Clients ---

@pytest.fixture
def mock_server(default_store: MockStore) -> MockServer:
    """In-process mock server over the default scenario."""
    return MockServer(default_store)


@pytest.fixture
def demo_server(demo_store: MockStore) -> MockServer:
    """In-process mock server over the demo scenario."""
    return MockServer(demo_store)


@pytest.fixture
def client(mock_server: MockServer) -> Iterator[FossaClient]:
    """FossaClient served by the default-scenario mock."""
    with mock_server.client() as fossa_client:
        yield fossa_client


@pytest.fixture
def demo_client(demo_server: MockServer) -> Iterator[FossaClient]:
    """FossaClient served by the demo-scenario mock."""
    with demo_server.client() as fossa_client:
        yield fossa_client
