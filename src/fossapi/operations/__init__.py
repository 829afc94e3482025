"""
Entity operations for fossapi.

Each entity has an operation set that implements only the capabilities the
API supports for it:

    ProjectOps      Get, List, Update
    RevisionOps     Get, List
    DependencyOps   List
    IssueOps        Get, List
"""

from fossapi.operations.base import (
    MAX_PAGES,
    BaseOps,
    Gettable,
    Listable,
    Updatable,
    fetch_all,
    get_entity,
    iter_pages,
)
from fossapi.operations.dependencies import DependencyOps
from fossapi.operations.issues import IssueOps
from fossapi.operations.projects import ProjectOps
from fossapi.operations.revisions import RevisionOps

__all__ = [
    "MAX_PAGES",
    "BaseOps",
    "DependencyOps",
    "Gettable",
    "IssueOps",
    "Listable",
    "ProjectOps",
    "RevisionOps",
    "Updatable",
    "fetch_all",
    "get_entity",
    "iter_pages",
]
