"""
In-memory mock of the FOSSA API for integration testing.
"""

from fossapi.mock.handlers import MockApi, MockResponse
from fossapi.mock.server import MockServer, create_app
from fossapi.mock.state import MockStore

__all__ = [
    "MockApi",
    "MockResponse",
    "MockServer",
    "MockStore",
    "create_app",
]
