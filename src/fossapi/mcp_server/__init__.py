"""
MCP tool server exposing fossapi operations.
"""

from fossapi.mcp_server.params import EntityType, GetParams, ListParams, UpdateParams
from fossapi.mcp_server.server import FossaTools, create_server, run_server

__all__ = [
    "EntityType",
    "FossaTools",
    "GetParams",
    "ListParams",
    "UpdateParams",
    "create_server",
    "run_server",
]
