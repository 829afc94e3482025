"""
Adapters layer for fossapi.

Infrastructure implementations; currently the HTTP transport.
"""

from fossapi.adapters.http import FossaClient, encode_segment

__all__ = [
    "FossaClient",
    "encode_segment",
]
