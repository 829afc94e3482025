"""
Output renderers for fossapi.
"""

from fossapi.renderers.json_renderer import JsonRenderer, render_json
from fossapi.renderers.terminal import TerminalRenderer

__all__ = [
    "JsonRenderer",
    "TerminalRenderer",
    "render_json",
]
