"""
JSON renderer for fossapi.

Outputs entities and pages in the API's camelCase wire format, suitable for
piping into jq or other tools.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from fossapi.domain.models import dump_entity
from fossapi.domain.pagination import Page


class JsonRenderer:
    """Renders entities, pages and lists as JSON."""

    def __init__(self, indent: int | None = 2, include_paging: bool = True) -> None:
        """
        Initialize the JSON renderer.

        Args:
            indent: JSON indentation level (None for compact output).
            include_paging: Wrap pages with page/count/total/hasMore.
        """
        self.indent = indent
        self.include_paging = include_paging

    def render(self, value: BaseModel | Page[Any] | list[BaseModel]) -> str:
        """
        Render a value as a JSON string.

        Args:
            value: An entity, a page of entities, or a list of entities.

        Returns:
            JSON string.
        """
        return json.dumps(self.to_data(value), indent=self.indent, default=str)

    def to_data(self, value: BaseModel | Page[Any] | list[BaseModel]) -> Any:
        """Convert a value to JSON-compatible data."""
        if isinstance(value, Page):
            items = [dump_entity(item) for item in value.items]
            if not self.include_paging:
                return items
            return {
                "items": items,
                "page": value.page,
                "count": value.count,
                "total": value.total,
                "hasMore": value.has_more,
            }
        if isinstance(value, list):
            return [dump_entity(item) for item in value]
        return dump_entity(value)


def render_json(value: BaseModel | Page[Any] | list[BaseModel], **kwargs: Any) -> str:
    """
    Convenience function to render a value as JSON.

    Args:
        value: The value to render.
        **kwargs: Options passed to JsonRenderer.
    """
    return JsonRenderer(**kwargs).render(value)
