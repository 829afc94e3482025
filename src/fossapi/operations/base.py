"""
Entity operation capabilities.

Get, List and Update are three independent protocols. Each entity's
operation set implements only the capabilities the API supports for it, so
asking for an unsupported operation is a type error rather than a runtime
check. Generic helpers (``get_entity``, ``iter_pages``, ``fetch_all``) work
against any implementation of the matching protocol.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from fossapi.domain.models import load_entity
from fossapi.domain.pagination import (
    DEFAULT_PAGE_SIZE,
    FETCH_ALL_PAGE_SIZE,
    Page,
    clamp_page,
    clamp_page_size,
)

if TYPE_CHECKING:
    from fossapi.adapters.http import FossaClient

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
IdT_contra = TypeVar("IdT_contra", contravariant=True)
QueryT_contra = TypeVar("QueryT_contra", contravariant=True)
ParamsT_contra = TypeVar("ParamsT_contra", contravariant=True)
ModelT = TypeVar("ModelT", bound=BaseModel)
IdT = TypeVar("IdT")
QueryT = TypeVar("QueryT")

# Upper bound on pages walked by fetch_all.
MAX_PAGES = 1000


@runtime_checkable
class Gettable(Protocol[T_co, IdT_contra]):
    """Fetch one entity by its identifier."""

    def get(self, id: IdT_contra) -> T_co:
        """
        Fetch a single entity.

        Raises:
            ParseError: If the id is not a well-formed locator.
            LocatorKindMismatch: If the id is a locator of another kind.
            NotFound: If the entity does not exist.
        """
        ...


@runtime_checkable
class Listable(Protocol[T_co, QueryT_contra]):
    """Fetch one page of entities matching a query."""

    def list_page(
        self, query: QueryT_contra, page: int = 0, count: int = DEFAULT_PAGE_SIZE
    ) -> Page[T_co]:
        """
        Fetch a page. ``count`` is clamped to ``[1, MAX_PAGE_SIZE]``.
        """
        ...


@runtime_checkable
class Updatable(Protocol[T_co, IdT_contra, ParamsT_contra]):
    """Apply a partial update to one entity."""

    def update(self, id: IdT_contra, params: ParamsT_contra) -> T_co:
        """
        Update only the fields set in ``params`` and return the result.

        Raises:
            NotFound: If the entity does not exist. Updates never create.
        """
        ...


class BaseOps:
    """
    Shared plumbing for per-entity operation sets.

    Subclasses set ``entity_name`` and implement whichever of ``get``,
    ``list_page`` and ``update`` the API offers for the entity.
    """

    entity_name: ClassVar[str] = ""

    def __init__(self, client: FossaClient) -> None:
        self.client = client

    def _load(self, model: type[ModelT], data: Any) -> ModelT:
        return load_entity(model, data)

    def _page(
        self,
        model: type[ModelT],
        payload: Any,
        key: str,
        page: int,
        count: int,
        total_key: str = "total",
    ) -> Page[ModelT]:
        """Build a page from a list response of the form ``{key: [...], total: n}``."""
        if isinstance(payload, list):
            raw_items, total, has_more = payload, None, None
        elif isinstance(payload, dict):
            raw_items = payload.get(key) or []
            total = payload.get(total_key)
            has_more = payload.get("hasMore")
        else:
            raw_items, total, has_more = [], None, None
        items = [self._load(model, item) for item in raw_items]
        return Page[model].build(  # type: ignore[valid-type]
            items,
            page=page,
            count=count,
            total=total if isinstance(total, int) else None,
            has_more=has_more if isinstance(has_more, bool) else None,
        )

    @staticmethod
    def _page_params(page: int, count: int) -> tuple[int, int, dict[str, int]]:
        page, count = clamp_page(page), clamp_page_size(count)
        return page, count, {"page": page, "count": count}

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.client!r}>"


def get_entity(ops: Gettable[T, IdT], id: IdT) -> T:
    """Fetch one entity through any Get implementation."""
    return ops.get(id)


def iter_pages(
    ops: Listable[T, QueryT],
    query: QueryT,
    page_size: int = FETCH_ALL_PAGE_SIZE,
    max_pages: int = MAX_PAGES,
) -> Iterator[Page[T]]:
    """
    Yield pages from 0 until the server reports no more.

    Args:
        ops: Any List implementation.
        query: The list query.
        page_size: Items per page (clamped).
        max_pages: Stop after this many pages.

    Yields:
        Each page in order.
    """
    for page_number in range(max_pages):
        page = ops.list_page(query, page=page_number, count=page_size)
        yield page
        if not page.has_more or not page.items:
            return
    logger.warning("Stopped after %d pages; results may be incomplete", max_pages)


def fetch_all(
    ops: Listable[T, QueryT],
    query: QueryT,
    page_size: int = FETCH_ALL_PAGE_SIZE,
    max_pages: int = MAX_PAGES,
) -> list[T]:
    """Collect every item across all pages of a list query."""
    items: list[T] = []
    for page in iter_pages(ops, query, page_size=page_size, max_pages=max_pages):
        items.extend(page.items)
    return items
