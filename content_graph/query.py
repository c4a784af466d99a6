"""Lazy, chainable queries over a fixed sequence of content items.

:class:`ContentCollection` snapshots its source items at construction and
accumulates a query specification through chaining calls (``where``,
``sort_by``, ``limit``, ``fields``, ``enrich_with``). Nothing is evaluated
until a terminal call. The flat terminals (:meth:`~ContentCollection.get`,
``all``, ``first``, ``count``) are coroutines because enrichment steps may
suspend; :meth:`~ContentCollection.group` is synchronous and never enriches
or projects.

:class:`ContentStore` is the explicit handle callers pass around to build
per-collection queries over everything a loader produced.

Typical usage:

>>> import asyncio
>>> from content_graph.models import ContentItem
>>> from content_graph.query import ContentCollection
>>> items = [
...     ContentItem(id=str(n), slug=str(n), collection="docs", fields={"n": n})
...     for n in (3, 1, 2)
... ]
>>> results = asyncio.run(ContentCollection(items).sort_by("n", "asc").get())
>>> [item.get("n") for item in results]
[1, 2, 3]
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import typing as typ

from ._constants import DEFAULT_COLLECTION, DEFAULT_GROUP
from .enrichers import EnricherRegistry, as_step, enrich_all

if typ.TYPE_CHECKING:
    from .models import ContentItem, FieldValue

logger = logging.getLogger(__name__)

SortOrder: typ.TypeAlias = typ.Literal["asc", "desc"]
Predicate: typ.TypeAlias = "cabc.Callable[[ContentItem], bool]"
ProjectedRecord: typ.TypeAlias = "dict[str, FieldValue]"


@dc.dataclass(slots=True)
class ContentGroup:
    """Items sharing the first slug segment, as produced by ``group()``.

    Attributes
    ----------
    id : str
        First ``/``-segment of the member slugs, or ``"default"``.
    title : str
        Display title derived from ``id`` (``"multi-word"`` -> ``"Multi Word"``).
    items : list[ContentItem]
        Members in query order.
    """

    id: str
    title: str
    items: list[ContentItem] = dc.field(default_factory=list)


def group_title(key: str) -> str:
    """Return the display title for a group key."""
    return " ".join(segment[:1].upper() + segment[1:] for segment in key.split("-"))


def _group_key(slug: str) -> str:
    if "/" not in slug:
        return DEFAULT_GROUP
    return slug.split("/", 1)[0]


def _sort_key(value: FieldValue) -> tuple[int, typ.Any]:
    """Rank values so mixed kinds still compare: numbers, strings, lists."""
    match value:
        case bool() | int() | float():
            return (0, value)
        case str():
            return (1, value)
        case list() | tuple():
            return (2, tuple(str(entry) for entry in value))
        case _:
            return (3, repr(value))


def sort_items(
    items: cabc.Iterable[ContentItem], field: str, order: SortOrder = "desc"
) -> list[ContentItem]:
    """Stable-sort ``items`` by ``field``; items lacking the field go last."""
    present: list[ContentItem] = []
    absent: list[ContentItem] = []
    for item in items:
        (absent if item.get(field) is None else present).append(item)
    present.sort(key=lambda item: _sort_key(item.get(field)), reverse=order != "asc")
    return present + absent


class ContentCollection:
    """Chainable query builder over an immutable item snapshot."""

    def __init__(
        self,
        items: cabc.Iterable[ContentItem],
        *,
        registry: EnricherRegistry | None = None,
    ) -> None:
        """Snapshot ``items`` and start with an empty query.

        Parameters
        ----------
        items : Iterable[ContentItem]
            Source items; later changes to the iterable are not observed.
        registry : Mapping[str, EnrichFn], optional
            Registry used to resolve named enrichment steps. Defaults to the
            built-in enrichers.
        """
        self._items: tuple[ContentItem, ...] = tuple(items)
        self.registry = registry
        self._filters: list[Predicate] = []
        self._sort: tuple[str, SortOrder] | None = None
        self._limit: int | None = None
        self._fields: list[str] | None = None
        self._steps: list[object] = []

    def where(self, predicate: Predicate) -> ContentCollection:
        """Keep only items for which ``predicate`` (and every earlier one) holds."""
        self._filters.append(predicate)
        return self

    def sort_by(self, field: str, order: SortOrder = "desc") -> ContentCollection:
        """Sort by ``field``, replacing any previous sort specification."""
        self._sort = (field, order)
        return self

    def limit(self, count: int) -> ContentCollection:
        """Cap the number of results, replacing any previous limit."""
        self._limit = max(0, count)
        return self

    def fields(self, names: cabc.Iterable[str]) -> ContentCollection:
        """Project results onto ``names``, replacing any previous projection."""
        self._fields = list(names)
        return self

    def enrich_with(self, step: object) -> ContentCollection:
        """Append an enrichment step (registry name, callable, or step variant)."""
        self._steps.append(as_step(step))
        return self

    def _select(self, limit: int | None) -> list[ContentItem]:
        """Apply filter, sort and limit to the snapshot."""
        results = [
            item
            for item in self._items
            if all(predicate(item) for predicate in self._filters)
        ]
        if self._sort is not None:
            field, order = self._sort
            results = sort_items(results, field, order)
        if limit is not None:
            results = results[:limit]
        return results

    async def _materialize(
        self, limit: int | None
    ) -> list[ContentItem] | list[ProjectedRecord]:
        results = await enrich_all(self._select(limit), self._steps, self.registry)
        if self._fields is None:
            return results
        return [{name: item.get(name) for name in self._fields} for item in results]

    async def get(self) -> list[ContentItem] | list[ProjectedRecord]:
        """Evaluate the query: filter, sort, limit, enrich, then project.

        Returns
        -------
        list[ContentItem] | list[dict[str, FieldValue]]
            Items in query order, or projected records when :meth:`fields`
            was called. Absent projected fields map to ``None``.
        """
        return await self._materialize(self._limit)

    async def all(self) -> list[ContentItem] | list[ProjectedRecord]:
        """Alias of :meth:`get`."""
        return await self.get()

    async def first(self) -> ContentItem | ProjectedRecord | None:
        """Return the first result of the query, or ``None`` when it is empty."""
        results = await self._materialize(1)
        return results[0] if results else None

    async def count(self) -> int:
        """Fully evaluate the query and return the number of results."""
        return len(await self.get())

    def group(self) -> list[ContentGroup]:
        """Partition filtered, sorted and limited items by first slug segment.

        Groups appear in first-encountered order and keep query order within
        each group. Enrichment and projection are never applied here.
        """
        groups: dict[str, ContentGroup] = {}
        for item in self._select(self._limit):
            key = _group_key(item.slug)
            if key not in groups:
                groups[key] = ContentGroup(id=key, title=group_title(key))
            groups[key].items.append(item)
        return list(groups.values())


class ContentStore:
    """Explicit handle over every loaded item, used to start queries."""

    def __init__(
        self,
        items: cabc.Iterable[ContentItem],
        *,
        registry: EnricherRegistry | None = None,
    ) -> None:
        self._items: tuple[ContentItem, ...] = tuple(items)
        self.registry = registry

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> cabc.Iterator[ContentItem]:
        return iter(self._items)

    def collection(self, name: str) -> ContentCollection:
        """Return a new query over the items of collection ``name``."""
        members = [
            item
            for item in self._items
            if (item.collection or DEFAULT_COLLECTION) == name
        ]
        if not members:
            logger.debug("Collection %r has no items.", name)
        return ContentCollection(members, registry=self.registry)

    def collections(self) -> dict[str, list[ContentItem]]:
        """Group every item by collection name, in first-encountered order."""
        grouped: dict[str, list[ContentItem]] = {}
        for item in self._items:
            grouped.setdefault(item.collection or DEFAULT_COLLECTION, []).append(item)
        return grouped


__all__ = [
    "ContentCollection",
    "ContentGroup",
    "ContentStore",
    "Predicate",
    "ProjectedRecord",
    "SortOrder",
    "group_title",
    "sort_items",
]
