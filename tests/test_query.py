"""Unit tests for the chainable content query builder.

The tests exercise stage ordering (filter, sort, limit, enrichment,
projection), stable sorting in both directions, terminal helpers, grouping by
slug prefix, and the ``ContentStore`` handle. Asynchronous terminals are run
with ``asyncio.run`` so no async test plugin is required.
"""

from __future__ import annotations

import asyncio
import typing as typ

from content_graph.enrichers import Direct
from content_graph.models import ContentItem
from content_graph.query import (
    ContentCollection,
    ContentStore,
    group_title,
    sort_items,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def _values(items: cabc.Iterable[ContentItem], field: str = "n") -> list[object]:
    return [item.get(field) for item in items]


def test_sort_ascending(numbered_items: list[ContentItem]) -> None:
    """Ascending order increases the field value."""
    results = asyncio.run(ContentCollection(numbered_items).sort_by("n", "asc").get())
    assert _values(results) == [1, 2, 3]


def test_sort_defaults_to_descending(numbered_items: list[ContentItem]) -> None:
    """Omitting the direction sorts descending."""
    results = asyncio.run(ContentCollection(numbered_items).sort_by("n").get())
    assert _values(results) == [3, 2, 1]


def test_sort_is_stable_for_ties(item_factory: cabc.Callable[..., ContentItem]) -> None:
    """Equal keys keep their original relative order in both directions."""
    items = [item_factory(slug, n=n) for slug, n in (("a", 1), ("b", 0), ("c", 1))]
    ascending = sort_items(items, "n", "asc")
    descending = sort_items(items, "n", "desc")
    assert [item.slug for item in ascending] == ["b", "a", "c"]
    assert [item.slug for item in descending] == ["a", "c", "b"]


def test_later_sort_replaces_earlier(numbered_items: list[ContentItem]) -> None:
    """Only the most recent sort specification applies."""
    builder = ContentCollection(numbered_items).sort_by("slug", "asc").sort_by("n")
    assert _values(asyncio.run(builder.get())) == [3, 2, 1]


def test_absent_and_mixed_values_sort_deterministically(
    item_factory: cabc.Callable[..., ContentItem],
) -> None:
    """Numbers precede strings; items without the field always come last."""
    items = [
        item_factory("missing-1"),
        item_factory("text", n="b"),
        item_factory("number", n=5),
        item_factory("missing-2"),
    ]
    ascending = [item.slug for item in sort_items(items, "n", "asc")]
    descending = [item.slug for item in sort_items(items, "n", "desc")]
    assert ascending == ["number", "text", "missing-1", "missing-2"]
    assert descending == ["text", "number", "missing-1", "missing-2"]


def test_filter_then_limit(item_factory: cabc.Callable[..., ContentItem]) -> None:
    """Filters run before the limit is applied."""
    items = [item_factory(f"i{n}", n=n) for n in (1, 2, 3)]
    builder = ContentCollection(items).where(lambda item: item.get("n") > 1).limit(1)
    results = asyncio.run(builder.get())
    assert _values(results) == [2], f"Expected only n=2, got {_values(results)}"


def test_filters_are_and_combined(numbered_items: list[ContentItem]) -> None:
    """Every predicate must pass for an item to be kept."""
    builder = (
        ContentCollection(numbered_items)
        .where(lambda item: item.get("n") >= 2)
        .where(lambda item: item.get("n") != 3)
    )
    assert _values(asyncio.run(builder.get())) == [2]


def test_limit_replaces_and_clamps(numbered_items: list[ContentItem]) -> None:
    """The latest limit wins and negative limits yield nothing."""
    builder = ContentCollection(numbered_items).limit(1).limit(2)
    assert len(asyncio.run(builder.get())) == 2
    assert asyncio.run(ContentCollection(numbered_items).limit(-4).get()) == []


def test_projection_runs_after_enrichment(
    item_factory: cabc.Callable[..., ContentItem],
) -> None:
    """Projected records can include fields produced by enrichment."""
    items = [item_factory("a", content="one two three", title="A")]
    builder = ContentCollection(items).enrich_with("wordCount")
    builder.fields(["title", "wordCount", "missing"])
    records = asyncio.run(builder.get())
    assert records == [{"title": "A", "wordCount": 3, "missing": None}]


def test_enrichment_sees_only_limited_items(numbered_items: list[ContentItem]) -> None:
    """Enrichment runs after sort and limit, preserving result order."""
    seen: list[object] = []

    async def record(item: ContentItem) -> ContentItem:
        seen.append(item.get("n"))
        await asyncio.sleep(0)
        return item.with_fields(seen=True)

    builder = ContentCollection(numbered_items).sort_by("n", "asc").limit(2)
    results = asyncio.run(builder.enrich_with(record).get())
    assert sorted(seen) == [1, 2], f"Expected enrichment of two items, saw {seen}"
    assert _values(results) == [1, 2]
    assert all(item.get("seen") for item in results)


def test_terminals_do_not_mutate_snapshot(numbered_items: list[ContentItem]) -> None:
    """Repeated terminal calls observe the same source items."""
    builder = ContentCollection(numbered_items)
    numbered_items.clear()
    first = asyncio.run(builder.first())
    assert first is not None and first.get("n") == 3
    assert asyncio.run(builder.count()) == 3, "first() must not leave a limit behind"
    assert len(asyncio.run(builder.all())) == 3


def test_first_returns_none_when_empty() -> None:
    """An empty result yields an explicit absence."""
    assert asyncio.run(ContentCollection([]).first()) is None


def test_count_runs_enrichment(numbered_items: list[ContentItem]) -> None:
    """Counting fully materializes, including enrichment steps."""
    calls: list[str] = []

    def track(item: ContentItem) -> ContentItem:
        calls.append(item.slug)
        return item

    builder = ContentCollection(numbered_items).enrich_with(Direct(track))
    count = asyncio.run(builder.count())
    assert count == 3
    assert len(calls) == 3, f"Expected three enrichment calls, got {calls}"


def test_group_by_first_slug_segment(
    item_factory: cabc.Callable[..., ContentItem],
) -> None:
    """Groups keep first-encountered order and in-group order."""
    items = [item_factory(slug) for slug in ("a/x", "b/z", "a/y", "loose")]
    groups = ContentCollection(items).group()
    assert [group.id for group in groups] == ["a", "b", "default"]
    assert [item.slug for item in groups[0].items] == ["a/x", "a/y"]
    assert groups[2].title == "Default"


def test_group_applies_filter_sort_limit_but_not_projection(
    item_factory: cabc.Callable[..., ContentItem],
) -> None:
    """Grouping ignores enrichment and projection settings."""
    items = [item_factory(f"guide/{n}", n=n) for n in (1, 2, 3)]
    builder = (
        ContentCollection(items)
        .where(lambda item: item.get("n") != 2)
        .sort_by("n", "asc")
        .limit(5)
        .enrich_with("wordCount")
        .fields(["n"])
    )
    groups = builder.group()
    assert len(groups) == 1
    assert all(isinstance(item, ContentItem) for item in groups[0].items)
    assert [item.get("n") for item in groups[0].items] == [1, 3]
    assert all(item.get("wordCount") is None for item in groups[0].items)


def test_group_title_capitalizes_segments() -> None:
    """Hyphenated keys become space-separated capitalized titles."""
    assert group_title("multi-word") == "Multi Word"
    assert group_title("api") == "Api"


def test_store_scopes_collections(item_factory: cabc.Callable[..., ContentItem]) -> None:
    """The store builds queries per collection and groups items by name."""
    posts = ContentItem(id="p", slug="p", collection="posts")
    store = ContentStore([item_factory("d"), posts])
    assert len(store) == 2
    assert asyncio.run(store.collection("posts").count()) == 1
    assert asyncio.run(store.collection("unknown").get()) == []
    assert list(store.collections()) == ["docs", "posts"]


def test_store_files_unnamed_items_under_default() -> None:
    """Items without a collection are reachable through the default name."""
    loose = ContentItem(id="x", slug="x", collection="")
    store = ContentStore([loose])
    assert list(store.collections()) == ["default"]
    assert asyncio.run(store.collection("default").get()) == [loose]
