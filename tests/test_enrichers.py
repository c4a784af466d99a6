"""Unit tests for enrichment steps and the built-in enrichers."""

from __future__ import annotations

import asyncio
import logging
import typing as typ

import pytest

from content_graph.enrichers import (
    Direct,
    Named,
    apply_enrichers,
    as_step,
    default_registry,
    enrich_all,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from content_graph.models import ContentItem


def test_word_count_adds_field_without_mutating(
    item_factory: cabc.Callable[..., ContentItem],
) -> None:
    """wordCount returns a new item and leaves the original untouched."""
    item = item_factory("a", content="a b c", title="Alpha")
    enriched = asyncio.run(apply_enrichers(item, ["wordCount"]))
    assert enriched.get("wordCount") == 3
    assert enriched.get("title") == "Alpha", "original fields must carry over"
    assert item.get("wordCount") is None, "input item must be unchanged"


@pytest.mark.parametrize(
    ("words", "expected"), [(1, "1 min"), (200, "1 min"), (201, "2 min")]
)
def test_read_time_rounds_up(
    item_factory: cabc.Callable[..., ContentItem], words: int, expected: str
) -> None:
    """Reading time is the ceiling of words over 200."""
    item = item_factory("a", content=" ".join(["word"] * words))
    enriched = asyncio.run(apply_enrichers(item, ["readTime"]))
    assert enriched.get("readTime") == expected


def test_custom_reading_speed(item_factory: cabc.Callable[..., ContentItem]) -> None:
    """The registry factory honours a custom words-per-minute rate."""
    item = item_factory("a", content=" ".join(["word"] * 150))
    enriched = asyncio.run(
        apply_enrichers(item, ["readTime"], default_registry(words_per_minute=100))
    )
    assert enriched.get("readTime") == "2 min"


def test_steps_run_in_order(item_factory: cabc.Callable[..., ContentItem]) -> None:
    """Each step receives the previous step's output, awaiting coroutines."""

    async def double(item: ContentItem) -> ContentItem:
        await asyncio.sleep(0)
        return item.with_fields(total=item.get("wordCount") * 2)

    item = item_factory("a", content="x y")
    enriched = asyncio.run(apply_enrichers(item, ["wordCount", double]))
    assert enriched.get("total") == 4


def test_unknown_names_are_skipped_with_warning(
    item_factory: cabc.Callable[..., ContentItem],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Missing registry entries are logged and skipped."""
    item = item_factory("a", content="x")
    with caplog.at_level(logging.WARNING, logger="content_graph.enrichers"):
        enriched = asyncio.run(apply_enrichers(item, ["nope", "wordCount", 42]))
    assert enriched.get("wordCount") == 1
    assert "nope" in caplog.text, "expected a diagnostic naming the missing enricher"


def test_as_step_normalizes_variants() -> None:
    """Strings become Named steps and callables become Direct steps."""
    assert as_step("readTime") == Named("readTime")
    assert isinstance(as_step(len), Direct)
    assert as_step(Named("x")) == Named("x")
    assert as_step(3.5) == 3.5


def test_enrich_all_preserves_input_order(
    item_factory: cabc.Callable[..., ContentItem],
) -> None:
    """Concurrent chains finish in any order but results keep input order."""

    async def slow_first(item: ContentItem) -> ContentItem:
        await asyncio.sleep(0.01 if item.slug == "first" else 0)
        return item.with_fields(done=True)

    items = [item_factory("first"), item_factory("second")]
    results = asyncio.run(enrich_all(items, [slow_first]))
    assert [item.slug for item in results] == ["first", "second"]
    assert all(item.get("done") for item in results)
