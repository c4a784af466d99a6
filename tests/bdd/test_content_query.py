"""Behaviour tests for querying compiled content.

The scenario in ``content_query.feature`` mirrors a blog template asking for
the newest posts with reading times: records are compiled, placed in a
``ContentStore``, and queried through a ``ContentCollection`` chain.

Usage
-----
Run ``pytest tests/bdd/test_content_query.py -v`` after installing the test
extra.
"""

from __future__ import annotations

import asyncio
import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, scenarios, then, when

from content_graph.query import ContentStore
from content_graph.records import build_item

if typ.TYPE_CHECKING:
    from content_graph.models import ContentItem

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "content_query.feature"
)
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given("three compiled posts with different publish dates")
def given_posts(scenario_state: dict[str, object]) -> None:
    """Store a content store holding three posts and one unrelated doc."""
    records = [
        {"slug": "older", "collection": "posts", "body": "Old news.",
         "metadata": {"date": "2024-01-01"}},
        {"slug": "newest", "collection": "posts", "body": "Fresh **news**.",
         "metadata": {"date": "2024-03-01"}},
        {"slug": "middle", "collection": "posts", "body": "Some news.",
         "metadata": {"date": "2024-02-01"}},
        {"slug": "guide/intro", "collection": "docs", "body": "# Intro"},
    ]
    scenario_state["store"] = ContentStore(build_item(record) for record in records)


@when("I query the two newest posts with reading time")
def when_query_posts(scenario_state: dict[str, object]) -> None:
    """Run the query chain and store the materialized results."""
    store = typ.cast("ContentStore", scenario_state["store"])
    builder = store.collection("posts").sort_by("date").limit(2).enrich_with("readTime")
    scenario_state["results"] = asyncio.run(builder.get())


@then("the results are the two newest posts in descending date order")
def then_newest_first(scenario_state: dict[str, object]) -> None:
    """Verify ordering and the limit."""
    results = typ.cast("list[ContentItem]", scenario_state["results"])
    assert [item.slug for item in results] == ["newest", "middle"], (
        f"expected newest then middle, got {[item.slug for item in results]!r}"
    )


@then("each result carries a reading time")
def then_reading_time(scenario_state: dict[str, object]) -> None:
    """Verify the readTime enricher ran on every result."""
    results = typ.cast("list[ContentItem]", scenario_state["results"])
    assert all(item.get("readTime") == "1 min" for item in results), (
        "expected a one-minute reading time on each short post"
    )
