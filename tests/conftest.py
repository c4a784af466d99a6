"""Shared fixtures for content_graph tests."""

from __future__ import annotations

import typing as typ

import pytest

from content_graph.models import ContentItem

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def make_item(slug: str, *, content: str = "", **fields: typ.Any) -> ContentItem:
    """Build a ContentItem whose id mirrors ``slug``."""
    return ContentItem(
        id=slug, slug=slug, collection="docs", content=content, fields=fields
    )


@pytest.fixture
def item_factory() -> cabc.Callable[..., ContentItem]:
    """Return the ``make_item`` helper for building fixture items."""
    return make_item


@pytest.fixture
def numbered_items() -> list[ContentItem]:
    """Return items whose numeric field ``n`` is 3, 1, 2 in source order."""
    return [make_item(f"item-{n}", n=n) for n in (3, 1, 2)]
