"""Enrichment steps that derive extra fields on content items.

An enrichment step is either a :class:`Named` reference resolved against a
registry or a :class:`Direct` transform. Transforms receive a
:class:`~content_graph.models.ContentItem` and return a new item, either
directly or as an awaitable. Steps for one item always run in order; chains
for different items run concurrently under :func:`enrich_all`.

Examples
--------
>>> import asyncio
>>> from content_graph.enrichers import apply_enrichers, default_registry
>>> from content_graph.models import ContentItem
>>> item = ContentItem(id="a", slug="a", collection="docs", content="a b c")
>>> enriched = asyncio.run(apply_enrichers(item, ["wordCount"], default_registry()))
>>> enriched.get("wordCount")
3
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses as dc
import inspect
import logging
import math
import typing as typ

from ._constants import WORDS_PER_MINUTE
from .models import ContentItem

logger = logging.getLogger(__name__)

EnrichFn: typ.TypeAlias = cabc.Callable[
    [ContentItem], ContentItem | cabc.Awaitable[ContentItem]
]
EnricherRegistry: typ.TypeAlias = cabc.Mapping[str, EnrichFn]


@dc.dataclass(frozen=True, slots=True)
class Named:
    """Reference to an enricher registered under ``name``."""

    name: str


@dc.dataclass(frozen=True, slots=True)
class Direct:
    """Enrichment step wrapping a transform callable."""

    transform: EnrichFn


EnrichmentStep: typ.TypeAlias = Named | Direct


def as_step(value: object) -> object:
    """Normalize strings and callables into :class:`Named`/:class:`Direct` steps.

    Values that are already steps are returned unchanged. Anything else is
    passed through as-is; :func:`apply_enrichers` ignores unknown step kinds.
    """
    match value:
        case Named() | Direct():
            return value
        case str():
            return Named(value)
        case _ if callable(value):
            return Direct(typ.cast("EnrichFn", value))
        case _:
            return value


def _word_count(item: ContentItem) -> int:
    return len((item.content or "").split())


def read_time_enricher(words_per_minute: int = WORDS_PER_MINUTE) -> EnrichFn:
    """Return a ``readTime`` enricher using ``words_per_minute`` as reading speed."""

    def read_time(item: ContentItem) -> ContentItem:
        minutes = math.ceil(_word_count(item) / words_per_minute)
        return item.with_fields(readTime=f"{minutes} min")

    return read_time


def word_count(item: ContentItem) -> ContentItem:
    """Attach the whitespace-separated word count as ``wordCount``."""
    return item.with_fields(wordCount=_word_count(item))


BUILTIN_ENRICHERS: dict[str, EnrichFn] = {
    "readTime": read_time_enricher(),
    "wordCount": word_count,
}


def default_registry(words_per_minute: int = WORDS_PER_MINUTE) -> dict[str, EnrichFn]:
    """Return a fresh registry holding the built-in enrichers."""
    registry = dict(BUILTIN_ENRICHERS)
    if words_per_minute != WORDS_PER_MINUTE:
        registry["readTime"] = read_time_enricher(words_per_minute)
    return registry


async def apply_enrichers(
    item: ContentItem,
    steps: cabc.Iterable[object],
    registry: EnricherRegistry | None = None,
) -> ContentItem:
    """Run ``steps`` over ``item`` strictly in order.

    Parameters
    ----------
    item : ContentItem
        Item fed to the first step; it is never modified.
    steps : Iterable[object]
        Step sequence; strings and callables are normalized with
        :func:`as_step`.
    registry : Mapping[str, EnrichFn], optional
        Lookup table for :class:`Named` steps; defaults to the built-ins.

    Returns
    -------
    ContentItem
        Output of the last applied step, or ``item`` when none applied.

    Notes
    -----
    Named steps missing from the registry are skipped with a warning.
    Unrecognized step kinds are ignored.
    """
    lookup = BUILTIN_ENRICHERS if registry is None else registry
    enriched = item
    for raw_step in steps:
        match as_step(raw_step):
            case Named(name=name):
                transform = lookup.get(name)
                if transform is None:
                    logger.warning("Enricher %r not found; skipping.", name)
                    continue
            case Direct(transform=transform):
                pass
            case _:
                continue
        result = transform(enriched)
        if inspect.isawaitable(result):
            result = await result
        enriched = result
    return enriched


async def enrich_all(
    items: cabc.Sequence[ContentItem],
    steps: cabc.Sequence[object],
    registry: EnricherRegistry | None = None,
) -> list[ContentItem]:
    """Enrich every item concurrently, returning results in input order."""
    if not steps:
        return list(items)
    return list(
        await asyncio.gather(
            *(apply_enrichers(item, steps, registry) for item in items)
        )
    )


__all__ = [
    "BUILTIN_ENRICHERS",
    "Direct",
    "EnrichFn",
    "EnricherRegistry",
    "EnrichmentStep",
    "Named",
    "apply_enrichers",
    "as_step",
    "default_registry",
    "enrich_all",
    "read_time_enricher",
    "word_count",
]
