"""Typed dataclasses describing content_graph configuration."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from content_graph._constants import DOCS_ROUTE_PREFIX, WORDS_PER_MINUTE
from content_graph.enrichers import default_registry

if typ.TYPE_CHECKING:
    from content_graph.enrichers import EnrichFn
    from content_graph.query import SortOrder


class ContentConfigError(ValueError):
    """Raised when the content configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ContentConfig:
    """Defaults applied when querying content and building routes.

    Attributes
    ----------
    collection : str | None
        Collection queried when a command does not name one.
    route_prefix : str
        Leading path segment for documentation routes.
    words_per_minute : int
        Reading speed used by the ``readTime`` enricher.
    default_sort_order : SortOrder
        Direction applied when a sort field is given without a direction.
    enrichers : list[str]
        Named enrichment steps applied to every flat query.
    """

    collection: str | None = None
    route_prefix: str = DOCS_ROUTE_PREFIX
    words_per_minute: int = WORDS_PER_MINUTE
    default_sort_order: SortOrder = "desc"
    enrichers: list[str] = dc.field(default_factory=list)

    def registry(self) -> dict[str, EnrichFn]:
        """Return the enrichment registry honouring ``words_per_minute``."""
        return default_registry(self.words_per_minute)


__all__ = ["ContentConfig", "ContentConfigError"]
