"""Load content configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ

from ruamel.yaml import YAML

from .models import ContentConfig, ContentConfigError

if typ.TYPE_CHECKING:
    from pathlib import Path

SORT_ORDERS = ("asc", "desc")


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _route_prefix(value: object | None, default: str) -> str:
    text = _optional_str(value)
    if text is None:
        return default
    return "/" + text.strip("/")


def _words_per_minute(value: object | None, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        msg = f"'words_per_minute' must be a positive integer, got {value!r}."
        raise ContentConfigError(msg)
    return value


def _sort_order(value: object | None, default: str) -> str:
    text = _optional_str(value)
    if text is None:
        return default
    order = text.lower()
    if order not in SORT_ORDERS:
        msg = f"'default_sort_order' must be one of {SORT_ORDERS}, got {value!r}."
        raise ContentConfigError(msg)
    return order


def _enrichers(value: object | None) -> list[str]:
    match value:
        case None:
            return []
        case str():
            return [segment for segment in value.split() if segment]
        case list():
            return [str(segment).strip() for segment in value if str(segment).strip()]
        case _:
            msg = "'enrichers' must be a list of enricher names."
            raise ContentConfigError(msg)


def load_content_config(path: Path) -> ContentConfig:
    """Load the YAML file describing query and routing defaults.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``content.yaml``).

    Returns
    -------
    ContentConfig
        Parsed configuration; keys missing from the file keep their defaults.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    ContentConfigError
        If a value is present but invalid (for example, a non-positive
        reading speed or an unknown sort order).

    Examples
    --------
    >>> from pathlib import Path
    >>> from content_graph.config import load_content_config
    >>> config = load_content_config(Path("content.yaml"))  # doctest: +SKIP
    >>> config.route_prefix  # doctest: +SKIP
    '/documentation'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    defaults = ContentConfig()

    return ContentConfig(
        collection=_optional_str(raw.get("collection")),
        route_prefix=_route_prefix(raw.get("route_prefix"), defaults.route_prefix),
        words_per_minute=_words_per_minute(
            raw.get("words_per_minute"), defaults.words_per_minute
        ),
        default_sort_order=typ.cast(
            "typ.Literal['asc', 'desc']",
            _sort_order(raw.get("default_sort_order"), defaults.default_sort_order),
        ),
        enrichers=_enrichers(raw.get("enrichers")),
    )


__all__ = ["load_content_config"]
