"""Turn loader hand-off records into compiled :class:`ContentItem` values.

File discovery and front-matter parsing belong to an external loader. What
arrives here is a list of flat records, each carrying ``id``/``slug``/
``collection``, the raw markdown ``body`` (or precompiled ``content``), a
``metadata`` mapping, and optionally further top-level fields. This module
compiles bodies with :func:`~content_graph.markdown_compiler.markdown_to_html`
and normalizes field values to the kinds items support.

Examples
--------
>>> from content_graph.records import build_item
>>> item = build_item(
...     {"slug": "/guide/setup.md", "collection": "docs", "body": "# Setup"}
... )
>>> (item.slug, item.content)
('guide/setup', '<h1>Setup</h1>')
"""

from __future__ import annotations

import collections.abc as cabc
import datetime as dt
import logging
import re
import typing as typ

import msgspec.json as msgspec_json
from ruamel.yaml import YAML

from ._constants import DEFAULT_COLLECTION
from .markdown_compiler import markdown_to_html
from .models import CORE_FIELDS, ContentItem

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .models import FieldValue

logger = logging.getLogger(__name__)

SOURCE_SUFFIX_PATTERN = re.compile(r"\.(md|mdx|json)$")
RESERVED_KEYS = frozenset({*CORE_FIELDS, "body", "metadata"})


def normalize_slug(value: str) -> str:
    """Return ``value`` as a forward-slash path without edge slashes or suffix."""
    slug = value.replace("\\", "/").strip().strip("/")
    return SOURCE_SUFFIX_PATTERN.sub("", slug)


def _field_value(value: object) -> FieldValue:
    """Coerce a decoded metadata value into a supported field kind."""
    match value:
        case None | bool() | int() | float() | str():
            return value
        case dt.date() | dt.datetime():
            return value.isoformat()
        case list() | tuple():
            return [str(entry) for entry in value]
        case _:
            return str(value)


def _metadata(record: typ.Mapping[str, typ.Any], identifier: str) -> dict[str, typ.Any]:
    metadata = record.get("metadata")
    if metadata is None:
        return {}
    if not isinstance(metadata, cabc.Mapping):
        logger.warning(
            "Metadata for %r is not a mapping; continuing without it.", identifier
        )
        return {}
    return dict(metadata)


def build_item(
    record: typ.Mapping[str, typ.Any], *, compile_body: bool = True
) -> ContentItem:
    """Build a content item from a loader record.

    Parameters
    ----------
    record : Mapping[str, Any]
        Loader output for one source file.
    compile_body : bool, optional
        Compile a markdown ``body`` into ``content``. When ``False`` (or when
        no body is present) the record's ``content`` is used verbatim.

    Returns
    -------
    ContentItem
        Item whose fields are the record's extra top-level keys overlaid with
        its ``metadata`` mapping.
    """
    slug = normalize_slug(str(record.get("slug") or record.get("id") or ""))
    identifier = str(record.get("id") or slug)
    body = record.get("body")
    if compile_body and isinstance(body, str):
        content = markdown_to_html(body.strip())
    else:
        content = str(record.get("content") or "")

    raw_fields = {
        key: value for key, value in record.items() if key not in RESERVED_KEYS
    }
    raw_fields.update(_metadata(record, identifier))
    fields = {
        str(key): _field_value(value)
        for key, value in raw_fields.items()
        if key not in CORE_FIELDS
    }
    return ContentItem(
        id=identifier,
        slug=slug,
        collection=str(record.get("collection") or DEFAULT_COLLECTION),
        content=content,
        fields=fields,
    )


def _read_payload(path: Path) -> object:
    if path.suffix.lower() == ".json":
        return msgspec_json.decode(path.read_bytes())
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        return loader.load(handle)


def load_records(path: Path, *, compile_body: bool = True) -> list[ContentItem]:
    """Load a YAML or JSON record list written by an external loader.

    Parameters
    ----------
    path : Path
        File holding either a list of records or a mapping with an ``items``
        list. ``.json`` files are decoded with msgspec; anything else is read
        as YAML 1.2.
    compile_body : bool, optional
        Forwarded to :func:`build_item`.

    Returns
    -------
    list[ContentItem]
        Items in file order. Entries that are not mappings are skipped with a
        warning.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    TypeError
        If the top-level structure is neither a list nor a mapping with an
        ``items`` list.
    """
    if not path.exists():
        msg = f"Records file '{path}' not found."
        raise FileNotFoundError(msg)
    payload = _read_payload(path)
    if isinstance(payload, cabc.Mapping):
        payload = payload.get("items")
    if not isinstance(payload, list):
        msg = "Records file must contain a list of records or an 'items' list."
        raise TypeError(msg)

    items: list[ContentItem] = []
    for position, record in enumerate(payload):
        if not isinstance(record, cabc.Mapping):
            logger.warning("Skipping record %d in %s: not a mapping.", position, path)
            continue
        items.append(build_item(record, compile_body=compile_body))
    return items


__all__ = ["build_item", "load_records", "normalize_slug"]
