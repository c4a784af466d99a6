"""Typed records describing loaded content items.

A :class:`ContentItem` carries the identity fields every item has (``id``,
``slug``, ``collection`` and the compiled ``content``) plus an open mapping of
additional metadata. Metadata values are restricted to a small closed set of
kinds, and missing fields read back as ``None`` rather than a default.

Examples
--------
>>> from content_graph.models import ContentItem
>>> item = ContentItem(id="guide/setup", slug="guide/setup", collection="docs")
>>> item.get("title") is None
True
>>> item.with_fields(title="Setup").get("title")
'Setup'
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

FieldValue: typ.TypeAlias = str | int | float | bool | list[str] | None

CORE_FIELDS = ("id", "slug", "collection", "content")


@dc.dataclass(frozen=True, slots=True)
class ContentItem:
    """A loaded document or record with compiled content and open metadata.

    Attributes
    ----------
    id : str
        Stable identifier, usually the slug of the source file.
    slug : str
        Forward-slash path without leading or trailing slashes.
    collection : str
        Name of the collection the item belongs to.
    content : str
        Compiled markup for the item body; empty for data-only records.
    fields : Mapping[str, FieldValue]
        Additional named metadata (title, order, tags, ...).
    """

    id: str
    slug: str
    collection: str
    content: str = ""
    fields: typ.Mapping[str, FieldValue] = dc.field(default_factory=dict)

    def get(self, name: str) -> FieldValue:
        """Return the value stored under ``name`` or ``None`` when absent."""
        if name in CORE_FIELDS:
            return getattr(self, name)
        return self.fields.get(name)

    def __getitem__(self, name: str) -> FieldValue:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in CORE_FIELDS or name in self.fields

    @property
    def title(self) -> str | None:
        """Return the ``title`` field when it is a string."""
        value = self.fields.get("title")
        return value if isinstance(value, str) else None

    def with_fields(self, **updates: FieldValue) -> ContentItem:
        """Return a copy carrying every original field plus ``updates``.

        Core attributes named in ``updates`` replace the originals; anything
        else is merged into the metadata mapping. The receiver is unchanged.
        """
        core = {name: updates.pop(name) for name in CORE_FIELDS if name in updates}
        merged = dict(self.fields)
        merged.update(updates)
        return dc.replace(self, fields=merged, **core)

    def to_record(self) -> dict[str, FieldValue]:
        """Return a flat mapping of core attributes followed by metadata."""
        record: dict[str, FieldValue] = {
            name: getattr(self, name) for name in CORE_FIELDS
        }
        for name, value in self.fields.items():
            record.setdefault(name, value)
        return record

    @classmethod
    def from_record(cls, record: typ.Mapping[str, typ.Any]) -> ContentItem:
        """Build an item from a flat mapping such as :meth:`to_record` output."""
        slug = str(record.get("slug") or record.get("id") or "")
        return cls(
            id=str(record.get("id") or slug),
            slug=slug,
            collection=str(record.get("collection") or ""),
            content=str(record.get("content") or ""),
            fields={
                key: value for key, value in record.items() if key not in CORE_FIELDS
            },
        )


__all__ = ["CORE_FIELDS", "ContentItem", "FieldValue"]
