"""Order grouped documents into sections and navigate between them.

Raw sections (typically :class:`~content_graph.query.ContentGroup` values from
``ContentCollection.group()``, or plain mappings shaped like
``{"id", "title", "order" | "meta": {"order"}, "items"}``) are turned into
:class:`Section` objects holding :class:`DocumentItem` entries with derived
slugs. Documents sort intro-first, then by explicit ``order``, then by title;
sections sort by explicit order, then by whether they contain an intro
document, then by title.

:class:`OrderingIndex` wraps the sorted sections with the selection state and
next/previous traversal used by a docs router, and the module-level URL
helpers build and parse ``/documentation/<section>[/<doc>]`` paths.

Example
-------
>>> from content_graph.ordering import OrderingIndex, build_doc_url
>>> index = OrderingIndex(
...     [{"title": "Getting Started", "items": [{"id": "guide/setup", "title": "Setup"}]}]
... )
>>> index.selected_section.slug
'getting-started'
>>> build_doc_url(index.selected_section.slug, index.selected_document.slug)
'/documentation/getting-started/setup'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import functools
import re
import typing as typ
import unicodedata

from ._constants import DOCS_ROUTE_PREFIX, INDEX_DOC_SLUG
from .models import ContentItem

if typ.TYPE_CHECKING:
    from .models import FieldValue

UNSAFE_SLUG_CHARS = re.compile(r"[^\w\s-]", re.ASCII)
WHITESPACE_RUN = re.compile(r"\s+")
HYPHEN_RUN = re.compile(r"-+")


def slugify(text: str) -> str:
    """Return a lowercase, hyphenated, URL-safe form of ``text``.

    Examples
    --------
    >>> slugify("Hello,  World!")
    'hello-world'
    >>> slugify("--Already--slugged--")
    'already-slugged'
    """
    slug = UNSAFE_SLUG_CHARS.sub("", text.lower().strip())
    slug = WHITESPACE_RUN.sub("-", slug)
    return HYPHEN_RUN.sub("-", slug).strip("-")


@dc.dataclass(frozen=True, slots=True)
class DocumentItem:
    """A content item placed inside a section.

    Attributes
    ----------
    item : ContentItem
        Underlying content item, unchanged.
    slug : str
        Display slug derived from the last segment of the item slug or id.
    section_slug : str
        Slug of the owning section.
    is_intro : bool
        Whether this is the section's landing document.
    """

    item: ContentItem
    slug: str
    section_slug: str
    is_intro: bool = False

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def title(self) -> str | None:
        return self.item.title

    @property
    def content(self) -> str:
        return self.item.content

    def get(self, name: str) -> FieldValue:
        """Read a field, answering ``slug`` with the derived display slug."""
        if name == "slug":
            return self.slug
        return self.item.get(name)


@dc.dataclass(slots=True)
class Section:
    """A top-level grouping of documents in the navigation hierarchy."""

    id: str
    title: str
    slug: str
    order: int | float | None = None
    has_intro: bool = False
    documents: list[DocumentItem] = dc.field(default_factory=list)


@dc.dataclass(frozen=True, slots=True)
class DocUrl:
    """Slugs recovered from a documentation path; ``None`` when absent."""

    section_slug: str | None
    doc_slug: str | None


def _raw_value(raw: object, name: str) -> typ.Any:
    """Read ``name`` from a mapping or an attribute-bearing object."""
    if isinstance(raw, cabc.Mapping):
        return raw.get(name)
    return getattr(raw, name, None)


def _numeric(value: object) -> int | float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return value


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""


def _coerce_item(raw: object) -> ContentItem:
    match raw:
        case ContentItem():
            return raw
        case DocumentItem():
            return raw.item
        case cabc.Mapping():
            return ContentItem.from_record(raw)
        case _:
            return ContentItem(id=str(raw), slug=str(raw), collection="")


def _document_slug(item: ContentItem) -> str:
    last_segment = (item.slug or item.id or "").split("/")[-1]
    return slugify(last_segment) or slugify(item.title or "") or "untitled"


def _is_intro(item: ContentItem) -> bool:
    if item.get("intro") is True:
        return True
    tags = item.get("tags")
    return isinstance(tags, list) and "intro" in tags


def _collation_key(text: str) -> tuple[str, str]:
    """Return a key approximating locale-aware, case-insensitive ordering."""
    decomposed = unicodedata.normalize("NFKD", text)
    folded = "".join(char for char in decomposed if not unicodedata.combining(char))
    return (folded.casefold(), text)


def _compare_titles(left: str, right: str) -> int:
    left_key, right_key = _collation_key(left), _collation_key(right)
    return (left_key > right_key) - (left_key < right_key)


def _compare_orders(left: int | float | None, right: int | float | None) -> int | None:
    """Compare explicit orders; ``None`` when neither side defines one."""
    if left is not None and right is not None:
        return (left > right) - (left < right)
    if left is not None:
        return -1
    if right is not None:
        return 1
    return None


def _compare_documents(left: DocumentItem, right: DocumentItem) -> int:
    if left.is_intro != right.is_intro:
        return -1 if left.is_intro else 1
    by_order = _compare_orders(
        _numeric(left.get("order")), _numeric(right.get("order"))
    )
    if by_order is not None:
        return by_order
    return _compare_titles(left.title or "", right.title or "")


def _compare_sections(left: Section, right: Section) -> int:
    by_order = _compare_orders(left.order, right.order)
    if by_order is not None:
        return by_order
    if left.has_intro != right.has_intro:
        return -1 if left.has_intro else 1
    return _compare_titles(left.title, right.title)


def _section_order(raw: object) -> int | float | None:
    order = _numeric(_raw_value(raw, "order"))
    if order is not None:
        return order
    meta = _raw_value(raw, "meta")
    return _numeric(_raw_value(meta, "order")) if meta is not None else None


def _build_section(raw: object) -> Section:
    title = _text(_raw_value(raw, "title"))
    raw_id = _raw_value(raw, "id")
    identifier = str(raw_id) if raw_id not in (None, "") else ""
    slug = slugify(title) or slugify(identifier) or "section"
    documents = [
        DocumentItem(
            item=item,
            slug=_document_slug(item),
            section_slug=slug,
            is_intro=_is_intro(item),
        )
        for item in map(_coerce_item, _raw_value(raw, "items") or [])
    ]
    documents.sort(key=functools.cmp_to_key(_compare_documents))
    return Section(
        id=identifier or slug,
        title=title or "Untitled Section",
        slug=slug,
        order=_section_order(raw),
        has_intro=any(document.is_intro for document in documents),
        documents=documents,
    )


def process_raw_sections(raw_sections: cabc.Iterable[object]) -> list[Section]:
    """Build and sort sections (and their documents) from raw groupings.

    Parameters
    ----------
    raw_sections : Iterable[object]
        Mappings or objects exposing ``id``, ``title``, ``order`` (or
        ``meta.order``) and ``items``. Items may be
        :class:`~content_graph.models.ContentItem` values or flat mappings.

    Returns
    -------
    list[Section]
        Sections in navigation order, each with its documents sorted.
    """
    sections = [_build_section(raw) for raw in raw_sections]
    sections.sort(key=functools.cmp_to_key(_compare_sections))
    return sections


class OrderingIndex:
    """Sorted sections plus the currently selected section and document."""

    def __init__(self, raw_sections: cabc.Iterable[object]) -> None:
        self.sections: list[Section] = process_raw_sections(raw_sections)
        first = self.sections[0] if self.sections else None
        self._selected_section: Section | None = first
        self._selected_document: DocumentItem | None = (
            first.documents[0] if first and first.documents else None
        )

    @property
    def selected_section(self) -> Section | None:
        return self._selected_section

    @property
    def selected_document(self) -> DocumentItem | None:
        return self._selected_document

    def select_section(self, section: Section) -> None:
        """Select ``section`` and its first document (if any)."""
        self._selected_section = section
        self._selected_document = section.documents[0] if section.documents else None

    def select_document(self, document: DocumentItem) -> None:
        """Select ``document`` and, when its section is known, that section."""
        self._selected_document = document
        section = self.get_section_by_slug(document.section_slug)
        if section is not None:
            self._selected_section = section

    def get_section_by_slug(self, section_slug: str) -> Section | None:
        return next((s for s in self.sections if s.slug == section_slug), None)

    def get_document_by_slug(
        self, section_slug: str, doc_slug: str
    ) -> DocumentItem | None:
        section = self.get_section_by_slug(section_slug)
        if section is None:
            return None
        return next((d for d in section.documents if d.slug == doc_slug), None)

    def _locate(self, document: DocumentItem) -> tuple[int, int] | None:
        """Return ``(section index, document index)`` for ``document``."""
        for section_index, section in enumerate(self.sections):
            if section.slug != document.section_slug:
                continue
            for doc_index, candidate in enumerate(section.documents):
                if candidate.slug == document.slug:
                    return section_index, doc_index
            return None
        return None

    def get_next_document(self, document: DocumentItem) -> DocumentItem | None:
        """Return the following document, crossing into the next section."""
        position = self._locate(document)
        if position is None:
            return None
        section_index, doc_index = position
        documents = self.sections[section_index].documents
        if doc_index + 1 < len(documents):
            return documents[doc_index + 1]
        if section_index + 1 < len(self.sections):
            following = self.sections[section_index + 1].documents
            return following[0] if following else None
        return None

    def get_previous_document(self, document: DocumentItem) -> DocumentItem | None:
        """Return the preceding document, crossing into the previous section."""
        position = self._locate(document)
        if position is None:
            return None
        section_index, doc_index = position
        if doc_index > 0:
            return self.sections[section_index].documents[doc_index - 1]
        if section_index > 0:
            preceding = self.sections[section_index - 1].documents
            return preceding[-1] if preceding else None
        return None


def create_ordering_index(raw_sections: cabc.Iterable[object]) -> OrderingIndex:
    """Return a new :class:`OrderingIndex` for ``raw_sections``."""
    return OrderingIndex(raw_sections)


def build_doc_url(
    section_slug: str, doc_slug: str | None = None, *, prefix: str = DOCS_ROUTE_PREFIX
) -> str:
    """Return the route for a section, or for a document inside it.

    ``doc_slug`` values of ``None``, ``""`` or ``"index"`` address the section
    landing route.
    """
    if not doc_slug or doc_slug == INDEX_DOC_SLUG:
        return f"{prefix}/{section_slug}"
    return f"{prefix}/{section_slug}/{doc_slug}"


def parse_doc_url(path: str, *, prefix: str = DOCS_ROUTE_PREFIX) -> DocUrl:
    """Recover section and document slugs from a documentation route."""
    match = re.fullmatch(rf"{re.escape(prefix)}/([^/]+)(?:/([^/]+))?", path)
    if not match:
        return DocUrl(section_slug=None, doc_slug=None)
    return DocUrl(section_slug=match.group(1), doc_slug=match.group(2))


__all__ = [
    "DocUrl",
    "DocumentItem",
    "OrderingIndex",
    "Section",
    "build_doc_url",
    "create_ordering_index",
    "parse_doc_url",
    "process_raw_sections",
    "slugify",
]
