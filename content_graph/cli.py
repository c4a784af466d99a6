"""Cyclopts CLI entrypoint for compiling, querying and ordering content.

The ``content`` console script defined here compiles markdown files into
markup, runs queries over a loader's record file, prints the ordered
documentation navigation tree, and builds or parses documentation routes.
Options fall back to ``CONTENT_*`` environment variables.

Examples
--------
Compile a single markdown file:

>>> from content_graph.cli import app
>>> app(["compile", "docs/intro.md"])  # doctest: +SKIP

Query the three most recent posts with reading times:

>>> app(
...     [
...         "query", "records.yaml", "--collection", "posts",
...         "--sort-by", "date", "--limit", "3", "--enrich", "readTime",
...     ]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import asyncio
import logging
import typing as typ
from pathlib import Path

import cyclopts
import msgspec.json as msgspec_json
from cyclopts import App, Parameter

from .config import ContentConfig, load_content_config
from .markdown_compiler import markdown_to_html
from .models import ContentItem
from .ordering import OrderingIndex, build_doc_url, parse_doc_url
from .query import ContentCollection, ContentStore
from .records import load_records

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import FieldValue

DEFAULT_CONFIG = Path("content.yaml")

app = App(name="content", config=cyclopts.config.Env("CONTENT_", command=False))  # type: ignore[unknown-argument]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(path: Path | None) -> ContentConfig:
    """Load ``path``, or the default config file when present, else defaults."""
    if path is not None:
        return load_content_config(path)
    if DEFAULT_CONFIG.exists():
        return load_content_config(DEFAULT_CONFIG)
    return ContentConfig()


def _coerce_literal(text: str) -> FieldValue:
    """Interpret a command-line literal as a boolean, number, or string."""
    lowered = text.strip().lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            continue
    return text


def _field_predicate(expression: str) -> cabc.Callable[[ContentItem], bool]:
    """Build an equality (or list membership) predicate from ``field=value``."""
    field, separator, literal = expression.partition("=")
    if not separator or not field.strip():
        msg = f"Filters must look like 'field=value', got {expression!r}."
        raise ValueError(msg)
    name = field.strip()
    expected = _coerce_literal(literal)

    def predicate(item: ContentItem) -> bool:
        actual = item.get(name)
        if isinstance(actual, list):
            return str(expected) in actual
        return actual == expected

    return predicate


def _open_collection(
    records: Path, collection: str | None, config: ContentConfig
) -> ContentCollection:
    store = ContentStore(load_records(records), registry=config.registry())
    name = collection or config.collection
    if name is None:
        return ContentCollection(store, registry=store.registry)
    return store.collection(name)


def _to_record(value: ContentItem | dict[str, FieldValue]) -> dict[str, FieldValue]:
    return value.to_record() if isinstance(value, ContentItem) else value


@app.command(name="compile", help="Compile a markdown file and print its markup.")
def compile_markdown_file(
    path: typ.Annotated[Path, Parameter(help="Markdown file to compile")],
) -> None:
    """Print the compiled markup for ``path``.

    Parameters
    ----------
    path : Path
        Markdown body to compile. Front matter is not stripped; pass bodies
        extracted by the loader.
    """
    print(markdown_to_html(path.read_text(encoding="utf-8")))


@app.command(help="Query a record file and print the results as JSON.")
def query(
    records: typ.Annotated[Path, Parameter(help="YAML or JSON record file")],
    *,
    collection: typ.Annotated[
        str | None, Parameter(help="Collection to query", env_var="CONTENT_COLLECTION")
    ] = None,
    where: typ.Annotated[
        list[str] | None, Parameter(help="Filter of the form field=value")
    ] = None,
    sort_by: typ.Annotated[str | None, Parameter(help="Field to sort by")] = None,
    order: typ.Annotated[
        typ.Literal["asc", "desc"] | None, Parameter(help="Sort direction")
    ] = None,
    limit: typ.Annotated[int | None, Parameter(help="Maximum results")] = None,
    fields: typ.Annotated[
        list[str] | None, Parameter(help="Fields to keep in the output")
    ] = None,
    enrich: typ.Annotated[
        list[str] | None, Parameter(help="Named enrichers to apply")
    ] = None,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to content config", env_var="CONTENT_CONFIG")
    ] = None,
    verbose: bool = False,
) -> None:
    """Run a content query and print the materialized results.

    Parameters
    ----------
    records : Path
        Record file produced by the external loader.
    collection : str or None, optional
        Collection name; falls back to the config, then to every record.
    where : list[str] or None, optional
        ``field=value`` filters, all of which must match. List fields match
        when they contain the value.
    sort_by : str or None, optional
        Field to sort by.
    order : {"asc", "desc"} or None, optional
        Sort direction; defaults to the config's ``default_sort_order``.
    limit : int or None, optional
        Maximum number of results.
    fields : list[str] or None, optional
        Restrict each result to these fields.
    enrich : list[str] or None, optional
        Named enrichers appended after those listed in the config.
    config : Path or None, optional
        Configuration file; ``content.yaml`` is used when present.
    verbose : bool, optional
        Emit debug diagnostics on stderr.

    Raises
    ------
    ValueError
        If a ``where`` expression is not of the form ``field=value``.
    """
    _configure_logging(verbose)
    settings = _load_config(config)
    builder = _open_collection(records, collection, settings)
    for expression in where or []:
        builder.where(_field_predicate(expression))
    if sort_by:
        builder.sort_by(sort_by, order or settings.default_sort_order)
    if limit is not None:
        builder.limit(limit)
    for name in [*settings.enrichers, *(enrich or [])]:
        builder.enrich_with(name)
    if fields:
        builder.fields(fields)
    results = asyncio.run(builder.get())
    payload = msgspec_json.encode([_to_record(result) for result in results])
    print(msgspec_json.format(payload, indent=2).decode("utf-8"))


@app.command(help="Print the ordered documentation navigation tree.")
def nav(
    records: typ.Annotated[Path, Parameter(help="YAML or JSON record file")],
    *,
    collection: typ.Annotated[
        str | None, Parameter(help="Collection to order", env_var="CONTENT_COLLECTION")
    ] = None,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to content config", env_var="CONTENT_CONFIG")
    ] = None,
    verbose: bool = False,
) -> None:
    """Group records by first slug segment and print sections with routes."""
    _configure_logging(verbose)
    settings = _load_config(config)
    builder = _open_collection(records, collection, settings)
    index = OrderingIndex(builder.group())
    for section in index.sections:
        section_route = build_doc_url(section.slug, prefix=settings.route_prefix)
        print(f"{section.title}  {section_route}")
        for document in section.documents:
            marker = "*" if document.is_intro else "-"
            label = document.title or document.slug
            route = build_doc_url(
                section.slug, document.slug, prefix=settings.route_prefix
            )
            print(f"  {marker} {label}  {route}")


@app.command(help="Build a documentation route from section and doc slugs.")
def url(
    section: str,
    doc: str | None = None,
    *,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to content config", env_var="CONTENT_CONFIG")
    ] = None,
) -> None:
    """Print the route for ``section`` (and ``doc`` when given)."""
    settings = _load_config(config)
    print(build_doc_url(section, doc, prefix=settings.route_prefix))


@app.command(name="parse-url", help="Split a documentation route into its slugs.")
def parse_url(
    path: str,
    *,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to content config", env_var="CONTENT_CONFIG")
    ] = None,
) -> None:
    """Print the section and doc slugs recovered from ``path``."""
    settings = _load_config(config)
    parsed = parse_doc_url(path, prefix=settings.route_prefix)
    print(f"section: {parsed.section_slug or '-'}")
    print(f"doc: {parsed.doc_slug or '-'}")


def main() -> None:
    """Invoke the Cyclopts application that powers the `content` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
