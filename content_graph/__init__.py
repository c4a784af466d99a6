"""Compile, query and order document content for site generation.

This package turns loader records into compiled content items, answers
chainable queries over them, and arranges grouped documents into an ordered
section hierarchy with navigation and route helpers. The ``content`` console
script wraps these pieces for use from the shell.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``ContentItem``, ``ContentStore``, ``ContentCollection``: query surface.
- ``OrderingIndex``, ``build_doc_url``, ``parse_doc_url``: navigation surface.
- ``compile_markdown``, ``render_nodes``, ``markdown_to_html``: compiler.

Examples
--------
>>> from content_graph import markdown_to_html
>>> markdown_to_html("# Title")
'<h1>Title</h1>'
>>> from content_graph import build_doc_url
>>> build_doc_url("guide", "index")
'/documentation/guide'
"""

from __future__ import annotations

from .cli import app, main
from .markdown_compiler import compile_markdown, markdown_to_html, render_nodes
from .models import ContentItem
from .ordering import OrderingIndex, build_doc_url, parse_doc_url
from .query import ContentCollection, ContentStore

__all__ = [
    "ContentCollection",
    "ContentItem",
    "ContentStore",
    "OrderingIndex",
    "app",
    "build_doc_url",
    "compile_markdown",
    "main",
    "markdown_to_html",
    "parse_doc_url",
    "render_nodes",
]
