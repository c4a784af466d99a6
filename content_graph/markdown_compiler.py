r"""Compile a small markdown subset into a node tree and serialized markup.

The compiler works in two passes. A line-oriented block scan classifies each
run of lines as a fenced code block, heading, horizontal rule, blockquote,
list, or paragraph (in that precedence order). Text-bearing blocks are then
split by a left-to-right inline scan into bold, emphasis, inline code, link,
and plain text leaves. :func:`render_nodes` serializes the resulting tree.

Only the syntax listed above is recognised; anything else is plain text. The
compiler never raises: unterminated constructs close at end of input.

Example
-------
>>> from content_graph.markdown_compiler import compile_markdown, render_nodes
>>> nodes = compile_markdown("# Title\nSome **bold** text")
>>> render_nodes(nodes)
'<h1>Title</h1>\n<p>Some <strong>bold</strong> text</p>'
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

FENCE = "```"
HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
RULE_PATTERN = re.compile(r"^([-*_])\1{2,}$")
UNORDERED_ITEM_PATTERN = re.compile(r"^[-*]\s+")
ORDERED_ITEM_PATTERN = re.compile(r"^\d+\.\s+")

BOLD_PATTERN = re.compile(r"(\*\*|__)(.+?)\1")
EMPHASIS_PATTERN = re.compile(r"([*_])(?!\1)(.+?)\1(?!\1)")
CODE_SPAN_PATTERN = re.compile(r"`([^`]+)`")
LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
SPECIAL_CHAR_PATTERN = re.compile(r"[*_`\[]")

# Ampersands that do not already start an entity reference.
BARE_AMPERSAND_PATTERN = re.compile(
    r"&(?!(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);)"
)
SELF_CLOSING_TAGS = frozenset({"hr", "br"})


@dc.dataclass(slots=True)
class Node:
    """Element in the compiled document tree.

    Attributes
    ----------
    tag : str
        Element kind (``h1``-``h6``, ``p``, ``strong``, ``em``, ``code``,
        ``a``, ``ul``, ``ol``, ``li``, ``blockquote``, ``hr``, ``pre``).
    attrs : dict[str, str | None]
        Ordered attributes; ``None`` values are treated as not present.
    children : list[Node | str]
        Child elements and literal text leaves, in document order.
    """

    tag: str
    attrs: dict[str, str | None] = dc.field(default_factory=dict)
    children: list[Node | str] = dc.field(default_factory=list)

    def text(self) -> str:
        """Return the concatenated literal text beneath this node."""
        return "".join(
            child if isinstance(child, str) else child.text()
            for child in self.children
        )


def _append_text(result: list[Node | str], text: str) -> None:
    """Append ``text``, merging it into a preceding text leaf when possible."""
    if result and isinstance(result[-1], str):
        result[-1] += text
    else:
        result.append(text)


def parse_inline(text: str) -> list[Node | str]:
    """Split a span of text into inline nodes and plain text leaves.

    Parameters
    ----------
    text : str
        Single-line text taken from a heading, paragraph, blockquote, or
        list item.

    Returns
    -------
    list[Node | str]
        Inline nodes (``strong``, ``em``, ``code``, ``a``) interleaved with
        literal text. Delimiter contents are not parsed recursively.
    """
    result: list[Node | str] = []
    pos = 0
    while pos < len(text):
        if match := BOLD_PATTERN.match(text, pos):
            result.append(Node("strong", children=[match.group(2)]))
        elif match := EMPHASIS_PATTERN.match(text, pos):
            result.append(Node("em", children=[match.group(2)]))
        elif match := CODE_SPAN_PATTERN.match(text, pos):
            result.append(Node("code", children=[match.group(1)]))
        elif match := LINK_PATTERN.match(text, pos):
            result.append(Node("a", {"href": match.group(2)}, [match.group(1)]))
        else:
            special = SPECIAL_CHAR_PATTERN.search(text, pos + 1)
            end = special.start() if special else len(text)
            _append_text(result, text[pos:end])
            pos = end
            continue
        pos = match.end()
    return result


def _starts_block(stripped: str) -> bool:
    """Return True when a non-empty line opens a block other than a paragraph."""
    return bool(
        stripped.startswith((FENCE, ">"))
        or HEADING_PATTERN.match(stripped)
        or RULE_PATTERN.match(stripped)
        or UNORDERED_ITEM_PATTERN.match(stripped)
        or ORDERED_ITEM_PATTERN.match(stripped)
    )


_ScanResult: typ.TypeAlias = tuple[Node, int] | None


def _scan_fence(lines: list[str], index: int) -> _ScanResult:
    opening = lines[index].strip()
    if not opening.startswith(FENCE):
        return None
    language = opening[len(FENCE) :].strip()
    body: list[str] = []
    index += 1
    while index < len(lines) and not lines[index].strip().startswith(FENCE):
        body.append(lines[index])
        index += 1
    attrs = {"class": f"language-{language}"} if language else {}
    code = Node("code", attrs, ["\n".join(body)])
    # Skip the closing fence; an unterminated block ends with the input.
    return Node("pre", children=[code]), index + 1


def _scan_heading(lines: list[str], index: int) -> _ScanResult:
    match = HEADING_PATTERN.match(lines[index].strip())
    if not match:
        return None
    level = len(match.group(1))
    return Node(f"h{level}", children=parse_inline(match.group(2))), index + 1


def _scan_rule(lines: list[str], index: int) -> _ScanResult:
    if not RULE_PATTERN.match(lines[index].strip()):
        return None
    return Node("hr"), index + 1


def _scan_blockquote(lines: list[str], index: int) -> _ScanResult:
    if not lines[index].strip().startswith(">"):
        return None
    quoted: list[str] = []
    while index < len(lines):
        stripped = lines[index].strip()
        if not stripped.startswith(">"):
            break
        quoted.append(stripped[1:].strip())
        index += 1
    return Node("blockquote", children=parse_inline(" ".join(quoted))), index


def _scan_list(
    lines: list[str], index: int, *, tag: str, marker: re.Pattern[str]
) -> _ScanResult:
    if not marker.match(lines[index].strip()):
        return None
    items: list[Node | str] = []
    while index < len(lines):
        stripped = lines[index].strip()
        match = marker.match(stripped)
        if not match:
            break
        items.append(Node("li", children=parse_inline(stripped[match.end() :])))
        index += 1
    return Node(tag, children=items), index


def _scan_unordered_list(lines: list[str], index: int) -> _ScanResult:
    return _scan_list(lines, index, tag="ul", marker=UNORDERED_ITEM_PATTERN)


def _scan_ordered_list(lines: list[str], index: int) -> _ScanResult:
    return _scan_list(lines, index, tag="ol", marker=ORDERED_ITEM_PATTERN)


def _scan_paragraph(lines: list[str], index: int) -> _ScanResult:
    collected = [lines[index].strip()]
    index += 1
    while index < len(lines):
        stripped = lines[index].strip()
        if not stripped or _starts_block(stripped):
            break
        collected.append(stripped)
        index += 1
    return Node("p", children=parse_inline(" ".join(collected))), index


_BLOCK_SCANNERS: tuple[typ.Callable[[list[str], int], _ScanResult], ...] = (
    _scan_fence,
    _scan_heading,
    _scan_rule,
    _scan_blockquote,
    _scan_unordered_list,
    _scan_ordered_list,
    _scan_paragraph,
)


def compile_markdown(markdown_text: str) -> list[Node]:
    """Compile markdown text into an ordered list of block nodes.

    Parameters
    ----------
    markdown_text : str
        Raw markdown body (front matter already removed).

    Returns
    -------
    list[Node]
        Top-level block nodes in document order. Blank lines separate blocks
        and never produce nodes.
    """
    lines = [line.removesuffix("\r") for line in markdown_text.split("\n")]
    nodes: list[Node] = []
    index = 0
    while index < len(lines):
        if not lines[index].strip():
            index += 1
            continue
        for scan in _BLOCK_SCANNERS:
            result = scan(lines, index)
            if result is not None:
                node, index = result
                nodes.append(node)
                break
    return nodes


def escape_text(text: str) -> str:
    """Escape ``&``, ``<`` and ``>`` without re-escaping existing entities."""
    escaped = BARE_AMPERSAND_PATTERN.sub("&amp;", text)
    return escaped.replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr(value: str) -> str:
    """Escape an attribute value for a double-quoted context."""
    return escape_text(value).replace('"', "&quot;")


def _render_attrs(attrs: typ.Mapping[str, str | None]) -> str:
    return " ".join(
        f'{name}="{_escape_attr(value)}"'
        for name, value in attrs.items()
        if value is not None
    )


def _render_node(node: Node | str) -> str:
    if isinstance(node, str):
        return escape_text(node)
    attrs = _render_attrs(node.attrs)
    opening = f"{node.tag} {attrs}" if attrs else node.tag
    if node.tag in SELF_CLOSING_TAGS:
        return f"<{opening} />"
    inner = "".join(_render_node(child) for child in node.children)
    return f"<{opening}>{inner}</{node.tag}>"


def render_nodes(nodes: typ.Iterable[Node]) -> str:
    """Serialize block nodes into markup, one block per line."""
    return "\n".join(_render_node(node) for node in nodes)


def markdown_to_html(markdown_text: str) -> str:
    """Compile ``markdown_text`` and serialize it in one step."""
    return render_nodes(compile_markdown(markdown_text))


__all__ = [
    "Node",
    "compile_markdown",
    "escape_text",
    "markdown_to_html",
    "parse_inline",
    "render_nodes",
]
