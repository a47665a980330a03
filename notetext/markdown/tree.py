"""Markdown parsing — build an mdast-style node tree with source offsets.

Uses ``markdown-it-py`` for the actual parsing.  Its token stream carries
line maps only, so the inline rules that produce link-like tokens are
wrapped to record the span they consumed, and each inline run is aligned
back onto the document to turn those spans into absolute offsets.

Node types follow mdast naming (``paragraph``, ``listItem``, ``link``,
``linkReference``, ``image``, ``imageReference``, ``definition``, ``text`` …).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from notetext.util import unwrap

_NEWLINES_RE = re.compile(r"\r\n?")
_SPAN_KEY = "notetext_span"

# Inline rules whose tokens need source spans.
_TRACKED_INLINE_RULES = ("link", "image", "autolink")

# markdown-it node type -> mdast node type
_TYPE_MAP = {
    "paragraph": "paragraph",
    "heading": "heading",
    "blockquote": "blockquote",
    "bullet_list": "list",
    "ordered_list": "list",
    "list_item": "listItem",
    "em": "emphasis",
    "strong": "strong",
    "s": "delete",
    "link": "link",
    "image": "image",
    "code_inline": "inlineCode",
    "fence": "code",
    "code_block": "code",
    "hr": "thematicBreak",
    "hardbreak": "break",
    "html_block": "html",
    "html_inline": "html",
    "definition": "definition",
    "table": "table",
    "thead": "tableHead",
    "tbody": "tableBody",
    "tr": "tableRow",
    "th": "tableCell",
    "td": "tableCell",
}


# ---------------------------------------------------------------------------
# Node
# ---------------------------------------------------------------------------


@dataclass
class Position:
    """Half-open ``[start, end)`` offsets into the parsed source."""

    start: int
    end: int


@dataclass
class Node:
    type: str
    children: list[Node] = field(default_factory=list)
    value: str | None = None
    position: Position | None = None
    tag: str = ""
    attrs: dict[str, Any] = field(default_factory=dict)


def normalize_source(text: str) -> str:
    """Apply the same newline/NULL normalisation markdown-it does."""
    return _NEWLINES_RE.sub("\n", text).replace("\0", "\ufffd")


# ---------------------------------------------------------------------------
# Parser setup
# ---------------------------------------------------------------------------


def _track_span(rule):
    def tracked(state, silent):
        start = state.pos
        count = len(state.tokens)
        if not rule(state, silent):
            return False
        if not silent:
            for token in state.tokens[count:]:
                if token.type != "text":
                    token.meta.setdefault(_SPAN_KEY, (start, state.pos))
        return True

    return tracked


def make_parser() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"inline_definitions": True})
    for rule in md.inline.ruler.__rules__:
        if rule.name in _TRACKED_INLINE_RULES:
            md.inline.ruler.at(rule.name, _track_span(rule.fn))
    return md


# ---------------------------------------------------------------------------
# Offset alignment
# ---------------------------------------------------------------------------


def _line_starts(source: str) -> list[int]:
    starts = [0]
    for i, ch in enumerate(source):
        if ch == "\n":
            starts.append(i + 1)
    return starts


def _tab_width(source: str, pos: int) -> int:
    """Columns the tab at *pos* spans, with tab stops every 4 columns."""
    col = 0
    for ch in source[source.rfind("\n", 0, pos) + 1:pos]:
        col += 4 - col % 4 if ch == "\t" else 1
    return 4 - col % 4


def _align(content: str, source: str, begin: int) -> list[int]:
    """Map each index of *content* (and its end) to an offset in *source*.

    Inline content is the block's source with container prefixes (list
    markers, ``>``, indentation) removed, so its characters appear in the
    document in order.  A tab the parser partially consumed as indentation
    shows up as a run of spaces; all of them map to the tab.
    """
    first_line = content.split("\n", 1)[0]
    pos = source.find(first_line, begin) if first_line else -1
    if pos < 0:
        pos = begin
    offsets: list[int] = []
    tab_left = 0
    for ch in content:
        if ch == " " and tab_left > 0:
            offsets.append(pos - 1)
            tab_left -= 1
            continue
        tab_left = 0
        while pos < len(source) and not (
            source[pos] == ch or (ch == " " and source[pos] == "\t")
        ):
            pos += 1
        offsets.append(min(pos, len(source)))
        if ch == " " and pos < len(source) and source[pos] == "\t":
            tab_left = _tab_width(source, pos) - 1
        pos += 1
    offsets.append(min(pos, len(source)))
    return offsets


# ---------------------------------------------------------------------------
# Tree conversion
# ---------------------------------------------------------------------------


class _Builder:
    def __init__(self, source: str) -> None:
        self.source = source
        self.line_starts = _line_starts(source)

    def _line_start(self, line: int) -> int:
        if line < len(self.line_starts):
            return self.line_starts[line]
        return len(self.source)

    def _line_end(self, line: int) -> int:
        end = self.source.find("\n", self._line_start(line))
        return len(self.source) if end < 0 else end

    def build(self, node: SyntaxTreeNode) -> Node:
        root = Node("root", value=self.source)
        root.children = self._children(node.children, None)
        return root

    def _children(self, nodes: list[SyntaxTreeNode], offsets: list[int] | None) -> list[Node]:
        out: list[Node] = []
        for child in nodes:
            if child.type == "inline":
                begin = self._line_start(child.map[0]) if child.map else 0
                inline_offsets = _align(child.content, self.source, begin)
                out.extend(self._children(child.children, inline_offsets))
            else:
                out.append(self._convert(child, offsets))
        return _merge_text(out)

    def _span(self, node: SyntaxTreeNode, offsets: list[int] | None) -> Position | None:
        span = node.meta.get(_SPAN_KEY) if node.meta else None
        if span is None or offsets is None:
            return None
        start, end = span
        if end <= start or end > len(offsets) - 1:
            return None
        return Position(offsets[start], offsets[end - 1] + 1)

    def _definition_span(self, node: SyntaxTreeNode) -> Position | None:
        if not node.map:
            return None
        first, last = node.map[0], max(node.map[1] - 1, node.map[0])
        start = self._line_start(first)
        bracket = self.source.find("[", start, self._line_end(first))
        return Position(bracket if bracket >= 0 else start, self._line_end(last))

    def _convert(self, node: SyntaxTreeNode, offsets: list[int] | None) -> Node:
        kind = node.type
        if kind in ("text", "text_special"):
            return Node("text", value=node.content)
        if kind == "softbreak":
            return Node("text", value="\n")

        out = Node(_TYPE_MAP.get(kind, kind), tag=node.tag)

        if kind == "paragraph" and node.hidden:
            out.attrs["tight"] = True
        elif kind == "heading":
            out.attrs["depth"] = int(node.tag[1:]) if node.tag[1:].isdigit() else 1
        elif kind == "ordered_list":
            out.attrs["ordered"] = True
            start = node.attrs.get("start")
            if start is not None:
                out.attrs["start"] = start
        elif kind in ("fence", "code_block"):
            out.value = node.content
            out.tag = "pre"
            if node.info:
                out.attrs["lang"] = node.info.strip().split(" ", 1)[0]
        elif kind in ("code_inline", "html_block", "html_inline"):
            out.value = node.content
        elif kind == "link":
            out.attrs["href"] = node.attrs.get("href", "")
            if node.attrs.get("title"):
                out.attrs["title"] = node.attrs["title"]
            out.position = self._span(node, offsets)
            if out.position and node.markup != "autolink" and not self._slice(out).endswith(")"):
                out.type = "linkReference"
        elif kind == "image":
            out.attrs["src"] = node.attrs.get("src", "")
            out.attrs["alt"] = node.content
            out.position = self._span(node, offsets)
            if out.position and not self._slice(out).endswith(")"):
                out.type = "imageReference"
            # Alt-text children were parsed from a separate source string.
            out.children = [Node("text", value=node.content)] if node.content else []
            return out
        elif kind == "definition":
            meta = node.meta or {}
            out.attrs.update(
                {"label": meta.get("label", ""), "url": meta.get("url", ""), "title": meta.get("title")}
            )
            out.position = self._definition_span(node)
            return out

        out.children = self._children(node.children, offsets)
        return out

    def _slice(self, node: Node) -> str:
        position = unwrap(node.position)
        return self.source[position.start:position.end]


def _merge_text(nodes: list[Node]) -> list[Node]:
    """Join runs of adjacent offset-less text nodes, as mdast does."""
    merged: list[Node] = []
    for node in nodes:
        prev = merged[-1] if merged else None
        if (
            prev is not None
            and node.type == "text"
            and prev.type == "text"
            and prev.position is None
            and node.position is None
        ):
            prev.value = (prev.value or "") + (node.value or "")
            continue
        merged.append(node)
    return merged


def parse_tree(text: str, md: MarkdownIt | None = None) -> Node:
    """Parse *text* and return the root node. ``root.value`` holds the
    normalised source that every ``Position`` indexes into."""
    source = normalize_source(text)
    md = md or make_parser()
    tokens = md.parse(source)
    return _Builder(source).build(SyntaxTreeNode(tokens))
