"""Block renderers — turn a note's text into a fragment tree.

Markdown is parsed into a node tree, link-like nodes are demoted to text,
and the tree is rendered bottom-up.  Paragraphs and list items run their
children through the :class:`~notetext.pipeline.FragmentPipeline`; every
other node becomes a plain :class:`~notetext.models.Block`.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import replace
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from notetext.config import NoteTextConfig
from notetext.elements.base import ElementFactory
from notetext.elements.default import DefaultElements
from notetext.markdown.intercept import LINK_NODE_TYPES, disable_markdown_links
from notetext.markdown.tree import Node, make_parser, normalize_source, parse_tree
from notetext.models import Block, MetadataCache, Tag, TextFragment
from notetext.pipeline import FragmentPipeline

log = logging.getLogger(__name__)

Component = Callable[[Node, list[Any]], Any]

# Fallback container tags for nodes markdown-it leaves untagged.
_DEFAULT_TAGS = {
    "break": "br",
    "thematicBreak": "hr",
}


class _Render:
    """State for one render pass; discarded afterwards."""

    def __init__(
        self,
        renderer: TextRenderer,
        creator: str,
        tags: Sequence[Tag],
        users: Mapping[str, MetadataCache],
    ) -> None:
        self.renderer = renderer
        self.tags = tags
        self.users = users
        self.creator = creator
        self.pipeline = FragmentPipeline(creator, renderer.elements, renderer.config)
        self.components: dict[str, Component] = {
            "paragraph": lambda node, children: self.transform_paragraph(self._frag(children)),
            "listItem": lambda node, children: self.transform_li(self._frag(children)),
            "link": lambda node, children: renderer.elements.hyperlink(
                node.attrs.get("href", ""), creator, source=node.attrs.get("href", "")
            ),
        }

    def _frag(self, children: list[Any]) -> TextFragment:
        return TextFragment(body=children, tags=self.tags, users=self.users)

    # ---- block renderers ----

    def transform_li(self, frag: TextFragment) -> Block:
        return Block("li", self.pipeline.transform_text(frag))

    def transform_paragraph(self, frag: TextFragment) -> Block:
        fragments = self.pipeline.transform_text(frag)
        if all(isinstance(f, str) for f in fragments):
            return Block("p", fragments)
        return Block(None, fragments)

    # ---- tree walk ----

    def node(self, node: Node) -> Any:
        if node.type == "text":
            return node.value or ""
        if node.type == "html":
            # Raw HTML is shown as text, never interpreted.
            return node.value or ""
        if node.type == "inlineCode":
            return Block("code", [node.value or ""])
        if node.type == "code":
            attrs = {"lang": node.attrs["lang"]} if "lang" in node.attrs else {}
            return Block("pre", [Block("code", [node.value or ""], attrs)])

        children: list[Any] = []
        for child in node.children:
            if child.type == "paragraph" and child.attrs.get("tight"):
                # Tight list items hold their text without a paragraph.
                children.extend(self.node(c) for c in child.children)
            else:
                children.append(self.node(child))
        component = self.components.get(node.type)
        if component is not None:
            return component(node, children)
        tag = node.tag or _DEFAULT_TAGS.get(node.type, node.type)
        attrs = {k: v for k, v in node.attrs.items() if k in ("start", "depth")}
        return Block(tag, children, attrs)


class TextRenderer:
    """Render note text into a ``div`` block of fragments.

    Results are memoised by ``(content, creator, tags, users)``; the tag list
    and user mapping are compared by identity.  A cache hit returns the same
    ``Block`` tree as the first call, so callers must treat results as
    read-only; call :meth:`clear_cache` after mutating one.
    """

    def __init__(
        self,
        config: NoteTextConfig | None = None,
        elements: ElementFactory | None = None,
    ) -> None:
        self.config = config or NoteTextConfig()
        self.elements = elements or DefaultElements()
        self._md = make_parser()
        self._cache: OrderedDict[tuple, tuple[Sequence[Tag], Mapping[str, MetadataCache], Block]] = OrderedDict()

    @property
    def intercepted_types(self) -> frozenset[str]:
        return LINK_NODE_TYPES - set(self.config.render.passthrough)

    def clear_cache(self) -> None:
        self._cache.clear()

    def render(
        self,
        content: str,
        creator: str = "",
        tags: Sequence[Tag] | None = None,
        users: Mapping[str, MetadataCache] | None = None,
    ) -> Block:
        tags = tags if tags is not None else []
        users = users if users is not None else {}

        key = (content, creator, id(tags), id(users))
        cached = self._cache.get(key)
        if cached is not None and cached[0] is tags and cached[1] is users:
            self._cache.move_to_end(key)
            return cached[2]

        result = self._render(content, creator, tags, users)

        if self.config.render.cache_size > 0:
            self._cache[key] = (tags, users, result)
            while len(self._cache) > self.config.render.cache_size:
                self._cache.popitem(last=False)
        return result

    def parse(self, content: str) -> Node:
        """Parse *content* and demote link-like nodes."""
        tree = parse_tree(content, self._md)
        return disable_markdown_links(tree, tree.value, self.intercepted_types)

    def _render(
        self,
        content: str,
        creator: str,
        tags: Sequence[Tag],
        users: Mapping[str, MetadataCache],
    ) -> Block:
        state = _Render(self, creator, tags, users)
        if self.config.render.markdown:
            tree = self.parse(content)
            body = [state.node(child) for child in tree.children]
        else:
            body = [state.transform_paragraph(state._frag([normalize_source(content)]))]
        log.debug("Rendered %d top-level blocks", len(body))
        return Block("div", body, {"dir": "auto", "class": "text"})


def render_note(
    content: str,
    creator: str = "",
    tags: Sequence[Tag] | None = None,
    users: Mapping[str, MetadataCache] | None = None,
    config: NoteTextConfig | None = None,
    elements: ElementFactory | None = None,
) -> Block:
    """One-shot render without memoisation."""
    cfg = config or NoteTextConfig()
    cfg = replace(cfg, render=replace(cfg.render, cache_size=0))
    return TextRenderer(cfg, elements).render(content, creator, tags, users)
