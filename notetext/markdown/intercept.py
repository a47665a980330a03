"""Link interception — demote markdown links, images and definitions to text.

Rewrites every link-like node back into a text node holding its verbatim
source, so the only links in the rendered output are the ones the fragment
pipeline finds itself.  A trailing ``)`` gets a space in front of it so the
URL pattern does not swallow the closing parenthesis.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from notetext.markdown.tree import Node
from notetext.markdown.visit import VisitAction, visit
from notetext.util import unwrap

log = logging.getLogger(__name__)

LINK_NODE_TYPES: frozenset[str] = frozenset(
    {"link", "linkReference", "image", "imageReference", "definition"}
)


def _fix_trailing_paren(text: str) -> str:
    if text.endswith(")"):
        return text[:-1] + " )"
    return text


def disable_markdown_links(
    tree: Node,
    source: str | None = None,
    node_types: Iterable[str] = LINK_NODE_TYPES,
) -> Node:
    """Demote link-like nodes of *tree* in place and return it.

    *source* defaults to ``tree.value`` (the text :func:`parse_tree` parsed).
    Raises :class:`~notetext.util.MissingValueError` if a matched node has no
    source position.
    """
    text = source if source is not None else unwrap(tree.value)
    types = frozenset(node_types)

    def _demote(node: Node, index: int | None, parent: Node | None) -> VisitAction:
        if parent is None or index is None:
            return VisitAction.CONTINUE
        position = unwrap(node.position)
        log.debug("Demoting %s at %d:%d", node.type, position.start, position.end)
        node.type = "text"
        node.value = _fix_trailing_paren(text[position.start:position.end])
        node.children = []
        node.attrs = {}
        return VisitAction.SKIP

    visit(tree, lambda n: n.type in types, _demote)
    return tree
