"""Depth-first tree visitor with an explicit skip signal."""

from __future__ import annotations

import enum
from collections.abc import Callable

from notetext.markdown.tree import Node


class VisitAction(enum.Enum):
    CONTINUE = "continue"
    SKIP = "skip"  # do not descend into the visited node's children


Visitor = Callable[[Node, "int | None", "Node | None"], "VisitAction | None"]


def visit(
    tree: Node,
    test: Callable[[Node], bool] | None,
    visitor: Visitor,
) -> None:
    """Call *visitor(node, index, parent)* for every node matching *test*.

    Pre-order.  The visitor may mutate the node in place; returning
    ``VisitAction.SKIP`` stops descent into that node.  Children are read
    after the visitor runs, so a visitor that replaces ``node.children``
    controls what is walked next.
    """

    def _walk(node: Node, index: int | None, parent: Node | None) -> None:
        action = VisitAction.CONTINUE
        if test is None or test(node):
            action = visitor(node, index, parent) or VisitAction.CONTINUE
        if action is VisitAction.SKIP:
            return
        for i, child in enumerate(list(node.children)):
            _walk(child, i, node)

    _walk(tree, None, None)
