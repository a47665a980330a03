"""Report rendering — text and JSON views of a fragment tree."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from typing import Any

import notetext
from notetext.models import (
    Block,
    Element,
    EventLink,
    Hashtag,
    HyperText,
    Invoice,
    Mention,
    MetadataCache,
    UnresolvedRef,
)
from notetext.util import DEFAULT_PROFILE_PREFIX, profile_link

# ---------------------------------------------------------------------------
# Text output
# ---------------------------------------------------------------------------

_KIND_COLORS = {
    "unresolved": "\033[91m",  # red
    "mention": "\033[96m",     # cyan
    "hashtag": "\033[94m",     # blue
    "invoice": "\033[93m",     # yellow
}
_RESET = "\033[0m"


def _kind_label(kind: str, color: bool = True) -> str:
    label = kind.upper()
    if color and kind in _KIND_COLORS:
        return f"{_KIND_COLORS[kind]}{label}{_RESET}"
    return label


def _describe(element: Any, users: Mapping[str, MetadataCache], profile_prefix: str) -> str:
    if isinstance(element, HyperText):
        return element.link
    if isinstance(element, Mention):
        meta = users.get(element.pubkey)
        name = meta.best_name if meta is not None else None
        who = f"{element.pubkey} (@{name})" if name else element.pubkey
        link = profile_link(element.pubkey, profile_prefix)
        return f"{who} → {link}" if link != profile_prefix else who
    if isinstance(element, Hashtag):
        return f"#{element.tag}"
    if isinstance(element, Invoice):
        return element.invoice
    if isinstance(element, EventLink):
        return f"{element.label} → {element.href}"
    if isinstance(element, UnresolvedRef):
        return element.text
    return repr(element)


def _text_lines(
    fragment: Any, depth: int, users: Mapping[str, MetadataCache], color: bool, profile_prefix: str
) -> list[str]:
    pad = "  " * depth
    if isinstance(fragment, str):
        return [f"{pad}{json.dumps(fragment, ensure_ascii=False)}"]
    if isinstance(fragment, Block):
        lines = [f"{pad}<{fragment.tag or ''}>"]
        for child in fragment.children:
            lines.extend(_text_lines(child, depth + 1, users, color, profile_prefix))
        return lines
    kind = getattr(fragment, "kind", type(fragment).__name__.lower())
    return [f"{pad}{_kind_label(kind, color)}  {_describe(fragment, users, profile_prefix)}"]


def _count_kinds(fragment: Any, counts: dict[str, int]) -> None:
    if isinstance(fragment, Block):
        for child in fragment.children:
            _count_kinds(child, counts)
    elif not isinstance(fragment, str):
        kind = getattr(fragment, "kind", "element")
        counts[kind] = counts.get(kind, 0) + 1


def render_text(
    root: Any,
    users: Mapping[str, MetadataCache] | None = None,
    color: bool = True,
    profile_prefix: str = DEFAULT_PROFILE_PREFIX,
) -> str:
    """Produce a human-friendly outline of the fragment tree."""
    users = users or {}
    lines: list[str] = []
    lines.append("=" * 60)
    lines.append("notetext Fragment Report")
    lines.append("=" * 60)
    lines.extend(_text_lines(root, 0, users, color, profile_prefix))

    counts: dict[str, int] = {}
    _count_kinds(root, counts)
    lines.append("-" * 60)
    if counts:
        summary = ", ".join(f"{n} {kind}" for kind, n in sorted(counts.items()))
        lines.append(f"Elements: {summary}")
    else:
        lines.append("Elements: none")
    lines.append("=" * 60)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# JSON output
# ---------------------------------------------------------------------------


def fragment_to_dict(fragment: Any) -> dict[str, Any]:
    if isinstance(fragment, str):
        return {"type": "text", "value": fragment}
    if isinstance(fragment, Block):
        return {
            "type": "block",
            "tag": fragment.tag,
            "attrs": dict(sorted(fragment.attrs.items())),
            "children": [fragment_to_dict(c) for c in fragment.children],
        }
    if isinstance(fragment, Element) and dataclasses.is_dataclass(fragment):
        return {"type": fragment.kind, **dataclasses.asdict(fragment)}
    return {"type": "unknown", "value": repr(fragment)}


def render_json(root: Any) -> str:
    """Produce stable JSON output of the fragment tree."""
    doc: dict[str, Any] = {
        "tool": "notetext",
        "version": notetext.__version__,
        "root": fragment_to_dict(root),
    }
    return json.dumps(doc, indent=2, ensure_ascii=False)
