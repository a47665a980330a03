"""Fragment pipeline — split plain-text fragments into annotated elements.

Passes run in a fixed order::

    mentions → links → invoices → hashtags

Each pass only splits ``str`` fragments; anything already annotated is
passed through untouched.  A pass maps every fragment to a list of pieces
and flattens exactly one level, so the result is always a flat sequence.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from notetext.config import NoteTextConfig
from notetext.elements.base import ElementFactory
from notetext.elements.default import DefaultElements
from notetext.models import MetadataCache, Tag, TextFragment
from notetext.patterns import HASHTAG_RULE, INVOICE_RULE, MENTION_RULE, URL_RULE, SplitRule
from notetext.resolver import resolve_reference


def _flatten_once(groups: Iterable[list[Any]]) -> list[Any]:
    """Concatenate a sequence of lists. Nested lists inside are kept as-is."""
    out: list[Any] = []
    for group in groups:
        out.extend(group)
    return out


def _split_strings(
    fragments: Sequence[Any],
    rule: SplitRule,
    make: Callable[[str], Any],
) -> list[Any]:
    def _expand(fragment: Any) -> list[Any]:
        if not isinstance(fragment, str):
            return [fragment]
        return [make(piece) if rule.is_match(piece) else piece for piece in rule.split(fragment)]

    return _flatten_once(_expand(f) for f in fragments)


class FragmentPipeline:
    """Runs the split passes for one creator with one element factory."""

    def __init__(
        self,
        creator: str = "",
        factory: ElementFactory | None = None,
        config: NoteTextConfig | None = None,
    ) -> None:
        self.creator = creator
        self.factory = factory or DefaultElements()
        self.config = config or NoteTextConfig()

    # ---- passes ----

    def extract_mentions(self, frag: TextFragment) -> list[Any]:
        return _split_strings(
            frag.body,
            MENTION_RULE,
            lambda piece: resolve_reference(piece, frag.tags, self.factory, self.config),
        )

    def extract_links(self, fragments: Sequence[Any]) -> list[Any]:
        return _split_strings(
            fragments,
            URL_RULE,
            lambda piece: self.factory.hyperlink(piece, self.creator, source=piece),
        )

    def extract_invoices(self, fragments: Sequence[Any]) -> list[Any]:
        return _split_strings(
            fragments,
            INVOICE_RULE,
            lambda piece: self.factory.invoice(piece, source=piece),
        )

    def extract_hashtags(self, fragments: Sequence[Any]) -> list[Any]:
        return _split_strings(
            fragments,
            HASHTAG_RULE,
            lambda piece: self.factory.hashtag(piece[1:], source=piece),
        )

    # ---- entry point ----

    def transform_text(self, frag: TextFragment) -> list[Any]:
        fragments = self.extract_mentions(frag)
        fragments = self.extract_links(fragments)
        fragments = self.extract_invoices(fragments)
        fragments = self.extract_hashtags(fragments)
        return fragments


def process(
    fragments: Sequence[Any],
    tags: Sequence[Tag],
    users: Mapping[str, MetadataCache] | None = None,
    creator: str = "",
    factory: ElementFactory | None = None,
    config: NoteTextConfig | None = None,
) -> list[Any]:
    """Run the full pipeline over *fragments* (strings and/or elements)."""
    pipeline = FragmentPipeline(creator, factory, config)
    return pipeline.transform_text(TextFragment(list(fragments), tags, users if users is not None else {}))
