"""Split rules — the recognisers the fragment pipeline runs over plain text.

Every rule wraps a regex with a single capturing group, so ``re.split``
keeps the matched text: the pieces alternate literal / match and join back
to the input.  Whether a piece becomes an element is decided by the rule's
predicate, not by its position in the split result.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

URL_REGEX = re.compile(
    r"((?:http|ftp|https)://(?:[\w+?.\w+])+"
    r"(?:[a-zA-Z0-9~!@#$%^&*()_\-=+\\/?.:;',]*)?)",
    re.IGNORECASE,
)
MENTION_REGEX = re.compile(r"(#\[\d+\])", re.IGNORECASE)
INVOICE_REGEX = re.compile(r"(lnbc\w+)", re.IGNORECASE)
HASHTAG_REGEX = re.compile(r"(#[^\s!@#$%^&*()=+./,\[{\]};:'\"?><]+)")

# Stricter re-match applied to a mention piece before resolving it.
PLACEHOLDER_REGEX = re.compile(r"#\[(\d+)\]")


# ---------------------------------------------------------------------------
# Rule
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SplitRule:
    """A named splitter plus the predicate that marks a piece as a match."""

    name: str
    pattern: re.Pattern[str]
    predicate: Callable[[str], bool]
    description: str = ""

    def split(self, text: str) -> list[str]:
        """Split *text* into ordered pieces; empty boundary pieces are dropped."""
        pieces = [p for p in self.pattern.split(text) if p]
        return pieces or [text]

    def is_match(self, piece: str) -> bool:
        if not piece or piece.isspace():
            return False
        return self.predicate(piece)


URL_RULE = SplitRule(
    name="url",
    pattern=URL_REGEX,
    predicate=lambda p: p.startswith("http"),
    description="http(s) links",
)
MENTION_RULE = SplitRule(
    name="mention",
    pattern=MENTION_REGEX,
    predicate=lambda p: PLACEHOLDER_REGEX.match(p) is not None,
    description="#[N] reference placeholders",
)
INVOICE_RULE = SplitRule(
    name="invoice",
    pattern=INVOICE_REGEX,
    predicate=lambda p: p.lower().startswith("lnbc"),
    description="Lightning (BOLT-11) invoices",
)
HASHTAG_RULE = SplitRule(
    name="hashtag",
    pattern=HASHTAG_REGEX,
    predicate=lambda p: p.lower().startswith("#"),
    description="#topic hashtags",
)

# Pipeline order. Mentions must run before hashtags.
ALL_RULES: tuple[SplitRule, ...] = (MENTION_RULE, URL_RULE, INVOICE_RULE, HASHTAG_RULE)


def get_rule(name: str) -> SplitRule:
    for rule in ALL_RULES:
        if rule.name == name:
            return rule
    raise KeyError(f"No split rule named '{name}'")
