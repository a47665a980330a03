"""Data models used throughout notetext."""

from __future__ import annotations

import enum
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

# ---------------------------------------------------------------------------
# Tag kind
# ---------------------------------------------------------------------------


class TagKind(enum.Enum):
    """Closed set of reference-tag kinds a ``#[N]`` placeholder can point at."""

    PERSON = "p"
    EVENT = "e"
    TOPIC = "t"
    UNKNOWN = ""

    @classmethod
    def from_key(cls, key: str | None) -> TagKind:
        for kind in cls:
            if kind is not cls.UNKNOWN and kind.value == key:
                return kind
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.name.lower()


# ---------------------------------------------------------------------------
# Tag
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Tag:
    """One entry of a note's side list, addressable as ``#[index]``."""

    index: int
    key: str
    pubkey: str | None = None
    event: str | None = None
    hashtag: str | None = None
    relay: str | None = None
    marker: str | None = None
    original: tuple[str, ...] = ()

    @property
    def kind(self) -> TagKind:
        return TagKind.from_key(self.key)

    @classmethod
    def from_raw(cls, raw: Sequence[Any], index: int) -> Tag:
        """Build a tag from a raw event tag array such as ``["p", "<hex>"]``."""
        values = tuple("" if v is None else str(v) for v in raw)
        key = values[0] if values else ""

        def _at(i: int) -> str | None:
            return values[i] if len(values) > i else None

        kind = TagKind.from_key(key)
        if kind is TagKind.EVENT:
            return cls(index, key, event=_at(1), relay=_at(2), marker=_at(3), original=values)
        if kind is TagKind.PERSON:
            return cls(index, key, pubkey=_at(1), original=values)
        if kind is TagKind.TOPIC:
            return cls(index, key, hashtag=_at(1), original=values)
        return cls(index, key, original=values)


def parse_tags(raw_tags: Sequence[Sequence[Any]] | None) -> list[Tag]:
    """Index a raw event ``tags`` array in order of appearance."""
    if not raw_tags:
        return []
    return [Tag.from_raw(raw, i) for i, raw in enumerate(raw_tags) if isinstance(raw, (list, tuple))]


# ---------------------------------------------------------------------------
# User metadata
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MetadataCache:
    """Cached profile data for one pubkey. Read-only to notetext."""

    pubkey: str
    name: str | None = None
    display_name: str | None = None
    picture: str | None = None
    nip05: str | None = None
    about: str | None = None

    @classmethod
    def from_dict(cls, pubkey: str, raw: Mapping[str, Any]) -> MetadataCache:
        def _str(key: str) -> str | None:
            value = raw.get(key)
            return str(value) if value is not None else None

        return cls(
            pubkey=pubkey,
            name=_str("name"),
            display_name=_str("display_name"),
            picture=_str("picture"),
            nip05=_str("nip05"),
            about=_str("about"),
        )

    @property
    def best_name(self) -> str | None:
        return self.display_name or self.name


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Element:
    """Base for annotated fragments; ``source`` is the text it replaced."""

    kind: ClassVar[str] = "element"


@dataclass(frozen=True)
class HyperText(Element):
    kind: ClassVar[str] = "hyperlink"

    link: str
    creator: str = ""
    source: str = ""


@dataclass(frozen=True)
class Mention(Element):
    kind: ClassVar[str] = "mention"

    pubkey: str
    source: str = ""


@dataclass(frozen=True)
class Hashtag(Element):
    kind: ClassVar[str] = "hashtag"

    tag: str
    source: str = ""


@dataclass(frozen=True)
class Invoice(Element):
    kind: ClassVar[str] = "invoice"

    invoice: str
    source: str = ""


@dataclass(frozen=True)
class EventLink(Element):
    """Link to a referenced note. Activation must not bubble to a parent."""

    kind: ClassVar[str] = "event_link"

    event: str
    label: str
    href: str
    stop_propagation: bool = True
    source: str = ""


@dataclass(frozen=True)
class UnresolvedRef(Element):
    """Visible marker for a ``#[N]`` placeholder with no usable tag."""

    kind: ClassVar[str] = "unresolved"

    text: str
    style: str = ""
    source: str = ""


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


@dataclass
class Block:
    """A container around fragments. ``tag=None`` is a bare fragment group."""

    tag: str | None
    children: list[Fragment] = field(default_factory=list)
    attrs: dict[str, Any] = field(default_factory=dict)


Fragment = Union[str, Element, Block]


def fragment_source(fragment: Any) -> str:
    """Return the literal text a fragment stands for."""
    if isinstance(fragment, str):
        return fragment
    if isinstance(fragment, Block):
        return "".join(fragment_source(f) for f in fragment.children)
    return getattr(fragment, "source", "") or ""


# ---------------------------------------------------------------------------
# Per-block context
# ---------------------------------------------------------------------------


@dataclass
class TextFragment:
    """What a block renderer hands to the pipeline.

    ``tags`` and ``users`` are the caller's objects, shared by every block of
    one render; they are never copied.
    """

    body: list[Any]
    tags: Sequence[Tag]
    users: Mapping[str, MetadataCache]
