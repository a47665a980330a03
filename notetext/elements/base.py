"""Element factory protocol — the contract every presentation layer satisfies."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ElementFactory(Protocol):
    """Produces one renderable per recognised entity.

    Each method receives the minimal payload for its kind plus ``source``,
    the exact text the element replaces.
    """

    name: str

    def hyperlink(self, url: str, creator: str, *, source: str) -> Any:
        ...

    def mention(self, pubkey: str, *, source: str) -> Any:
        ...

    def hashtag(self, tag: str, *, source: str) -> Any:
        ...

    def invoice(self, invoice: str, *, source: str) -> Any:
        ...

    def event_link(self, event: str, label: str, href: str, *, source: str) -> Any:
        """Link to another note. Must not propagate clicks to its container."""
        ...

    def unresolved(self, text: str, style: str, *, source: str) -> Any:
        ...
