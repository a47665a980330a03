"""Default element factory — plain dataclasses from :mod:`notetext.models`."""

from __future__ import annotations

from notetext.models import (
    EventLink,
    Hashtag,
    HyperText,
    Invoice,
    Mention,
    UnresolvedRef,
)


class DefaultElements:
    name: str = "default"

    def hyperlink(self, url: str, creator: str, *, source: str) -> HyperText:
        return HyperText(link=url, creator=creator, source=source)

    def mention(self, pubkey: str, *, source: str) -> Mention:
        return Mention(pubkey=pubkey, source=source)

    def hashtag(self, tag: str, *, source: str) -> Hashtag:
        return Hashtag(tag=tag, source=source)

    def invoice(self, invoice: str, *, source: str) -> Invoice:
        return Invoice(invoice=invoice, source=source)

    def event_link(self, event: str, label: str, href: str, *, source: str) -> EventLink:
        return EventLink(event=event, label=label, href=href, stop_propagation=True, source=source)

    def unresolved(self, text: str, style: str, *, source: str) -> UnresolvedRef:
        return UnresolvedRef(text=text, style=style, source=source)
