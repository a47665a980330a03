"""Reference resolver — turn a ``#[N]`` placeholder into an element."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from notetext.config import NoteTextConfig
from notetext.elements.base import ElementFactory
from notetext.models import Tag, TagKind
from notetext.patterns import PLACEHOLDER_REGEX
from notetext.util import event_link, hex_to_bech32

log = logging.getLogger(__name__)


def find_tag(tags: Sequence[Tag] | None, index: int) -> Tag | None:
    if not tags:
        return None
    for tag in tags:
        if tag.index == index:
            return tag
    return None


def resolve_reference(
    placeholder: str,
    tags: Sequence[Tag] | None,
    factory: ElementFactory,
    config: NoteTextConfig,
) -> Any:
    """Resolve *placeholder* against *tags*.

    Returns the placeholder unchanged when it fails the strict re-match,
    otherwise an element. Never raises on missing or odd tags.
    """
    match = PLACEHOLDER_REGEX.match(placeholder)
    if match is None:
        return placeholder

    index = int(match.group(1))
    ref = find_tag(tags, index)
    kind = ref.kind if ref is not None else TagKind.UNKNOWN

    if ref is not None and kind is TagKind.PERSON:
        return factory.mention(ref.pubkey or "", source=match.group(0))
    if ref is not None and kind is TagKind.EVENT:
        note = hex_to_bech32("note", ref.event)
        label = f"#{note[:config.render.label_length]}"
        href = event_link(ref.event or "", config.routes.event_prefix)
        return factory.event_link(ref.event or "", label, href, source=match.group(0))
    if ref is not None and kind is TagKind.TOPIC:
        return factory.hashtag(ref.hashtag or "", source=match.group(0))

    if ref is None:
        log.debug("Unresolved reference %s: no tag at index %d", match.group(0), index)
    else:
        log.debug("Unresolved reference %s: unsupported tag key %r", match.group(0), ref.key)
    return factory.unresolved(
        f"{match.group(0)}?",
        config.render.error_style,
        source=match.group(0),
    )
