"""Identifier encoding and route helpers."""

from __future__ import annotations

import logging
from typing import TypeVar

from bech32 import bech32_encode, convertbits

log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_EVENT_PREFIX = "/e/"
DEFAULT_PROFILE_PREFIX = "/p/"


class MissingValueError(ValueError):
    """A value the caller's contract guarantees was absent."""


def unwrap(value: T | None) -> T:
    if value is None:
        raise MissingValueError("missing value")
    return value


def hex_to_bech32(hrp: str, hex_key: str | None) -> str:
    """Encode a hex id as a NIP-19 bech32 string (``note1…``, ``npub1…``).

    Returns ``""`` for empty or invalid input.
    """
    if not isinstance(hex_key, str) or not hex_key or len(hex_key) % 2 != 0:
        return ""
    try:
        data = bytes.fromhex(hex_key)
    except ValueError:
        log.debug("Invalid hex %r", hex_key)
        return ""
    words = convertbits(data, 8, 5)
    if words is None:
        return ""
    return bech32_encode(hrp, words)


def event_link(hex_id: str, prefix: str = DEFAULT_EVENT_PREFIX) -> str:
    return f"{prefix}{hex_to_bech32('note', hex_id)}"


def profile_link(hex_key: str, prefix: str = DEFAULT_PROFILE_PREFIX) -> str:
    return f"{prefix}{hex_to_bech32('npub', hex_key)}"
