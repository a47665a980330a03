"""Shared fixtures."""

import pytest

from notetext.models import Tag

PUBKEY = "3bf0c63fcb93463407af97a5e5ee64fa883d107ef9e558472c4eb9aaaefa459d"
NPUB = "npub180cvv07tjdrrgpa0j7j7tmnyl2yr6yr7l8j4s3evf6u64th6gkwsyjh6w6"
EVENT_ID = "7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e"


@pytest.fixture
def person_tags():
    return [Tag(index=0, key="p", pubkey="abc123")]


@pytest.fixture
def mixed_tags():
    """One tag of every kind, indexed 0..3."""
    return [
        Tag.from_raw(["p", PUBKEY], 0),
        Tag.from_raw(["e", EVENT_ID, "wss://relay.example", "reply"], 1),
        Tag.from_raw(["t", "bitcoin"], 2),
        Tag.from_raw(["r", "wss://relay.example"], 3),
    ]
