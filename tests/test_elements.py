"""Tests for element factories and the factory registry."""

import pytest

from notetext.elements.base import ElementFactory
from notetext.elements.default import DefaultElements
from notetext.elements.registry import load_elements, load_import_elements
from notetext.models import Block
from notetext.render import render_note


class HtmlElements:
    """Factory producing HTML strings, used to check custom factories plug in."""

    name = "html"

    def hyperlink(self, url, creator, *, source):
        return f'<a href="{url}">{source}</a>'

    def mention(self, pubkey, *, source):
        return f"@{pubkey}"

    def hashtag(self, tag, *, source):
        return f'<a href="/t/{tag}">#{tag}</a>'

    def invoice(self, invoice, *, source):
        return f"<invoice>{invoice}</invoice>"

    def event_link(self, event, label, href, *, source):
        return f'<a href="{href}">{label}</a>'

    def unresolved(self, text, style, *, source):
        return f'<span style="{style}">{text}</span>'


class NotAFactory:
    name = "broken"


class TestDefaultElements:
    def test_satisfies_protocol(self):
        assert isinstance(DefaultElements(), ElementFactory)

    def test_event_link_never_propagates(self):
        assert DefaultElements().event_link("e", "#n", "/e/n", source="#[0]").stop_propagation is True


class TestLoadElements:
    def test_default(self):
        assert isinstance(load_elements(), DefaultElements)
        assert load_elements("default").name == "default"

    def test_import_class(self):
        factory = load_elements(f"import:{__name__}:HtmlElements")
        assert factory.name == "html"

    def test_import_instance(self):
        factory = load_import_elements("notetext.elements.default:DefaultElements")
        assert isinstance(factory, DefaultElements)

    def test_unknown_spec(self):
        with pytest.raises(ValueError, match="Unknown element factory"):
            load_elements("html")

    def test_bad_import_string(self):
        with pytest.raises(ValueError, match="Invalid import string"):
            load_import_elements("no_colon_here")

    def test_object_without_protocol(self):
        with pytest.raises(ValueError, match="does not implement"):
            load_import_elements(f"{__name__}:NotAFactory")


class TestCustomFactory:
    def test_render_with_custom_factory(self):
        root = render_note("gm #nostr", elements=HtmlElements())
        # String-only output still counts as a plain paragraph.
        assert root.children == [Block("p", ["gm ", '<a href="/t/nostr">#nostr</a>'])]
