"""Tests for the markdown tree, visitor and link interception."""

import copy

import pytest

from notetext.markdown.intercept import disable_markdown_links
from notetext.markdown.tree import Node, Position, normalize_source, parse_tree
from notetext.markdown.visit import VisitAction, visit
from notetext.models import fragment_source
from notetext.render import render_note
from notetext.util import MissingValueError


def _find(node, node_type):
    found = []
    visit(node, lambda n: n.type == node_type, lambda n, i, p: found.append(n))
    return found


def _slice(tree, node):
    return tree.value[node.position.start:node.position.end]


class TestParseTree:
    def test_paragraph_text(self):
        tree = parse_tree("hello world")
        assert [c.type for c in tree.children] == ["paragraph"]
        assert tree.children[0].children[0].value == "hello world"

    def test_softbreaks_merge_into_one_text(self):
        tree = parse_tree("one\ntwo")
        para = tree.children[0]
        assert len(para.children) == 1
        assert para.children[0].value == "one\ntwo"

    def test_crlf_normalised(self):
        assert normalize_source("a\r\nb\rc") == "a\nb\nc"
        assert parse_tree("a\r\nb").value == "a\nb"

    def test_inline_link_position(self):
        tree = parse_tree("see [x](https://a.b) now")
        (link,) = _find(tree, "link")
        assert link.attrs["href"] == "https://a.b"
        assert _slice(tree, link) == "[x](https://a.b)"

    def test_link_in_list_item_position(self):
        tree = parse_tree("- see [x](https://a.b)")
        (link,) = _find(tree, "link")
        assert link.position == Position(6, 22)

    def test_link_in_blockquote_second_line(self):
        tree = parse_tree("> line one\n> [x](https://a.b)")
        (link,) = _find(tree, "link")
        assert _slice(tree, link) == "[x](https://a.b)"

    def test_image_position(self):
        tree = parse_tree("look ![alt](http://img.test/a.png)")
        (image,) = _find(tree, "image")
        assert image.attrs["src"] == "http://img.test/a.png"
        assert _slice(tree, image) == "![alt](http://img.test/a.png)"

    def test_autolink_is_a_link(self):
        tree = parse_tree("<https://a.b>")
        (link,) = _find(tree, "link")
        assert _slice(tree, link) == "<https://a.b>"

    def test_reference_link_and_definition(self):
        tree = parse_tree("[x]\n\n[x]: https://a.b")
        (ref,) = _find(tree, "linkReference")
        (definition,) = _find(tree, "definition")
        assert _slice(tree, ref) == "[x]"
        assert _slice(tree, definition) == "[x]: https://a.b"
        assert definition.attrs["url"] == "https://a.b"

    def test_tight_list_paragraph_flagged(self):
        tree = parse_tree("- a\n- b")
        paras = _find(tree, "paragraph")
        assert paras and all(p.attrs.get("tight") for p in paras)

    def test_heading_depth(self):
        tree = parse_tree("## Title")
        assert tree.children[0].type == "heading"
        assert tree.children[0].attrs["depth"] == 2


class TestVisit:
    def test_skip_stops_descent(self):
        tree = Node("root", children=[Node("link", children=[Node("text", value="x")])])
        seen = []

        def visitor(node, index, parent):
            seen.append(node.type)
            if node.type == "link":
                return VisitAction.SKIP
            return None

        visit(tree, None, visitor)
        assert seen == ["root", "link"]

    def test_passes_index_and_parent(self):
        tree = Node("root", children=[Node("a"), Node("b")])
        calls = []
        visit(tree, lambda n: n.type == "b", lambda n, i, p: calls.append((i, p.type)))
        assert calls == [(1, "root")]


class TestDisableMarkdownLinks:
    def test_link_becomes_verbatim_text_with_paren_fix(self):
        tree = disable_markdown_links(parse_tree("[a link](http://x.test/)"))
        para = tree.children[0]
        assert [c.type for c in para.children] == ["text"]
        assert para.children[0].value == "[a link](http://x.test/ )"
        assert para.children[0].children == []

    def test_reference_link_has_no_paren_fix(self):
        tree = disable_markdown_links(parse_tree("[x]\n\n[x]: https://a.b"))
        assert _find(tree, "linkReference") == []
        assert _find(tree, "definition") == []
        values = [n.value for n in _find(tree, "text")]
        assert "[x]" in values
        assert "[x]: https://a.b" in values

    def test_image_demoted(self):
        tree = disable_markdown_links(parse_tree("![alt](http://img.test/a.png)"))
        assert _find(tree, "image") == []
        assert tree.children[0].children[0].value == "![alt](http://img.test/a.png )"

    def test_other_nodes_untouched(self):
        tree = disable_markdown_links(parse_tree("*hi* [x](https://a.b)"))
        assert len(_find(tree, "emphasis")) == 1

    def test_idempotent(self):
        tree = disable_markdown_links(parse_tree("a [x](https://a.b) ![i](http://c.d)"))
        snapshot = copy.deepcopy(tree)
        disable_markdown_links(tree)
        assert tree == snapshot

    def test_node_types_filter(self):
        tree = disable_markdown_links(parse_tree("[x](https://a.b)"), node_types={"image"})
        assert len(_find(tree, "link")) == 1

    def test_missing_position_is_fatal(self):
        tree = Node("root", children=[Node("paragraph", children=[Node("link")])])
        with pytest.raises(MissingValueError):
            disable_markdown_links(tree, "anything")


class TestTabIndentedContinuation:
    SOURCE = "- a\n\t[l](http://x.y) t"

    def test_link_position_maps_to_source(self):
        tree = parse_tree(self.SOURCE)
        (link,) = _find(tree, "link")
        assert link.position == Position(5, 20)
        assert _slice(tree, link) == "[l](http://x.y)"

    def test_demoted_link_keeps_its_text(self):
        tree = disable_markdown_links(parse_tree(self.SOURCE))
        values = [n.value for n in _find(tree, "text")]
        assert "[l](http://x.y )" in values

    def test_render_drops_nothing(self):
        root = render_note(self.SOURCE)
        assert fragment_source(root) == "a\n[l](http://x.y ) t"
