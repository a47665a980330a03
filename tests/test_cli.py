"""Integration tests for the notetext CLI."""

import json

import pytest
from click.testing import CliRunner

import notetext.config as config_mod
from notetext.cli import main

PUBKEY = "3bf0c63fcb93463407af97a5e5ee64fa883d107ef9e558472c4eb9aaaefa459d"


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    monkeypatch.setattr(config_mod, "USER_CONFIG_PATH", tmp_path / "home" / "config.yml")
    monkeypatch.chdir(tmp_path)


def _root(result):
    assert result.exit_code == 0, result.output
    return json.loads(result.output)["root"]


class TestRender:
    def test_file_with_tags_json(self, tmp_path):
        note = tmp_path / "note.txt"
        note.write_text("hi #[0] https://a.b")
        tags = tmp_path / "tags.json"
        tags.write_text(json.dumps([["p", PUBKEY]]))

        runner = CliRunner()
        result = runner.invoke(main, ["render", str(note), "--tags", str(tags), "--format", "json"])
        children = _root(result)["children"][0]["children"]
        assert [c["type"] for c in children] == ["text", "mention", "text", "hyperlink"]
        assert children[1]["pubkey"] == PUBKEY

    def test_event_file(self, tmp_path):
        event = tmp_path / "event.json"
        event.write_text(json.dumps({
            "content": "https://x.y #[0]",
            "pubkey": "pk",
            "tags": [["t", "nostr"]],
        }))
        runner = CliRunner()
        result = runner.invoke(main, ["render", "--event", str(event), "--format", "json"])
        children = _root(result)["children"][0]["children"]
        assert children[0] == {"type": "hyperlink", "link": "https://x.y", "creator": "pk", "source": "https://x.y"}
        assert children[-1]["type"] == "hashtag"
        assert children[-1]["tag"] == "nostr"

    def test_stdin(self):
        runner = CliRunner()
        result = runner.invoke(main, ["render", "--format", "json"], input="hello")
        para = _root(result)["children"][0]
        assert para["tag"] == "p"
        assert para["children"] == [{"type": "text", "value": "hello"}]

    def test_text_output(self):
        runner = CliRunner()
        result = runner.invoke(main, ["render", "--no-color"], input="see #[3]")
        assert result.exit_code == 0
        assert "notetext Fragment Report" in result.output
        assert "UNRESOLVED  #[3]?" in result.output

    def test_no_markdown(self):
        runner = CliRunner()
        result = runner.invoke(main, ["render", "--no-markdown", "--format", "json"], input="*a*")
        para = _root(result)["children"][0]
        assert para["children"] == [{"type": "text", "value": "*a*"}]

    def test_explicit_config(self, tmp_path):
        cfg = tmp_path / "custom.yml"
        cfg.write_text("render:\n  error_color: red\n")
        runner = CliRunner()
        result = runner.invoke(main, ["render", "--config", str(cfg), "--format", "json"], input="#[0]")
        (ref,) = _root(result)["children"][0]["children"]
        assert ref["style"] == "color: red"

    def test_project_config_in_cwd(self, tmp_path):
        (tmp_path / ".notetext.yml").write_text("render:\n  markdown: false\n")
        runner = CliRunner()
        result = runner.invoke(main, ["render", "--format", "json"], input="*not emphasis*")
        para = _root(result)["children"][0]
        assert para["tag"] == "p"
        assert para["children"] == [{"type": "text", "value": "*not emphasis*"}]

    def test_users_file(self, tmp_path):
        users = tmp_path / "users.json"
        users.write_text(json.dumps({PUBKEY: {"name": "fiatjaf"}}))
        tags = tmp_path / "tags.json"
        tags.write_text(json.dumps([["p", PUBKEY]]))
        runner = CliRunner()
        result = runner.invoke(
            main, ["render", "--no-color", "--tags", str(tags), "--users", str(users)], input="#[0]"
        )
        assert result.exit_code == 0
        assert "(@fiatjaf)" in result.output

    def test_import_elements(self):
        runner = CliRunner()
        result = runner.invoke(
            main,
            ["render", "--format", "json", "--elements", "import:notetext.elements.default:DefaultElements"],
            input="#tag",
        )
        assert _root(result)["children"][0]["children"][0]["type"] == "hashtag"


class TestRenderErrors:
    def test_tags_not_a_list(self, tmp_path):
        tags = tmp_path / "tags.json"
        tags.write_text(json.dumps({"p": PUBKEY}))
        runner = CliRunner()
        result = runner.invoke(main, ["render", "--tags", str(tags)], input="#[0]")
        assert result.exit_code == 1
        assert "tags must be a JSON array" in result.output

    def test_tags_invalid_json(self, tmp_path):
        tags = tmp_path / "tags.json"
        tags.write_text("[[")
        runner = CliRunner()
        result = runner.invoke(main, ["render", "--tags", str(tags)], input="x")
        assert result.exit_code == 1

    def test_event_not_an_object(self, tmp_path):
        event = tmp_path / "event.json"
        event.write_text("[]")
        runner = CliRunner()
        result = runner.invoke(main, ["render", "--event", str(event)])
        assert result.exit_code == 1

    def test_unknown_elements(self):
        runner = CliRunner()
        result = runner.invoke(main, ["render", "--elements", "bogus"], input="x")
        assert result.exit_code == 1
        assert "Unknown element factory" in result.output

    def test_unimportable_elements(self):
        runner = CliRunner()
        result = runner.invoke(main, ["render", "--elements", "import:no_such_pkg.mod:Thing"], input="x")
        assert result.exit_code == 1


class TestPatterns:
    def test_lists_rules_in_order(self):
        runner = CliRunner()
        result = runner.invoke(main, ["patterns"])
        assert result.exit_code == 0
        names = [line.split()[1] for line in result.output.splitlines()[2:]]
        assert names == ["mention", "url", "invoice", "hashtag"]
