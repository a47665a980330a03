"""CLI — click-based command-line interface."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from notetext.config import load_config
from notetext.elements.registry import load_elements
from notetext.models import MetadataCache, parse_tags
from notetext.patterns import ALL_RULES
from notetext.render import TextRenderer
from notetext.report import render_json, render_text


@click.group()
def main() -> None:
    """notetext — annotate note text with links, mentions, hashtags and invoices."""


def _load_json(path: str, what: str) -> Any:
    try:
        return json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as exc:
        click.echo(f"Error: cannot read {what} from {path}: {exc}", err=True)
        sys.exit(1)


def _load_users(raw: Any) -> dict[str, MetadataCache]:
    if not isinstance(raw, dict):
        click.echo("Error: users file must be a JSON object keyed by pubkey.", err=True)
        sys.exit(1)
    return {
        str(pubkey): MetadataCache.from_dict(str(pubkey), meta)
        for pubkey, meta in raw.items()
        if isinstance(meta, dict)
    }


# ───────────────────────────────────────────────────────────────────
# render
# ───────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", required=False, default="-", type=click.Path(allow_dash=True))
@click.option("--event", "event_file", default=None, type=click.Path(exists=True),
              help="Raw event JSON (content, pubkey, tags). Overrides PATH.")
@click.option("--tags", "tags_file", default=None, type=click.Path(exists=True),
              help="JSON array of raw tags, e.g. [[\"p\", \"<hex>\"]].")
@click.option("--users", "users_file", default=None, type=click.Path(exists=True),
              help="JSON object mapping pubkey to profile metadata.")
@click.option("--creator", default=None, help="Author pubkey (hex).")
@click.option("--format", "fmt", default="text",
              type=click.Choice(["text", "json"], case_sensitive=False),
              help="Output format.")
@click.option("--no-markdown", "no_markdown", is_flag=True, default=False,
              help="Treat the input as a single plain paragraph.")
@click.option("--no-color", "no_color", is_flag=True, default=False,
              help="Disable ANSI colours in text output.")
@click.option("--config", "config_path", default=None, type=click.Path(),
              help="Explicit config file (skips .notetext.yml search).")
@click.option("--elements", "elements_spec", default="default",
              help="default | import:pkg.module:Class")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Debug logging.")
def render(
    path: str,
    event_file: str | None,
    tags_file: str | None,
    users_file: str | None,
    creator: str | None,
    fmt: str,
    no_markdown: bool,
    no_color: bool,
    config_path: str | None,
    elements_spec: str,
    verbose: bool,
) -> None:
    """Render note text from PATH (or stdin) into annotated fragments."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    cfg = load_config(search_path=str(Path.cwd()), config_path=config_path)
    if no_markdown:
        cfg.render.markdown = False

    try:
        elements = load_elements(elements_spec)
    except (ValueError, ImportError, AttributeError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    raw_tags: Any = []
    if event_file:
        event = _load_json(event_file, "event")
        if not isinstance(event, dict):
            click.echo("Error: event file must be a JSON object.", err=True)
            sys.exit(1)
        content = str(event.get("content", ""))
        raw_tags = event.get("tags") or []
        creator = creator or str(event.get("pubkey", ""))
    else:
        with click.open_file(path, "r") as fh:
            content = fh.read()

    if tags_file:
        raw_tags = _load_json(tags_file, "tags")
    if not isinstance(raw_tags, list):
        click.echo("Error: tags must be a JSON array.", err=True)
        sys.exit(1)

    tags = parse_tags(raw_tags)
    users = _load_users(_load_json(users_file, "users")) if users_file else {}

    renderer = TextRenderer(cfg, elements)
    root = renderer.render(content, creator or "", tags, users)

    if fmt == "json":
        click.echo(render_json(root))
    else:
        click.echo(render_text(root, users=users, color=not no_color, profile_prefix=cfg.routes.profile_prefix))


# ───────────────────────────────────────────────────────────────────
# patterns
# ───────────────────────────────────────────────────────────────────

@main.command("patterns")
def patterns_list() -> None:
    """List the split rules in pipeline order."""
    click.echo(f"{'#':<3} {'Name':<10} {'Description'}")
    click.echo("-" * 50)
    for i, rule in enumerate(ALL_RULES, start=1):
        click.echo(f"{i:<3} {rule.name:<10} {rule.description}")
