"""Configuration loader for notetext.

Configuration is resolved in priority order: **project > user > defaults**.

1. **Project-level** — ``.notetext.yml`` in (or above) the working directory.
2. **User-level** — ``~/.notetext/config.yml``.
3. **Built-in defaults** — hardcoded fallbacks.

Both files share the same format::

    render:
      markdown: true
      label_length: 12
      error_color: "var(--error)"
      passthrough: []        # link-like node types left as real links
      cache_size: 128
    routes:
      event_prefix: "/e/"
      profile_prefix: "/p/"

Project-level values override user-level values.  CLI flags override both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from notetext.util import DEFAULT_EVENT_PREFIX, DEFAULT_PROFILE_PREFIX

CONFIG_FILENAME = ".notetext.yml"
USER_CONFIG_DIR = Path.home() / ".notetext"
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yml"

_SECTIONS = ("render", "routes")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class RenderConfig:
    """Render sub-configuration."""

    markdown: bool = True
    label_length: int = 12
    error_color: str = "var(--error)"
    passthrough: list[str] = field(default_factory=list)
    cache_size: int = 128

    @property
    def error_style(self) -> str:
        return f"color: {self.error_color}"


@dataclass
class RoutesConfig:
    """Route prefixes for computed links."""

    event_prefix: str = DEFAULT_EVENT_PREFIX
    profile_prefix: str = DEFAULT_PROFILE_PREFIX


@dataclass
class NoteTextConfig:
    """Top-level configuration container."""

    render: RenderConfig = field(default_factory=RenderConfig)
    routes: RoutesConfig = field(default_factory=RoutesConfig)

    # Where the effective config was loaded from (None = defaults only).
    project_config_path: str | None = None
    user_config_path: str | None = None


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(
    search_path: str | None = None,
    config_path: str | Path | None = None,
) -> NoteTextConfig:
    """Load merged configuration (project > user > defaults).

    Parameters
    ----------
    search_path:
        Directory to search for ``.notetext.yml``.  When *None*, only
        the user-level file (and defaults) are considered.
    config_path:
        Explicit config file path.  When given, *only* this file is
        loaded (no project/user search).
    """
    if config_path is not None:
        raw = _load_yaml(Path(config_path))
        cfg = _raw_to_config(raw)
        cfg.project_config_path = str(config_path) if raw is not None else None
        return cfg

    user_raw = _load_yaml(USER_CONFIG_PATH)
    user_source = str(USER_CONFIG_PATH) if user_raw else None

    project_raw: dict | None = None
    project_source: str | None = None
    if search_path is not None:
        project_path = _find_project_config(search_path)
        if project_path is not None:
            project_raw = _load_yaml(project_path)
            project_source = str(project_path)

    cfg = _raw_to_config(_merge_raw(project_raw, user_raw))
    cfg.project_config_path = project_source
    cfg.user_config_path = user_source
    return cfg


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _find_project_config(search_path: str) -> Path | None:
    """Search for ``.notetext.yml`` in *search_path* and its ancestors."""
    p = Path(search_path)
    candidates = [p / CONFIG_FILENAME]
    for parent in p.parents:
        candidates.append(parent / CONFIG_FILENAME)
        if (parent / ".git").exists():
            break
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def _load_yaml(path: Path) -> dict | None:
    """Load a YAML file, returning *None* on missing/invalid files."""
    path = path.expanduser()
    if not path.is_file():
        return None
    try:
        raw = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError):
        return None
    return raw if isinstance(raw, dict) else None


def _merge_raw(project: dict | None, user: dict | None) -> dict:
    """Merge project and user raw dicts section by section (project wins)."""
    base: dict = {}
    for source in (user, project):
        if not source:
            continue
        for key in _SECTIONS:
            section = source.get(key)
            if isinstance(section, dict):
                base.setdefault(key, {}).update(section)
    return base


def _section(raw: dict, key: str) -> dict:
    value = raw.get(key, {})
    return value if isinstance(value, dict) else {}


def _raw_to_config(raw: dict | None) -> NoteTextConfig:
    """Convert a raw YAML dict to a ``NoteTextConfig``."""
    if not raw:
        return NoteTextConfig()

    render_raw = _section(raw, "render")
    routes_raw = _section(raw, "routes")
    defaults = RenderConfig()

    render_cfg = RenderConfig(
        markdown=bool(render_raw.get("markdown", defaults.markdown)),
        label_length=_as_int(render_raw.get("label_length"), defaults.label_length),
        error_color=str(render_raw.get("error_color", defaults.error_color)),
        passthrough=_as_list(render_raw.get("passthrough", [])),
        cache_size=_as_int(render_raw.get("cache_size"), defaults.cache_size),
    )
    routes_cfg = RoutesConfig(
        event_prefix=str(routes_raw.get("event_prefix", DEFAULT_EVENT_PREFIX)),
        profile_prefix=str(routes_raw.get("profile_prefix", DEFAULT_PROFILE_PREFIX)),
    )
    return NoteTextConfig(render=render_cfg, routes=routes_cfg)


def _as_int(val: object, default: int) -> int:
    try:
        return int(val)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _as_list(val: object) -> list[str]:
    """Coerce a value to a list of strings."""
    if isinstance(val, list):
        return [str(v) for v in val]
    if isinstance(val, str):
        return [val]
    return []
