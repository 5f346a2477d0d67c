"""Render post files: YAML frontmatter block, blank line, raw body."""

from __future__ import annotations

from datetime import date

import yaml


def build_frontmatter(
    title: str,
    date_value: str,
    description: str | None = None,
    tags: list[str] | None = None,
) -> dict:
    """Build the frontmatter dict. Optional keys are omitted when empty."""
    fm: dict = {"title": title, "date": _coerce_date(date_value)}
    if description:
        fm["description"] = description
    if tags:
        fm["tags"] = list(tags)
    return fm


def render_post(
    title: str,
    body: str,
    date_value: str,
    description: str | None = None,
    tags: list[str] | None = None,
) -> str:
    """Assemble the complete file text for a post."""
    fm = build_frontmatter(title, date_value, description, tags)
    yaml_block = yaml.dump(
        fm, default_flow_style=False, sort_keys=False, allow_unicode=True
    )
    return f"---\n{yaml_block}---\n\n{body}"


def _coerce_date(value: str) -> date | str:
    """Date-only ISO strings become real dates so YAML writes them unquoted.

    Anything else, timestamps included, is written exactly as received.
    """
    try:
        return date.fromisoformat(value)
    except ValueError:
        return value
