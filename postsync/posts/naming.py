"""File-name conventions for post files: ``<slugified-title>-<external-id>.<ext>``."""

from __future__ import annotations

import re
import unicodedata


def slugify(text: str) -> str:
    """Hello, Wörld! -> hello-world"""
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode()
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")
    return slug or "post"


def file_name(title: str, external_id: str, ext: str = "md") -> str:
    """Build the canonical file name for a post."""
    return f"{slugify(title)}-{external_id}.{ext.lstrip('.')}"


def external_id_from_name(name: str) -> str:
    """Extract the external id embedded as the last ``-`` segment of a file name.

    hello-world-abc123.md -> abc123
    """
    return name.rsplit("-", 1)[-1].split(".", 1)[0]
