"""Slug and path normalization helpers."""

from __future__ import annotations

import re
import unicodedata
from typing import Any

_NON_SLUG = re.compile(r"[^a-z0-9]+")
_SLASHES = re.compile(r"/{2,}")


def slugify(value: Any) -> str:
    """Convert arbitrary text to a lowercase, dash-separated URL segment.

    Rules:
    - ``None`` renders as an empty string
    - Unicode NFKD normalization, then drop non-ASCII (transliterates accents)
    - Lowercase
    - Replace runs of non-alphanumerics with a single dash
    - Remove leading/trailing dashes

    Examples:
        "Wireless Headphones" -> "wireless-headphones"
        "Café à Paris" -> "cafe-a-paris"
        "  50% OFF!! " -> "50-off"
    """
    if value is None:
        return ""

    text = unicodedata.normalize("NFKD", str(value))
    text = text.encode("ascii", "ignore").decode("ascii")
    text = _NON_SLUG.sub("-", text.lower())
    return text.strip("-")


def normalize_path(path: str) -> str:
    """Normalize a rendered SEO path: trim, collapse slashes, strip outer slashes."""
    path = _SLASHES.sub("/", path.strip())
    return path.strip("/")


def with_leading_slash(path: str) -> str:
    """Return ``path`` with exactly one leading slash."""
    return "/" + path.lstrip("/")
