"""Utility functions for the SEO URL engine."""

from seo_urls.utils.slugify import normalize_path, slugify, with_leading_slash

__all__ = [
    "normalize_path",
    "slugify",
    "with_leading_slash",
]
