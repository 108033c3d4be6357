"""Request path resolution against stored SEO URLs."""

from seo_urls.resolution.path_resolver import ResolvedSeoPath, resolve_seo_path

__all__ = [
    "ResolvedSeoPath",
    "resolve_seo_path",
]
