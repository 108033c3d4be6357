"""Database models for the SEO URL engine."""

from seo_urls.models.base import Base
from seo_urls.models.seo_url import SeoUrl
from seo_urls.models.seo_url_template import SeoUrlTemplate

__all__ = [
    "Base",
    "SeoUrl",
    "SeoUrlTemplate",
]
