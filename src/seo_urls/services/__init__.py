"""Business logic services for the SEO URL engine."""

from seo_urls.services.canonicalization import CanonicalizationService, UpdateResult
from seo_urls.services.seo_url_service import SeoUrlPreview, SeoUrlService, TemplateValidation
from seo_urls.services.template_resolver import TemplateResolver

__all__ = [
    "CanonicalizationService",
    "SeoUrlPreview",
    "SeoUrlService",
    "TemplateResolver",
    "TemplateValidation",
    "UpdateResult",
]
