"""SEO URL generators and their registry."""

from seo_urls.generators.base import SeoUrlGenerator, SeoUrlTuple
from seo_urls.generators.entity import EntitySeoUrlGenerator
from seo_urls.generators.registry import GeneratorRegistry

__all__ = [
    "EntitySeoUrlGenerator",
    "GeneratorRegistry",
    "SeoUrlGenerator",
    "SeoUrlTuple",
]
