"""Reusable generator for routes keyed by a single entity id."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any
from uuid import UUID

from seo_urls.config import settings
from seo_urls.generators.base import SeoUrlTuple
from seo_urls.templating import SeoUrlTemplateRenderer
from seo_urls.utils.slugify import with_leading_slash

ContextLoader = Callable[[UUID, list[UUID]], Awaitable[Mapping[UUID, Mapping[str, Any]]]]
SampleLoader = Callable[[UUID, int], Awaitable[Mapping[UUID, Mapping[str, Any]]]]


class EntitySeoUrlGenerator:
    """Generator that renders one SEO path per entity from a context loader.

    The loader receives the sales channel and the requested ids and returns
    the rendering context for every id that still qualifies. The optional
    sample loader receives the sales channel and a limit and returns the
    contexts of any entities of the route, for previews. The internal route
    path is built from ``path_info_pattern`` with ``{id}`` replaced by the
    entity id (hex form).

    Usage:
        generator = EntitySeoUrlGenerator(
            route_name="frontend.detail.page",
            default_template="{{ product.name }}/{{ product.number }}",
            path_info_pattern="/detail/{id}",
            context_loader=load_product_contexts,
            sample_loader=load_sample_product_contexts,
        )
    """

    def __init__(
        self,
        *,
        route_name: str,
        default_template: str,
        path_info_pattern: str,
        context_loader: ContextLoader,
        sample_loader: SampleLoader | None = None,
        renderer: SeoUrlTemplateRenderer | None = None,
    ) -> None:
        self.route_name = route_name
        self.default_template = default_template
        self.path_info_pattern = path_info_pattern
        self._context_loader = context_loader
        self._sample_loader = sample_loader
        self._renderer = renderer or SeoUrlTemplateRenderer()

    def path_info_for(self, foreign_key: UUID) -> str:
        return with_leading_slash(self.path_info_pattern.format(id=foreign_key.hex))

    async def load_contexts(
        self,
        sales_channel_id: UUID,
        ids: Iterable[UUID] | None = None,
        *,
        limit: int | None = None,
    ) -> Mapping[UUID, Mapping[str, Any]]:
        if ids is not None:
            return await self._context_loader(sales_channel_id, list(ids))

        # No sample source: nothing to preview
        if self._sample_loader is None:
            return {}
        return await self._sample_loader(sales_channel_id, limit or settings.seo_url_preview_limit)

    async def generate_seo_urls(
        self, sales_channel_id: UUID, ids: Iterable[UUID], template: str
    ) -> list[SeoUrlTuple]:
        contexts = await self.load_contexts(sales_channel_id, ids)
        paths = self._renderer.render_all(template, contexts)

        return [
            SeoUrlTuple(
                foreign_key=foreign_key,
                path_info=self.path_info_for(foreign_key),
                seo_path_info=seo_path_info,
            )
            for foreign_key, seo_path_info in paths.items()
        ]
