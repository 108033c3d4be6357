"""SEO URL service: the entry point for generation, persistence and lookup.

Data flow for a generation pass:
    template lookup -> validation -> generator renders tuples
    -> canonicalization persists them -> duplicate invalidation

Administrative helpers (template validation, preview, save) back the
template editing UI.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from seo_urls.config import settings
from seo_urls.errors import InvalidTemplateError, TemplateRenderError
from seo_urls.generators.base import SeoUrlTuple
from seo_urls.generators.registry import GeneratorRegistry
from seo_urls.models.seo_url_template import SeoUrlTemplate
from seo_urls.resolution.path_resolver import ResolvedSeoPath, resolve_seo_path
from seo_urls.services.canonicalization import CanonicalizationService, UpdateResult
from seo_urls.services.template_resolver import TemplateResolver
from seo_urls.templating import SeoUrlTemplateRenderer

logger = logging.getLogger(__name__)


@dataclass
class TemplateValidation:
    """Outcome of validating a template string."""

    valid: bool
    message: str | None = None


@dataclass
class SeoUrlPreview:
    """Rendered path for one entity, or the reason it could not be rendered."""

    foreign_key: UUID
    seo_path_info: str | None = None
    error: str | None = None


class SeoUrlService:
    """Facade over template resolution, generation, canonicalization and lookup.

    Usage:
        async with async_session_factory() as session:
            service = SeoUrlService(session, registry)
            seo_urls = await service.generate_seo_urls(channel_id, route, ids)
            await service.update_seo_urls(channel_id, route, ids, seo_urls)
            await session.commit()
    """

    def __init__(
        self,
        session: AsyncSession,
        registry: GeneratorRegistry,
        renderer: SeoUrlTemplateRenderer | None = None,
    ) -> None:
        self._session = session
        self._registry = registry
        self._renderer = renderer or SeoUrlTemplateRenderer()
        self._templates = TemplateResolver(session)
        self._canonicalization = CanonicalizationService(session)

    # ── Generation ───────────────────────────────────────────────────────────

    async def generate_seo_urls(
        self,
        sales_channel_id: UUID,
        route_name: str,
        ids: Iterable[UUID],
        template_override: str | None = None,
    ) -> list[SeoUrlTuple]:
        """Render SEO URLs for the given entities of a route.

        Args:
            sales_channel_id: Sales channel to generate for.
            route_name: Route whose generator produces the tuples.
            ids: Entity ids.
            template_override: Template to use instead of the stored one.

        Returns:
            Generated tuples, ready for ``update_seo_urls``.

        Raises:
            GeneratorNotFoundError: If no generator handles ``route_name``.
            InvalidTemplateError: If the effective template does not parse.
            TemplateRenderError: If an entity cannot be rendered.
        """
        generator = self._registry.get(route_name)
        template = template_override
        if template is None:
            template = await self._templates.get_template_string(
                sales_channel_id, route_name, generator.default_template
            )
        self._renderer.validate(template)

        seo_urls = list(await generator.generate_seo_urls(sales_channel_id, ids, template))
        logger.debug("Generated %d SEO URLs for %s", len(seo_urls), route_name)
        return seo_urls

    async def update_seo_urls(
        self,
        sales_channel_id: UUID,
        route_name: str,
        foreign_keys: Iterable[UUID],
        seo_urls: Iterable[SeoUrlTuple | Mapping[str, Any]],
    ) -> UpdateResult:
        """Persist generated SEO URLs and invalidate duplicates (see CanonicalizationService)."""
        return await self._canonicalization.update_seo_urls(
            sales_channel_id, route_name, foreign_keys, seo_urls
        )

    async def regenerate(
        self,
        sales_channel_id: UUID,
        route_name: str,
        ids: Iterable[UUID],
        template_override: str | None = None,
    ) -> UpdateResult:
        """Generate and persist SEO URLs for a route in one call.

        Rendering finishes before anything is written, so a template or
        render error leaves the table untouched.
        """
        ids = list(ids)
        seo_urls = await self.generate_seo_urls(sales_channel_id, route_name, ids, template_override)
        return await self.update_seo_urls(sales_channel_id, route_name, ids, seo_urls)

    async def invalidate_duplicates(self, sales_channel_id: UUID) -> int:
        return await self._canonicalization.invalidate_duplicates(sales_channel_id)

    # ── Lookup ───────────────────────────────────────────────────────────────

    async def resolve_seo_path(self, sales_channel_id: UUID, path_info: str) -> ResolvedSeoPath:
        return await resolve_seo_path(self._session, sales_channel_id, path_info)

    # ── Templates ────────────────────────────────────────────────────────────

    async def get_template_string(
        self, sales_channel_id: UUID, route_name: str, default_template: str
    ) -> str:
        return await self._templates.get_template_string(
            sales_channel_id, route_name, default_template
        )

    def get_default_template(self, route_name: str) -> str:
        """Return the built-in template of the route's generator."""
        return self._registry.get(route_name).default_template

    def validate_template(self, template: str) -> TemplateValidation:
        """Check that a template parses, returning the diagnostic instead of raising."""
        try:
            self._renderer.validate(template)
        except InvalidTemplateError as exc:
            return TemplateValidation(valid=False, message=str(exc))
        return TemplateValidation(valid=True)

    async def preview(
        self,
        sales_channel_id: UUID,
        route_name: str,
        template: str,
        ids: Iterable[UUID] | None = None,
    ) -> list[SeoUrlPreview]:
        """Render a template against sample entities without writing anything.

        Without ``ids`` the generator picks sample entities of the route.
        Per-entity render failures are reported in ``SeoUrlPreview.error``.

        Raises:
            GeneratorNotFoundError: If no generator handles ``route_name``.
            InvalidTemplateError: If the template does not parse.
        """
        generator = self._registry.get(route_name)
        compiled = self._renderer.validate(template)

        contexts = await generator.load_contexts(
            sales_channel_id, list(ids) if ids else None, limit=settings.seo_url_preview_limit
        )
        previews: list[SeoUrlPreview] = []
        for foreign_key, context in list(contexts.items())[: settings.seo_url_preview_limit]:
            try:
                path = self._renderer.render(compiled, context, foreign_key=foreign_key)
            except TemplateRenderError as exc:
                logger.warning("Template preview failed for %s: %s", foreign_key, exc.message)
                previews.append(SeoUrlPreview(foreign_key=foreign_key, error=exc.message))
                continue
            previews.append(SeoUrlPreview(foreign_key=foreign_key, seo_path_info=path))

        return previews

    async def get_context(self, sales_channel_id: UUID, route_name: str) -> dict[str, Any]:
        """Return the rendering context of one sample entity of the route.

        Template editors use it to list the variables a template can reference.
        Empty when the route has no entities to sample.
        """
        generator = self._registry.get(route_name)
        contexts = await generator.load_contexts(sales_channel_id, None, limit=1)
        for context in contexts.values():
            return dict(context)
        return {}

    async def save_template(
        self,
        route_name: str,
        template: str | None,
        *,
        sales_channel_id: UUID | None = None,
        entity_name: str | None = None,
    ) -> SeoUrlTemplate:
        """Create or update the template override for a route.

        A blank template falls back to the generator's built-in default.

        Raises:
            GeneratorNotFoundError: If no generator handles ``route_name``.
            InvalidTemplateError: If the template does not parse.
        """
        if not template or not template.strip():
            template = self.get_default_template(route_name)
        else:
            self._registry.get(route_name)
        self._renderer.validate(template)

        row = await self._templates.save_template(
            sales_channel_id, route_name, template, entity_name=entity_name
        )
        logger.info("Saved SEO URL template for %s [%s]", route_name, sales_channel_id or "default")
        return row
