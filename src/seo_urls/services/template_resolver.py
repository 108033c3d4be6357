"""Template lookup and storage for (sales channel, route) pairs."""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from seo_urls.models.seo_url_template import SeoUrlTemplate


class TemplateResolver:
    """Resolve which template string applies to a route in a sales channel.

    Lookup order:
    1. Override for this exact sales channel and route
    2. Global override (``sales_channel_id IS NULL``) for the route
    3. The generator's built-in default
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_template(
        self, sales_channel_id: UUID | None, route_name: str
    ) -> SeoUrlTemplate | None:
        """Return the stored template row for exactly this scope, if any."""
        stmt = select(SeoUrlTemplate).where(SeoUrlTemplate.route_name == route_name)
        if sales_channel_id is None:
            stmt = stmt.where(SeoUrlTemplate.sales_channel_id.is_(None))
        else:
            stmt = stmt.where(SeoUrlTemplate.sales_channel_id == sales_channel_id)

        result = await self._session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def get_template_string(
        self, sales_channel_id: UUID, route_name: str, default_template: str
    ) -> str:
        template = await self.find_template(sales_channel_id, route_name)
        if template is None:
            template = await self.find_template(None, route_name)

        return template.template if template is not None else default_template

    async def save_template(
        self,
        sales_channel_id: UUID | None,
        route_name: str,
        template: str,
        *,
        entity_name: str | None = None,
    ) -> SeoUrlTemplate:
        """Create or update the template row for this exact scope.

        The template is stored as given; callers validate it first.
        """
        row = await self.find_template(sales_channel_id, route_name)
        if row is None:
            row = SeoUrlTemplate(
                id=uuid4(),
                sales_channel_id=sales_channel_id,
                route_name=route_name,
                entity_name=entity_name,
                template=template,
                is_valid=True,
            )
            self._session.add(row)
        else:
            row.template = template
            row.is_valid = True
            if entity_name is not None:
                row.entity_name = entity_name

        await self._session.flush()
        return row
