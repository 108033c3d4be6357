"""Generator contract for producing SEO URLs per route."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import Any, Protocol
from uuid import UUID


@dataclass
class SeoUrlTuple:
    """A generated SEO URL for one entity, not yet persisted."""

    foreign_key: UUID
    path_info: str
    seo_path_info: str
    is_canonical: bool = True
    is_modified: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class SeoUrlGenerator(Protocol):
    """Protocol for per-route SEO URL generators.

    A generator knows which entities exist for its route and how to build
    their rendering context. It is registered once per route name.
    """

    route_name: str
    """Logical route the generated paths belong to (e.g. ``frontend.detail.page``)."""

    default_template: str
    """Built-in template used when no override is stored."""

    async def load_contexts(
        self,
        sales_channel_id: UUID,
        ids: Iterable[UUID] | None = None,
        *,
        limit: int | None = None,
    ) -> Mapping[UUID, Mapping[str, Any]]:
        """Return the template rendering context per entity id.

        Ids that no longer exist or do not qualify are omitted. With ``ids``
        of ``None`` up to ``limit`` sample entities of the route are loaded,
        which backs template previews and the variable picker.
        """
        ...

    async def generate_seo_urls(
        self, sales_channel_id: UUID, ids: Iterable[UUID], template: str
    ) -> list[SeoUrlTuple]:
        """Render ``template`` for every qualifying id.

        Args:
            sales_channel_id: Sales channel the paths are generated for.
            ids: Entity ids to generate paths for.
            template: The validated template source.

        Returns:
            One tuple per entity that qualifies.
        """
        ...
