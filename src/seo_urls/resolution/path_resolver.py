"""Resolve incoming request paths against the ``seo_url`` table.

This runs on the request hot path: one indexed read, plus one more when the
matched path is not canonical and a redirect target is needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from seo_urls.models.seo_url import SeoUrl
from seo_urls.utils.slugify import with_leading_slash

logger = logging.getLogger(__name__)


@dataclass
class ResolvedSeoPath:
    """Result of resolving a request path.

    ``path_info`` is the internal route path when an SEO row matched, or the
    request path itself when nothing matched (default routing applies) or the
    matched path has been superseded. ``canonical_path_info`` is set when the
    caller should redirect.
    """

    path_info: str
    is_canonical: bool
    canonical_path_info: str | None = None
    id: UUID | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"pathInfo": self.path_info, "isCanonical": self.is_canonical}
        if self.canonical_path_info is not None:
            data["canonicalPathInfo"] = self.canonical_path_info
        return data


async def resolve_seo_path(
    session: AsyncSession,
    sales_channel_id: UUID,
    path_info: str,
) -> ResolvedSeoPath:
    """Resolve a request path to its internal path and canonical redirect target.

    Args:
        session: Database session (read only).
        sales_channel_id: Sales channel the request belongs to.
        path_info: Raw request path, leading slash optional.

    Returns:
        ResolvedSeoPath with a leading-slash ``path_info``.
    """
    seo_path_info = path_info.lstrip("/")
    if seo_path_info == "":
        return ResolvedSeoPath(path_info="/", is_canonical=False)

    stmt = (
        select(SeoUrl.id, SeoUrl.path_info, SeoUrl.is_canonical)
        .where(SeoUrl.sales_channel_id == sales_channel_id)
        .where(SeoUrl.seo_path_info == seo_path_info)
        .where(SeoUrl.is_valid.is_(True))
        .limit(1)
    )
    row = (await session.execute(stmt)).first()

    if row is None:
        resolved = ResolvedSeoPath(path_info=seo_path_info, is_canonical=False)
    else:
        resolved = ResolvedSeoPath(path_info=row.path_info, is_canonical=row.is_canonical, id=row.id)

    if not resolved.is_canonical:
        resolved.canonical_path_info = await _find_canonical_seo_path(
            session, sales_channel_id, resolved.path_info, exclude_id=resolved.id
        )
        # Superseded SEO path: report the requested path, the caller redirects
        if resolved.id is not None and resolved.canonical_path_info is not None:
            resolved.path_info = seo_path_info

    resolved.path_info = with_leading_slash(resolved.path_info)
    logger.debug(
        "Resolved %s -> %s (canonical=%s, redirect=%s)",
        path_info,
        resolved.path_info,
        resolved.is_canonical,
        resolved.canonical_path_info,
    )
    return resolved


async def _find_canonical_seo_path(
    session: AsyncSession,
    sales_channel_id: UUID,
    path_info: str,
    *,
    exclude_id: UUID | None,
) -> str | None:
    """Find the canonical friendly path for an internal ``path_info``."""
    stripped = path_info.lstrip("/")
    stmt = (
        select(SeoUrl.seo_path_info)
        .where(SeoUrl.sales_channel_id == sales_channel_id)
        .where(SeoUrl.path_info.in_([with_leading_slash(stripped), stripped]))
        .where(SeoUrl.is_valid.is_(True))
        .where(SeoUrl.is_canonical.is_(True))
        .limit(1)
    )
    if exclude_id is not None:
        stmt = stmt.where(SeoUrl.id != exclude_id)

    seo_path_info = (await session.execute(stmt)).scalar_one_or_none()
    return with_leading_slash(seo_path_info) if seo_path_info is not None else None
