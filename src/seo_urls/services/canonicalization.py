"""Canonicalization of generated SEO URLs against the stored history.

This module implements the write side of a generation pass:
1. Load the current canonical row per foreign key (the canonical index)
2. For every generated tuple decide: insert, skip (unchanged), or skip
   (manually modified). A changed path inserts a new canonical row and
   obsoletes the previous one; paths are never updated in place.
3. Bulk insert new rows in chunks
4. Soft-delete rows of entities that are no longer generated
5. Invalidate duplicate paths in the sales channel (first created wins)

The service never commits. Callers own the transaction so a pass is applied
as one unit of work.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, TypeVar
from uuid import UUID, uuid4

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from seo_urls.config import settings
from seo_urls.errors import SeoUrlStorageError
from seo_urls.generators.base import SeoUrlTuple
from seo_urls.models.seo_url import SeoUrl
from seo_urls.utils.slugify import normalize_path, with_leading_slash

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Upper bound for bound parameters in a single IN (...) clause
IN_CLAUSE_CHUNK_SIZE = 1000


@dataclass
class UpdateResult:
    """Counters describing what a generation pass changed."""

    inserted: int = 0
    obsoleted: int = 0
    deleted: int = 0
    restored: int = 0
    skipped_modified: int = 0
    unchanged: int = 0
    invalidated: int = 0


@dataclass
class _CanonicalEntry:
    id: UUID
    seo_path_info: str
    is_modified: bool
    is_deleted: bool


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``items`` with at most ``size`` elements."""
    for start in range(0, len(items), size):
        yield items[start : start + size]


def coerce_seo_url(seo_url: SeoUrlTuple | Mapping[str, Any]) -> SeoUrlTuple:
    """Accept generator tuples as dataclasses or plain mappings.

    ``seo_path_info`` is normalized the way lookups strip it, so a caller
    supplied ``"/foo/"`` is stored as ``"foo"``.
    """
    if isinstance(seo_url, SeoUrlTuple):
        return replace(seo_url, seo_path_info=normalize_path(seo_url.seo_path_info))
    return SeoUrlTuple(
        foreign_key=seo_url["foreign_key"],
        path_info=seo_url["path_info"],
        seo_path_info=normalize_path(seo_url["seo_path_info"]),
        is_canonical=seo_url.get("is_canonical", True),
        is_modified=seo_url.get("is_modified", False),
    )


class CanonicalizationService:
    """Reconcile generated SEO URLs with the stored ``seo_url`` rows.

    Usage:
        async with async_session_factory() as session:
            service = CanonicalizationService(session)
            result = await service.update_seo_urls(channel_id, route, ids, seo_urls)
            await session.commit()
    """

    def __init__(self, session: AsyncSession, *, chunk_size: int | None = None) -> None:
        self._session = session
        self._chunk_size = chunk_size or settings.seo_url_insert_chunk_size

    async def update_seo_urls(
        self,
        sales_channel_id: UUID,
        route_name: str,
        foreign_keys: Iterable[UUID],
        seo_urls: Iterable[SeoUrlTuple | Mapping[str, Any]],
    ) -> UpdateResult:
        """Persist a generation pass for one sales channel and route.

        Args:
            sales_channel_id: Sales channel the pass runs for.
            route_name: Route the tuples belong to.
            foreign_keys: The full set of entity ids being (re)generated.
            seo_urls: Generated tuples, at most one canonical per entity.

        Returns:
            UpdateResult with per-decision counters.

        Raises:
            SeoUrlStorageError: If a write fails. The pass should be retried in full.
        """
        foreign_keys = list(dict.fromkeys(foreign_keys))
        result = UpdateResult()

        try:
            canonicals, stale_canonical_ids = await self._find_canonical_paths(
                sales_channel_id, route_name, foreign_keys
            )

            inserts: list[dict[str, Any]] = []
            obsoleted: list[UUID] = list(stale_canonical_ids)
            restored: list[UUID] = []
            generated_fks: set[UUID] = set()

            for raw in seo_urls:
                seo_url = coerce_seo_url(raw)
                fk = seo_url.foreign_key
                generated_fks.add(fk)

                existing = canonicals.get(fk)
                if existing is not None:
                    # Manual overrides are sticky, but a returning entity revives them
                    if existing.is_modified:
                        if existing.is_deleted:
                            restored.append(existing.id)
                            existing.is_deleted = False
                        result.skipped_modified += 1
                        logger.debug("Keeping modified SEO URL for %s: %s", fk, existing.seo_path_info)
                        continue
                    if existing.seo_path_info == seo_url.seo_path_info:
                        if existing.is_deleted:
                            restored.append(existing.id)
                            existing.is_deleted = False
                        result.unchanged += 1
                        continue
                    obsoleted.append(existing.id)

                row_id = uuid4()
                inserts.append(
                    {
                        "id": row_id,
                        "sales_channel_id": sales_channel_id,
                        "route_name": route_name,
                        "foreign_key": fk,
                        "path_info": with_leading_slash(seo_url.path_info),
                        "seo_path_info": seo_url.seo_path_info,
                        "is_canonical": seo_url.is_canonical,
                        "is_modified": seo_url.is_modified,
                        "is_valid": True,
                        "is_deleted": False,
                    }
                )
                if seo_url.is_canonical:
                    canonicals[fk] = _CanonicalEntry(
                        id=row_id,
                        seo_path_info=seo_url.seo_path_info,
                        is_modified=seo_url.is_modified,
                        is_deleted=False,
                    )

            for chunk in chunked(inserts, self._chunk_size):
                await self._session.execute(insert(SeoUrl), list(chunk))
            result.inserted = len(inserts)

            result.obsoleted = await self._set_flag(obsoleted, is_canonical=False)
            result.restored = await self._set_flag(restored, is_deleted=False)
            result.deleted = await self._mark_deleted(sales_channel_id, route_name, generated_fks)
        except SQLAlchemyError as exc:
            raise SeoUrlStorageError(
                f"Failed to write SEO URLs for route {route_name} in sales channel {sales_channel_id}"
            ) from exc

        result.invalidated = await self.invalidate_duplicates(sales_channel_id)

        logger.info(
            "SEO URL pass %s/%s: %d inserted, %d obsoleted, %d deleted, %d restored, "
            "%d modified kept, %d unchanged, %d invalidated",
            sales_channel_id,
            route_name,
            result.inserted,
            result.obsoleted,
            result.deleted,
            result.restored,
            result.skipped_modified,
            result.unchanged,
            result.invalidated,
        )
        return result

    async def invalidate_duplicates(self, sales_channel_id: UUID) -> int:
        """Mark all but the first created row per duplicated path as invalid.

        Runs over the whole sales channel because a new row can collide with an
        older, untouched one. Duplicates are detected by ``seo_path_info``
        alone, regardless of route. Idempotent.

        Returns:
            Number of rows newly marked invalid.
        """
        valid = aliased(SeoUrl)
        invalid = aliased(SeoUrl)

        duplicates = (
            select(invalid.id)
            .join(
                valid,
                (valid.sales_channel_id == invalid.sales_channel_id)
                & (valid.seo_path_info == invalid.seo_path_info)
                & (valid.auto_increment < invalid.auto_increment),
            )
            .where(valid.sales_channel_id == sales_channel_id)
            .where(valid.is_deleted.is_(False))
            .where(invalid.is_deleted.is_(False))
            .distinct()
        )

        stmt = (
            update(SeoUrl)
            .where(SeoUrl.id.in_(duplicates))
            .where(SeoUrl.is_valid.is_(True))
            .values(is_valid=False, updated_at=func.now())
            .execution_options(synchronize_session="fetch")
        )

        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise SeoUrlStorageError(
                f"Failed to invalidate duplicate SEO URLs in sales channel {sales_channel_id}"
            ) from exc

        invalidated = result.rowcount or 0  # type: ignore[attr-defined]
        if invalidated:
            logger.info("Invalidated %d duplicate SEO URLs in %s", invalidated, sales_channel_id)
        return invalidated

    async def _find_canonical_paths(
        self,
        sales_channel_id: UUID,
        route_name: str,
        foreign_keys: Sequence[UUID],
    ) -> tuple[dict[UUID, _CanonicalEntry], list[UUID]]:
        """Build the canonical index for the given foreign keys.

        If a race left several canonical rows for one foreign key, the newest
        is kept in the index and the older ids are returned for obsoletion.
        """
        canonicals: dict[UUID, _CanonicalEntry] = {}
        stale: list[UUID] = []

        for chunk in chunked(foreign_keys, IN_CLAUSE_CHUNK_SIZE):
            stmt = (
                select(
                    SeoUrl.foreign_key,
                    SeoUrl.id,
                    SeoUrl.seo_path_info,
                    SeoUrl.is_modified,
                    SeoUrl.is_deleted,
                )
                .where(SeoUrl.route_name == route_name)
                .where(SeoUrl.sales_channel_id == sales_channel_id)
                .where(SeoUrl.is_canonical.is_(True))
                .where(SeoUrl.foreign_key.in_(chunk))
                .order_by(SeoUrl.auto_increment)
            )
            rows = await self._session.execute(stmt)

            for fk, row_id, seo_path_info, is_modified, is_deleted in rows:
                previous = canonicals.get(fk)
                if previous is not None:
                    stale.append(previous.id)
                canonicals[fk] = _CanonicalEntry(
                    id=row_id,
                    seo_path_info=seo_path_info,
                    is_modified=is_modified,
                    is_deleted=is_deleted,
                )

        if stale:
            logger.warning("Found %d superseded canonical SEO URLs for %s", len(stale), route_name)
        return canonicals, stale

    async def _set_flag(self, ids: Sequence[UUID], **values: bool) -> int:
        for chunk in chunked(ids, IN_CLAUSE_CHUNK_SIZE):
            await self._session.execute(
                update(SeoUrl)
                .where(SeoUrl.id.in_(chunk))
                .values(updated_at=func.now(), **values)
                .execution_options(synchronize_session="fetch")
            )
        return len(ids)

    async def _mark_deleted(
        self,
        sales_channel_id: UUID,
        route_name: str,
        generated_fks: set[UUID],
    ) -> int:
        """Soft-delete every entity of the route that was not generated in this pass.

        Returns:
            Number of foreign keys marked deleted.
        """
        stmt = (
            select(SeoUrl.foreign_key)
            .where(SeoUrl.sales_channel_id == sales_channel_id)
            .where(SeoUrl.route_name == route_name)
            .where(SeoUrl.is_deleted.is_(False))
            .distinct()
        )
        existing_fks = (await self._session.execute(stmt)).scalars().all()
        gone = [fk for fk in existing_fks if fk not in generated_fks]

        for chunk in chunked(gone, IN_CLAUSE_CHUNK_SIZE):
            await self._session.execute(
                update(SeoUrl)
                .where(SeoUrl.sales_channel_id == sales_channel_id)
                .where(SeoUrl.route_name == route_name)
                .where(SeoUrl.foreign_key.in_(chunk))
                .where(SeoUrl.is_deleted.is_(False))
                .values(is_deleted=True, updated_at=func.now())
                .execution_options(synchronize_session="fetch")
            )

        if gone:
            logger.debug("Soft-deleted SEO URLs of %d entities for %s", len(gone), route_name)
        return len(gone)
