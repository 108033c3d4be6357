"""Shared pytest fixtures for SEO URL tests."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Callable, Mapping
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from seo_urls.generators import EntitySeoUrlGenerator, GeneratorRegistry
from seo_urls.models import Base, SeoUrl

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


# In-memory SQLite by default; point at PostgreSQL to run against production dialect
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

PRODUCT_ROUTE = "frontend.detail.page"
PRODUCT_TEMPLATE = "{{ product.name }}/{{ product.number }}"


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine with a fresh schema.

    This creates all tables at the start and drops them at the end.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    else:
        engine = create_async_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(
    test_engine: AsyncEngine,
) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session bound to the per-test schema."""
    async_session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def sales_channel_id() -> UUID:
    return uuid4()


# Type aliases for factory fixtures
MakeSeoUrl = Callable[..., SeoUrl]
FetchSeoUrls = Callable[..., Any]


@pytest.fixture
def make_seo_url() -> MakeSeoUrl:
    """Factory fixture for creating SeoUrl instances."""

    def _make(
        *,
        sales_channel_id: UUID,
        seo_path_info: str,
        path_info: str | None = None,
        foreign_key: UUID | None = None,
        route_name: str = PRODUCT_ROUTE,
        is_canonical: bool = True,
        is_modified: bool = False,
        is_valid: bool = True,
        is_deleted: bool = False,
    ) -> SeoUrl:
        foreign_key = foreign_key or uuid4()
        return SeoUrl(
            id=uuid4(),
            sales_channel_id=sales_channel_id,
            route_name=route_name,
            foreign_key=foreign_key,
            path_info=path_info or f"/detail/{foreign_key.hex}",
            seo_path_info=seo_path_info,
            is_canonical=is_canonical,
            is_modified=is_modified,
            is_valid=is_valid,
            is_deleted=is_deleted,
        )

    return _make


@pytest.fixture
def fetch_seo_urls(db_session: AsyncSession) -> FetchSeoUrls:
    """Load SeoUrl rows fresh from the database, in insertion order."""

    async def _fetch(sales_channel_id: UUID, foreign_key: UUID | None = None) -> list[SeoUrl]:
        stmt = select(SeoUrl).where(SeoUrl.sales_channel_id == sales_channel_id)
        if foreign_key is not None:
            stmt = stmt.where(SeoUrl.foreign_key == foreign_key)
        stmt = stmt.order_by(SeoUrl.auto_increment).execution_options(populate_existing=True)
        result = await db_session.execute(stmt)
        return list(result.scalars().all())

    return _fetch


@pytest.fixture
def catalog() -> dict[UUID, dict[str, Any]]:
    """Mutable in-memory product catalog: product id -> product fields."""
    return {}


@pytest.fixture
def product_generator(catalog: dict[UUID, dict[str, Any]]) -> EntitySeoUrlGenerator:
    """Product detail page generator backed by the ``catalog`` fixture."""

    async def load_products(
        sales_channel_id: UUID, ids: list[UUID]
    ) -> Mapping[UUID, Mapping[str, Any]]:
        return {pid: {"product": catalog[pid]} for pid in ids if pid in catalog}

    async def sample_products(
        sales_channel_id: UUID, limit: int
    ) -> Mapping[UUID, Mapping[str, Any]]:
        return {pid: {"product": product} for pid, product in list(catalog.items())[:limit]}

    return EntitySeoUrlGenerator(
        route_name=PRODUCT_ROUTE,
        default_template=PRODUCT_TEMPLATE,
        path_info_pattern="/detail/{id}",
        context_loader=load_products,
        sample_loader=sample_products,
    )


@pytest.fixture
def registry(product_generator: EntitySeoUrlGenerator) -> GeneratorRegistry:
    return GeneratorRegistry([product_generator])
