"""Tests for the FastAPI application."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from seo_urls import __version__
from seo_urls.app import app
from seo_urls.db import get_session
from seo_urls.generators import GeneratorRegistry

from conftest import PRODUCT_ROUTE, PRODUCT_TEMPLATE

if TYPE_CHECKING:
    from conftest import MakeSeoUrl


async def test_health() -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": __version__}


@pytest.fixture
async def client(
    db_session: AsyncSession, registry: GeneratorRegistry
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client wired to the test session and generator registry."""

    async def _get_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    original_registry = app.state.registry
    app.state.registry = registry
    app.dependency_overrides[get_session] = _get_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.clear()
        app.state.registry = original_registry


@pytest.mark.integration
class TestSeoUrlEndpoints:
    """Tests for resolution and template administration endpoints."""

    async def test_resolve(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        sales_channel_id: UUID,
        make_seo_url: MakeSeoUrl,
    ) -> None:
        db_session.add(
            make_seo_url(
                sales_channel_id=sales_channel_id,
                path_info="/detail/1",
                seo_path_info="wireless-headphones",
            )
        )
        await db_session.flush()

        response = await client.get(
            "/seo-urls/resolve",
            params={"sales_channel_id": str(sales_channel_id), "path": "/wireless-headphones"},
        )

        assert response.status_code == 200
        assert response.json() == {"pathInfo": "/detail/1", "isCanonical": True}

    async def test_validate_template(self, client: AsyncClient) -> None:
        ok = await client.post("/seo-url-templates/validate", json={"template": PRODUCT_TEMPLATE})
        broken = await client.post("/seo-url-templates/validate", json={"template": "{{ x"})

        assert ok.json() == {"valid": True, "message": None}
        assert broken.status_code == 200
        assert broken.json()["valid"] is False
        assert broken.json()["message"].startswith("Syntax error: ")

    async def test_preview(
        self,
        client: AsyncClient,
        sales_channel_id: UUID,
        catalog: dict[UUID, dict[str, Any]],
    ) -> None:
        pid = uuid4()
        catalog[pid] = {"name": "Red Shoe", "number": "RS-9"}

        response = await client.post(
            "/seo-url-templates/preview",
            json={
                "sales_channel_id": str(sales_channel_id),
                "route_name": PRODUCT_ROUTE,
                "template": PRODUCT_TEMPLATE,
                "ids": [str(pid)],
            },
        )

        assert response.status_code == 200
        assert response.json() == [
            {"foreignKey": str(pid), "seoPathInfo": "red-shoe/rs-9", "error": None}
        ]

    async def test_preview_without_ids(
        self,
        client: AsyncClient,
        sales_channel_id: UUID,
        catalog: dict[UUID, dict[str, Any]],
    ) -> None:
        pid = uuid4()
        catalog[pid] = {"name": "Red Shoe", "number": "RS-9"}

        response = await client.post(
            "/seo-url-templates/preview",
            json={
                "sales_channel_id": str(sales_channel_id),
                "route_name": PRODUCT_ROUTE,
                "template": "{{ product.name }}",
            },
        )

        assert response.status_code == 200
        assert response.json() == [{"foreignKey": str(pid), "seoPathInfo": "red-shoe", "error": None}]

    async def test_context(
        self,
        client: AsyncClient,
        sales_channel_id: UUID,
        catalog: dict[UUID, dict[str, Any]],
    ) -> None:
        catalog[uuid4()] = {"name": "Red Shoe", "number": "RS-9"}

        response = await client.post(
            "/seo-url-templates/context",
            json={"sales_channel_id": str(sales_channel_id), "route_name": PRODUCT_ROUTE},
        )

        assert response.status_code == 200
        assert response.json() == {
            "routeName": PRODUCT_ROUTE,
            "context": {"product": {"name": "Red Shoe", "number": "RS-9"}},
        }

    async def test_preview_syntax_error_is_422(
        self, client: AsyncClient, sales_channel_id: UUID
    ) -> None:
        response = await client.post(
            "/seo-url-templates/preview",
            json={
                "sales_channel_id": str(sales_channel_id),
                "route_name": PRODUCT_ROUTE,
                "template": "{{ product.name",
            },
        )

        assert response.status_code == 422
        assert response.json()["detail"].startswith("Syntax error: ")

    async def test_default_template(self, client: AsyncClient) -> None:
        response = await client.get(f"/seo-url-templates/default/{PRODUCT_ROUTE}")

        assert response.status_code == 200
        assert response.json() == {"routeName": PRODUCT_ROUTE, "defaultTemplate": PRODUCT_TEMPLATE}

    async def test_unknown_route_is_404(self, client: AsyncClient) -> None:
        response = await client.get("/seo-url-templates/default/frontend.navigation.page")

        assert response.status_code == 404
        assert response.json() == {
            "detail": "SeoUrlGenerator with frontend.navigation.page not found."
        }

    async def test_save_template(self, client: AsyncClient, sales_channel_id: UUID) -> None:
        response = await client.put(
            "/seo-url-templates",
            json={
                "route_name": PRODUCT_ROUTE,
                "template": "p/{{ product.number }}",
                "sales_channel_id": str(sales_channel_id),
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["salesChannelId"] == str(sales_channel_id)
        assert body["routeName"] == PRODUCT_ROUTE
        assert body["template"] == "p/{{ product.number }}"

    async def test_save_blank_template_restores_default(self, client: AsyncClient) -> None:
        response = await client.put(
            "/seo-url-templates", json={"route_name": PRODUCT_ROUTE, "template": ""}
        )

        assert response.status_code == 200
        assert response.json()["template"] == PRODUCT_TEMPLATE
        assert response.json()["salesChannelId"] is None
