"""FastAPI application for the SEO URL engine."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated
from uuid import UUID

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from seo_urls import __version__
from seo_urls.db import get_session, init_db
from seo_urls.errors import GeneratorNotFoundError, InvalidTemplateError, TemplateRenderError
from seo_urls.generators.registry import GeneratorRegistry
from seo_urls.services.seo_url_service import SeoUrlService


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler."""
    await init_db()
    yield


app = FastAPI(
    title="SEO URLs",
    description="SEO URL generation, canonicalization and path resolution",
    version=__version__,
    lifespan=lifespan,
)
# Applications register their generators here at startup
app.state.registry = GeneratorRegistry()


class ValidateTemplateRequest(BaseModel):
    template: str


class PreviewRequest(BaseModel):
    sales_channel_id: UUID
    route_name: str
    template: str
    ids: list[UUID] | None = None


class ContextRequest(BaseModel):
    sales_channel_id: UUID
    route_name: str


class SaveTemplateRequest(BaseModel):
    route_name: str
    template: str | None = None
    sales_channel_id: UUID | None = None
    entity_name: str | None = None


def get_service(
    request: Request, session: Annotated[AsyncSession, Depends(get_session)]
) -> SeoUrlService:
    return SeoUrlService(session, request.app.state.registry)


ServiceDep = Annotated[SeoUrlService, Depends(get_service)]


@app.exception_handler(GeneratorNotFoundError)
async def generator_not_found_handler(request: Request, exc: GeneratorNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidTemplateError)
@app.exception_handler(TemplateRenderError)
async def invalid_template_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/seo-urls/resolve")
async def resolve(sales_channel_id: UUID, path: str, service: ServiceDep) -> dict:
    """Resolve a request path to its internal route and canonical redirect target."""
    resolved = await service.resolve_seo_path(sales_channel_id, path)
    return resolved.to_dict()


@app.post("/seo-url-templates/validate")
async def validate_template(body: ValidateTemplateRequest, service: ServiceDep) -> dict:
    validation = service.validate_template(body.template)
    return {"valid": validation.valid, "message": validation.message}


@app.post("/seo-url-templates/preview")
async def preview_template(body: PreviewRequest, service: ServiceDep) -> list[dict]:
    """Render a template against sample entities without persisting anything."""
    previews = await service.preview(body.sales_channel_id, body.route_name, body.template, body.ids)
    return [
        {
            "foreignKey": str(preview.foreign_key),
            "seoPathInfo": preview.seo_path_info,
            "error": preview.error,
        }
        for preview in previews
    ]


@app.post("/seo-url-templates/context")
async def template_context(body: ContextRequest, service: ServiceDep) -> dict:
    """Return a sample entity's rendering context for building a template."""
    context = await service.get_context(body.sales_channel_id, body.route_name)
    return {"routeName": body.route_name, "context": context}


@app.get("/seo-url-templates/default/{route_name}")
async def default_template(route_name: str, service: ServiceDep) -> dict:
    return {"routeName": route_name, "defaultTemplate": service.get_default_template(route_name)}


@app.put("/seo-url-templates")
async def save_template(
    body: SaveTemplateRequest,
    service: ServiceDep,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> dict:
    """Create or update a template override (blank template restores the default)."""
    template = await service.save_template(
        body.route_name,
        body.template,
        sales_channel_id=body.sales_channel_id,
        entity_name=body.entity_name,
    )
    await session.commit()
    return {
        "id": str(template.id),
        "salesChannelId": str(template.sales_channel_id) if template.sales_channel_id else None,
        "routeName": template.route_name,
        "template": template.template,
    }
