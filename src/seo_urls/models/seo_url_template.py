"""SeoUrlTemplate model: per-channel override of a route's URL template."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from seo_urls.models.base import Base


class SeoUrlTemplate(Base):
    """Template override for a route.

    ``sales_channel_id`` of ``None`` is the global default used by every
    sales channel that has no override of its own.
    """

    __tablename__ = "seo_url_template"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    sales_channel_id: Mapped[UUID | None] = mapped_column(Uuid, index=True)
    route_name: Mapped[str] = mapped_column(String(255))
    entity_name: Mapped[str | None] = mapped_column(String(64))
    template: Mapped[str] = mapped_column(Text)
    is_valid: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("sales_channel_id", "route_name", name="uq_seo_url_template_channel_route"),
    )

    def __repr__(self) -> str:
        scope = self.sales_channel_id or "default"
        return f"<SeoUrlTemplate {self.route_name} [{scope}]>"
