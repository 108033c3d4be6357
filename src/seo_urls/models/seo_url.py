"""SeoUrl model: one friendly path for one entity in one sales channel."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, DateTime, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from seo_urls.models.base import Base


class SeoUrl(Base):
    """A generated (or manually edited) SEO path for an entity route.

    Rows are append-mostly: a changed path is always a new row plus the
    previous canonical row losing its ``is_canonical`` flag. Deletion is
    logical via ``is_deleted`` so historic paths can still redirect.

    ``auto_increment`` is the insertion order. Duplicate invalidation keeps
    the row with the smallest value.
    """

    __tablename__ = "seo_url"

    auto_increment: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    id: Mapped[UUID] = mapped_column(Uuid, unique=True)
    sales_channel_id: Mapped[UUID] = mapped_column(Uuid)
    route_name: Mapped[str] = mapped_column(String(255))
    foreign_key: Mapped[UUID] = mapped_column(Uuid)
    path_info: Mapped[str] = mapped_column(String(750))
    seo_path_info: Mapped[str] = mapped_column(String(750))

    is_canonical: Mapped[bool] = mapped_column(Boolean, default=True)
    is_modified: Mapped[bool] = mapped_column(Boolean, default=False)
    is_valid: Mapped[bool] = mapped_column(Boolean, default=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("ix_seo_url_lookup", "sales_channel_id", "seo_path_info", "is_valid"),
        Index(
            "ix_seo_url_canonical",
            "sales_channel_id",
            "route_name",
            "foreign_key",
            "is_canonical",
        ),
        Index("ix_seo_url_path_info", "sales_channel_id", "path_info"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<SeoUrl {self.route_name} {self.path_info} -> {self.seo_path_info}>"
