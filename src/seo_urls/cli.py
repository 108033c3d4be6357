"""CLI for the SEO URL engine.

Commands:
    init-db                          - Create database tables
    resolve <channel> <path>         - Resolve a request path
    list-urls <channel>              - List stored SEO URLs
    validate-template <template>     - Check that a template parses
    set-template <route> <template>  - Store a template override
    invalidate <channel>             - Re-run duplicate invalidation
"""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated
from uuid import UUID

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy import select

from seo_urls.config import settings
from seo_urls.db import async_session_factory, init_db
from seo_urls.errors import InvalidTemplateError
from seo_urls.models import SeoUrl
from seo_urls.resolution import resolve_seo_path
from seo_urls.services.canonicalization import CanonicalizationService
from seo_urls.services.template_resolver import TemplateResolver
from seo_urls.templating import SeoUrlTemplateRenderer

app = typer.Typer(
    name="seo-urls",
    help="SEO URLs — generation, canonicalization and path resolution for storefront entities",
    no_args_is_help=True,
)
console = Console()


def run_async(coro):
    """Run an async coroutine in sync context."""
    return asyncio.run(coro)


def parse_uuid(value: str, label: str = "UUID") -> UUID:
    try:
        return UUID(value)
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid {label}: {value}")
        raise typer.Exit(1) from None


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("init-db")
def init_db_command():
    """Create the seo_url and seo_url_template tables."""
    run_async(init_db())
    console.print("[green]Database initialized[/green]")


@app.command()
def resolve(
    sales_channel_id: Annotated[str, typer.Argument(help="Sales channel ID (UUID)")],
    path: Annotated[str, typer.Argument(help="Request path, e.g. /wireless-headphones")],
):
    """Resolve a request path to its internal route path."""
    channel = parse_uuid(sales_channel_id, "sales channel ID")

    async def _resolve():
        async with async_session_factory() as session:
            return await resolve_seo_path(session, channel, path)

    resolved = run_async(_resolve())

    lines = [
        f"[bold]Path Info:[/bold] {resolved.path_info}",
        f"[bold]Canonical:[/bold] {resolved.is_canonical}",
    ]
    if resolved.canonical_path_info:
        lines.append(f"[bold]Redirect To:[/bold] {resolved.canonical_path_info}")
    if resolved.id is None:
        lines.append("[dim]No SEO URL matched, default routing applies[/dim]")

    console.print(Panel("\n".join(lines), title=f"Resolve: {path}"))


@app.command("list-urls")
def list_urls(
    sales_channel_id: Annotated[str, typer.Argument(help="Sales channel ID (UUID)")],
    route: Annotated[str | None, typer.Option(help="Only show this route")] = None,
    show_all: Annotated[
        bool, typer.Option("--all", help="Include non-canonical, invalid and deleted rows")
    ] = False,
    limit: Annotated[int, typer.Option(help="Maximum rows to show")] = 50,
):
    """List stored SEO URLs for a sales channel."""
    channel = parse_uuid(sales_channel_id, "sales channel ID")

    async def _list():
        async with async_session_factory() as session:
            stmt = select(SeoUrl).where(SeoUrl.sales_channel_id == channel)
            if route:
                stmt = stmt.where(SeoUrl.route_name == route)
            if not show_all:
                stmt = (
                    stmt.where(SeoUrl.is_canonical.is_(True))
                    .where(SeoUrl.is_valid.is_(True))
                    .where(SeoUrl.is_deleted.is_(False))
                )
            stmt = stmt.order_by(SeoUrl.auto_increment).limit(limit)
            result = await session.execute(stmt)
            return list(result.scalars().all())

    rows = run_async(_list())
    if not rows:
        console.print("[yellow]No SEO URLs found[/yellow]")
        return

    table = Table(title=f"SEO URLs ({len(rows)})")
    table.add_column("#", justify="right")
    table.add_column("Route")
    table.add_column("Path Info")
    table.add_column("SEO Path")
    table.add_column("Flags")
    for row in rows:
        flags = []
        if row.is_canonical:
            flags.append("canonical")
        if row.is_modified:
            flags.append("modified")
        if not row.is_valid:
            flags.append("[red]invalid[/red]")
        if row.is_deleted:
            flags.append("[dim]deleted[/dim]")
        table.add_row(
            str(row.auto_increment),
            row.route_name,
            row.path_info,
            row.seo_path_info,
            ", ".join(flags),
        )
    console.print(table)


@app.command("validate-template")
def validate_template(
    template: Annotated[str, typer.Argument(help="Template source, e.g. '{{ product.name }}'")],
):
    """Check that a template parses."""
    try:
        SeoUrlTemplateRenderer().validate(template)
    except InvalidTemplateError as exc:
        console.print(f"[red]Invalid:[/red] {exc}")
        raise typer.Exit(1) from None
    console.print("[green]Template is valid[/green]")


@app.command("set-template")
def set_template(
    route_name: Annotated[str, typer.Argument(help="Route name, e.g. frontend.detail.page")],
    template: Annotated[str, typer.Argument(help="Template source")],
    sales_channel_id: Annotated[
        str | None, typer.Option("--channel", help="Sales channel ID (omit for the global default)")
    ] = None,
):
    """Store a template override for a route."""
    channel = parse_uuid(sales_channel_id, "sales channel ID") if sales_channel_id else None

    try:
        SeoUrlTemplateRenderer().validate(template)
    except InvalidTemplateError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from None

    async def _save():
        async with async_session_factory() as session:
            await TemplateResolver(session).save_template(channel, route_name, template)
            await session.commit()

    run_async(_save())
    console.print(f"[green]Saved template for {route_name} ({channel or 'default'})[/green]")


@app.command()
def invalidate(
    sales_channel_id: Annotated[str, typer.Argument(help="Sales channel ID (UUID)")],
):
    """Re-run duplicate invalidation for a sales channel."""
    channel = parse_uuid(sales_channel_id, "sales channel ID")

    async def _invalidate():
        async with async_session_factory() as session:
            count = await CanonicalizationService(session).invalidate_duplicates(channel)
            await session.commit()
            return count

    count = run_async(_invalidate())
    console.print(f"Invalidated [bold]{count}[/bold] duplicate SEO URLs")


if __name__ == "__main__":
    app()
