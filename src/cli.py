"""CLI interface for folio."""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from folio.config import load_config, merge_cli_overrides
from folio.content.backup import export_backup, import_backup
from folio.content.lifecycle import ReadContext
from folio.content.migrate import migrate_posts
from folio.content.models import ContentType
from folio.content.service import ContentService
from folio.errors import UnauthorizedError

app = typer.Typer(
    name="folio",
    help="Inspect and maintain a file-backed blog content store.",
)

console = Console()

_TYPES = {
    "post": ContentType.POST,
    "page": ContentType.PAGE,
    "category": ContentType.CATEGORY,
    "tag": ContentType.TAG,
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from folio import __version__

        console.print(f"folio {__version__}")
        raise typer.Exit()


def _content_type(name: str) -> ContentType:
    try:
        return _TYPES[name]
    except KeyError:
        console.print(f"[red]Unknown content type:[/red] {name} (use {', '.join(_TYPES)})")
        raise typer.Exit(2) from None


def _service(ctx: typer.Context) -> ContentService:
    return ctx.obj


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .folio.toml file."),
    ] = None,
    content_root: Annotated[
        Optional[Path],
        typer.Option("--content-root", help="Directory that holds content/."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log storage activity."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """folio - file-backed content store."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    cfg = merge_cli_overrides(
        load_config(config),
        content_root=str(content_root) if content_root is not None else None,
    )
    ctx.obj = ContentService.from_config(cfg)


@app.command()
def posts(
    ctx: typer.Context,
    locale: Annotated[Optional[str], typer.Option("--locale", "-l")] = None,
    drafts: Annotated[bool, typer.Option("--drafts", help="Include drafts.")] = False,
    scheduled: Annotated[
        bool, typer.Option("--scheduled", help="Include posts scheduled for later.")
    ] = False,
    preview: Annotated[bool, typer.Option("--preview", help="Show everything.")] = False,
) -> None:
    """List posts, newest first."""
    context = ReadContext(allow_draft=drafts, allow_future_scheduled=scheduled, preview=preview)
    items = _service(ctx).get_posts(locale, context)
    if not items:
        console.print("[dim]No posts.[/dim]")
        return

    table = Table(title=f"Posts ({locale or 'legacy'})")
    table.add_column("Date")
    table.add_column("Slug")
    table.add_column("Title")
    table.add_column("Status")
    for post in items:
        table.add_row(post.date[:10], post.slug, post.title, post.status.value)
    console.print(table)


@app.command()
def show(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Slug to resolve.")],
    locale: Annotated[Optional[str], typer.Option("--locale", "-l")] = None,
    type_: Annotated[str, typer.Option("--type", "-t", help="post, page, category or tag.")] = "post",
    preview: Annotated[bool, typer.Option("--preview", help="Allow drafts and scheduled.")] = False,
) -> None:
    """Resolve one entity through the locale fallback chain and print it as JSON."""
    content_type = _content_type(type_)
    service = _service(ctx)
    found = service.resolver.resolve(content_type, slug, locale, preview, preview)
    if found is None:
        console.print(f"[yellow]Not found:[/yellow] {type_} {slug}")
        raise typer.Exit(1)
    console.print(
        f"[dim]{type_} {slug} resolved at locale {found.locale or 'legacy'} "
        f"({found.format.value})[/dim]"
    )
    console.print_json(found.entity.to_json())


@app.command()
def search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Search text (2+ characters).")],
    locale: Annotated[Optional[str], typer.Option("--locale", "-l")] = None,
    type_: Annotated[str, typer.Option("--type", "-t", help="all, post or page.")] = "all",
    as_json: Annotated[bool, typer.Option("--json", help="Emit JSON.")] = False,
) -> None:
    """Rank posts and pages against a query."""
    if type_ not in ("all", "post", "page"):
        console.print(f"[red]Unknown search type:[/red] {type_}")
        raise typer.Exit(2)
    hits = _service(ctx).search(query, locale, type_)  # type: ignore[arg-type]

    if as_json:
        payload = {
            "query": query.strip(),
            "total": len(hits),
            "results": [
                {
                    "type": hit.kind,
                    "slug": hit.item.slug,
                    "title": hit.item.title,
                    "locale": hit.locale,
                    "relevance": hit.score,
                }
                for hit in hits
            ],
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    if not hits:
        console.print("[dim]No results.[/dim]")
        return
    table = Table(title=f"Results for {query.strip()!r}")
    table.add_column("Score", justify="right")
    table.add_column("Type")
    table.add_column("Locale")
    table.add_column("Slug")
    table.add_column("Title")
    for hit in hits:
        table.add_row(f"{hit.score:.1f}", hit.kind, hit.locale or "-", hit.item.slug, hit.item.title)
    console.print(table)


@app.command(name="export")
def export_cmd(
    ctx: typer.Context,
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write to a file instead of stdout.")
    ] = None,
) -> None:
    """Export every locale's posts and pages as a JSON backup."""
    text = json.dumps(export_backup(_service(ctx)), indent=2)
    if output is None:
        typer.echo(text)
        return
    output.write_text(text, encoding="utf-8")
    console.print(f"[green]Backup written to[/green] {output}")


@app.command(name="import")
def import_cmd(
    ctx: typer.Context,
    backup_file: Annotated[Path, typer.Argument(help="Backup JSON produced by 'folio export'.")],
    token: Annotated[
        Optional[str], typer.Option("--token", envvar="FOLIO_TOKEN", help="Write token.")
    ] = None,
) -> None:
    """Import posts and pages from a JSON backup."""
    try:
        payload = json.loads(backup_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        console.print(f"[red]Cannot read backup:[/red] {exc}")
        raise typer.Exit(1) from None

    try:
        report = import_backup(_service(ctx), payload, token=token)
    except UnauthorizedError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None

    console.print(report.summary)
    for error in report.errors:
        console.print(f"  [yellow]•[/yellow] {error}")


@app.command()
def migrate(
    ctx: typer.Context,
    locale: Annotated[
        Optional[str], typer.Option("--locale", "-l", help="Only migrate this locale.")
    ] = None,
    token: Annotated[
        Optional[str], typer.Option("--token", envvar="FOLIO_TOKEN", help="Write token.")
    ] = None,
) -> None:
    """Write a Markdown copy of every JSON post; the JSON files are kept."""
    try:
        report = migrate_posts(_service(ctx), locale, token=token)
    except UnauthorizedError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None

    console.print(report.summary)
    for error in report.errors:
        console.print(f"  [yellow]•[/yellow] {error}")
    if report.errors:
        raise typer.Exit(1)


@app.command()
def delete(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Slug to delete.")],
    locale: Annotated[Optional[str], typer.Option("--locale", "-l")] = None,
    type_: Annotated[str, typer.Option("--type", "-t", help="post, page, category or tag.")] = "post",
    token: Annotated[
        Optional[str], typer.Option("--token", envvar="FOLIO_TOKEN", help="Write token.")
    ] = None,
) -> None:
    """Delete every stored format of a slug."""
    content_type = _content_type(type_)
    service = _service(ctx)
    try:
        service.authorize(token)
    except UnauthorizedError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None

    if not service.resolver.delete(content_type, slug, locale):
        console.print(f"[yellow]Nothing deleted for[/yellow] {type_} {slug}")
        raise typer.Exit(1)
    console.print(f"[green]Deleted[/green] {type_} {slug}")
