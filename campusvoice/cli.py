"""campusvoice CLI: operator tools for the campus complaint board."""

from __future__ import annotations

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from campusvoice import __version__
from campusvoice.config import load_settings, setup_logging

console = Console()


def _services(ctx: click.Context):
    from campusvoice.services import build_services

    return build_services(ctx.obj["settings"])


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, help="YAML settings file")
@click.pass_context
def main(ctx: click.Context, config_path: str | None):
    """campusvoice: anonymous campus complaint board.

    Screens complaints for abuse, groups similar ones into clusters and
    escalates urgency as clusters grow.
    """
    settings = load_settings(config_path)
    setup_logging(settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# ── Server ───────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default="127.0.0.1")
@click.option("--port", default=8000, type=int)
@click.option("--reload/--no-reload", default=False)
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API."""
    import uvicorn

    console.print(f"\n[bold blue]campusvoice[/] serving on http://{host}:{port}\n")
    uvicorn.run("web.backend.app.main:app", host=host, port=port, reload=reload)


# ── Screening ────────────────────────────────────────────────────────


@main.command()
@click.argument("text")
@click.pass_context
def check(ctx: click.Context, text: str):
    """Run the abuse detector over TEXT."""
    from campusvoice.moderation import profanity_list_sizes

    services = _services(ctx)
    result = services.complaints.detector.detect(text)

    if result.is_abusive:
        console.print(f"[red]ABUSIVE[/] (detected by {result.detected_by.value})")
        for word in result.detected_words:
            console.print(f"  [red]x[/] {word}")
    else:
        console.print("[green]Clean[/]")
    console.print(f"  AI fallback: {result.fallback.value}" + (
        f" ({result.fallback_error})" if result.fallback_error else ""
    ))

    sizes = profanity_list_sizes()
    console.print(
        f"  [dim]Word lists: {sizes['english']} English, {sizes['hindi']} Hindi, "
        f"{sizes['phrases']} phrases[/]"
    )


@main.command()
@click.argument("text")
@click.pass_context
def analyze(ctx: click.Context, text: str):
    """Summarise TEXT and extract its severity and keywords."""
    services = _services(ctx)
    result = services.complaints.analyzer.analyze(text)

    body = (
        f"[bold]Summary:[/] {result.summary}\n"
        f"[bold]Severity:[/] {result.severity.value}\n"
        f"[bold]Keywords:[/] {', '.join(result.keywords) or '-'}\n"
        f"[bold]Source:[/] {result.source}"
    )
    if result.fallback_reason:
        body += f" [dim]({result.fallback_reason})[/]"
    console.print(Panel(body, title="Analysis"))


# ── Maintenance ──────────────────────────────────────────────────────


@main.command()
@click.pass_context
def recalculate(ctx: click.Context):
    """Recount every cluster and repair urgency drift."""
    services = _services(ctx)
    swept = services.clusters.recalculate_urgencies()
    console.print(f"[green]Recalculated[/] {swept} clusters")


@main.command(name="prune-clusters")
@click.pass_context
def prune_clusters(ctx: click.Context):
    """Delete clusters no complaint refers to any more."""
    services = _services(ctx)
    removed = services.clusters.prune_empty_clusters()
    if not removed:
        console.print("[yellow]No empty clusters.[/]")
        return
    for cluster_id in removed:
        console.print(f"  [red]-[/] {cluster_id}")
    console.print(f"[green]Pruned[/] {len(removed)} clusters")


@main.command()
@click.pass_context
def stats(ctx: click.Context):
    """Show board-wide totals."""
    services = _services(ctx)
    totals = services.complaints.admin_stats()

    table = Table(title="campusvoice statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")
    for key, value in totals.items():
        table.add_row(key.replace("_", " "), str(value))
    console.print(table)


@main.command(name="abuse-logs")
@click.option("--limit", default=20, type=int, help="Show at most this many entries")
@click.pass_context
def abuse_logs(ctx: click.Context, limit: int):
    """List recent rejected submissions."""
    services = _services(ctx)
    logs = services.storage.list_abuse_logs()[:limit]
    if not logs:
        console.print("[yellow]No abuse logs.[/]")
        return

    table = Table(title=f"Abuse logs ({len(logs)} shown)")
    table.add_column("When", style="dim")
    table.add_column("User", style="cyan")
    table.add_column("Detected", style="red")
    table.add_column("Text")
    for log in logs:
        table.add_row(
            log.created_at.strftime("%Y-%m-%d %H:%M"),
            log.username,
            ", ".join(log.detected_words),
            log.flagged_text[:60],
        )
    console.print(table)


@main.command(name="create-admin")
@click.argument("username")
@click.argument("email")
@click.password_option()
@click.pass_context
def create_admin(ctx: click.Context, username: str, email: str, password: str):
    """Create an account and give it the admin role."""
    from campusvoice.auth.models import Role
    from campusvoice.errors import CampusVoiceError

    services = _services(ctx)
    try:
        user = services.auth.signup(username, email, password)
        if user.role != Role.admin:
            user = services.auth.set_role(user.id, Role.admin)
    except CampusVoiceError as e:
        console.print(f"[red]Failed:[/] {e}")
        raise SystemExit(1)
    console.print(f"[green]Admin created:[/] {user.username} ({user.id})")
