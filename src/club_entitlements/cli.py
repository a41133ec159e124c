"""Typer CLI for Club-Entitlements."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(name="club-entitlements", help="Club-Entitlements: tenant feature flag resolver")
console = Console()


def _flags_table(title: str, flags) -> Table:
    from club_entitlements.flags.entitlements import leaf_paths

    table = Table(title=title)
    table.add_column("Flag")
    table.add_column("Enabled")
    for path, value in leaf_paths(flags):
        table.add_row(path, "[green]yes[/green]" if value else "[red]no[/red]")
    return table


async def _resolve(club_id: str):
    from club_entitlements.common.config import get_settings
    from club_entitlements.common.database import DatabaseManager
    from club_entitlements.flags.cache import NullFlagCache
    from club_entitlements.flags.service import FeatureFlagService

    settings = get_settings()
    db = DatabaseManager(settings)
    await db.init()
    try:
        svc = FeatureFlagService(settings, cache=NullFlagCache())
        async with db.get_session() as session:
            return await svc.resolve(session, club_id)
    finally:
        await db.close()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Start the Club-Entitlements API server."""
    import uvicorn
    from club_entitlements.app import create_app
    from club_entitlements.common.config import get_settings
    from club_entitlements.common.logging import setup_logging

    setup_logging(get_settings().log_level)
    console.print(f"[bold green]Starting Club-Entitlements on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command()
def resolve(
    club_id: str = typer.Argument(..., help="Club id to resolve"),
):
    """Resolve a club's flags straight from the database (no cache)."""
    flags = asyncio.run(_resolve(club_id))
    console.print(_flags_table(f"Flags for {club_id}", flags))


@app.command()
def check(
    club_id: str = typer.Argument(..., help="Club id"),
    path: str = typer.Argument(..., help="Dot path, e.g. features.golfLottery"),
):
    """Check a single flag path for a club. Exits 1 when disabled."""
    from club_entitlements.flags.entitlements import value_at

    flags = asyncio.run(_resolve(club_id))
    if value_at(flags, path):
        console.print(f"[bold green]ENABLED[/bold green] {path}")
    else:
        console.print(f"[bold red]DISABLED[/bold red] {path}")
        raise typer.Exit(1)


@app.command()
def tiers():
    """Show the legacy subscription tier defaults."""
    from club_entitlements.flags.tier_templates import get_tier_defaults

    for entry in get_tier_defaults():
        console.print(_flags_table(entry["tier"], entry["flags"]))


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check Club-Entitlements server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] v{data['version']}")
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
