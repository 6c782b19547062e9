"""
CLI: ``keeper db`` - schema and connectivity commands.
"""

from __future__ import annotations

import typer

from keeper.cli.utils import console, err_console, load_settings, output_rows, run_with_database
from keeper.core.database import Database

app = typer.Typer(no_args_is_help=True)


@app.command()
def migrate(
    dsn: str | None = typer.Option(None, "--dsn", "-d", help="Override KEEPER_DSN"),
) -> None:
    """Apply pending schema migrations."""
    settings = load_settings(dsn)

    async def _migrate(db: Database):
        return await db.migrate()

    result = run_with_database(settings, _migrate)
    for name in result.applied:
        console.print(f"  [green]applied[/green] {name}")
    for name, error in result.errors.items():
        err_console.print(f"  [red]failed[/red] {name}: {error}")
    if not result.success:
        raise typer.Exit(code=1)
    if not result.applied:
        console.print("[dim]Schema is up to date.[/dim]")


@app.command()
def pending(
    dsn: str | None = typer.Option(None, "--dsn", "-d", help="Override KEEPER_DSN"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List migrations that have not been applied yet."""
    settings = load_settings(dsn)

    async def _pending(db: Database):
        return await db.pending_migrations()

    migrations = run_with_database(settings, _pending)
    rows = [{"version": m.version, "name": m.name} for m in migrations]
    output_rows(rows, as_json=json_out, title="Pending Migrations")


@app.command()
def ping(
    dsn: str | None = typer.Option(None, "--dsn", "-d", help="Override KEEPER_DSN"),
    timeout: float | None = typer.Option(None, "--timeout", help="Seconds to wait"),
) -> None:
    """Check database connectivity."""
    settings = load_settings(dsn)

    async def _ping(db: Database) -> bool:
        return await db.ping(timeout)

    if run_with_database(settings, _ping):
        console.print("[green]ok[/green]")
    else:
        err_console.print("[red]unreachable[/red]")
        raise typer.Exit(code=1)
