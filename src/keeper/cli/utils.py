"""
CLI utility helpers - settings, database lifecycle and output formatting.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from keeper.core.database import Database
from keeper.core.errors import KeeperError, is_retryable
from keeper.core.logging import configure_logging, get_logger
from keeper.core.settings import KeeperSettings

logger = get_logger(__name__)

console = Console()
err_console = Console(stderr=True)

T = TypeVar("T")


# ── Settings / connection helpers ────────────────────────────────────────


def load_settings(dsn: str | None = None) -> KeeperSettings:
    """Build settings from the environment, with an optional DSN override."""
    settings = KeeperSettings()
    if dsn:
        settings = settings.model_copy(update={"dsn": dsn})
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    return settings


def run_with_database(
    settings: KeeperSettings,
    action: Callable[[Database], Awaitable[T]],
) -> T:
    """Open the database, run *action*, close it; exit 1 on ``KeeperError``.

    Startup migrations are skipped; ``keeper db migrate`` applies them
    explicitly.
    """

    async def _run() -> T:
        db = await Database.connect(settings=settings, apply_migrations=False)
        try:
            return await action(db)
        finally:
            await db.close()

    try:
        return asyncio.run(_run())
    except KeeperError as exc:
        logger.debug("cli.command_failed", **exc.to_dict())
        err_console.print(f"[bold red]Error[/bold red] ({exc.__class__.__name__}): {exc.message}")
        if is_retryable(exc):
            err_console.print("[dim]This failure is transient; retrying may succeed.[/dim]")
        raise typer.Exit(code=1) from exc


# ── Output helpers ───────────────────────────────────────────────────────


def output_rows(rows: list[dict[str, Any]], *, as_json: bool = False, title: str = "") -> None:
    """Render a list of dicts as JSON or a Rich table."""
    if as_json:
        console.print_json(json.dumps(rows, default=str))
        return

    if not rows:
        console.print("[dim]No items.[/dim]")
        return

    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*("" if v is None else str(v) for v in row.values()))
    console.print(table)
